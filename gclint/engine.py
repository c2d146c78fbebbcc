# Rule engine: dispatches syntax nodes to the rules registered for their kind and
# collects the diagnostics, plus the host-facing initialize()/analyze() surface.

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from gclint.config import Config, get_enabled_rules
from gclint.errors import AnalysisCancelledError, AnalysisError, RuleFaultError
from gclint.findings.models import Diagnostic
from gclint.findings.sink import DiagnosticSink
from gclint.rules.base import NodeContext, Rule
from gclint.symbols import SymbolOracle
from gclint.syntax import DECLARATION_KINDS, NodeKind, SyntaxNode

logger = logging.getLogger(__name__)

RegisterCallback = Callable[[Rule, Iterable[NodeKind]], None]


class RuleEngine:
    """
    Walks one compilation unit in document order and invokes every rule
    registered for each node's kind.

    The engine holds no per-run state, so one instance can analyse several
    units concurrently from different threads.
    """

    def __init__(self) -> None:
        self._dispatch: dict[NodeKind, list[Rule]] = {}
        self._rules: list[Rule] = []

    @property
    def rules(self) -> list[Rule]:
        return list(self._rules)

    def register(self, rule: Rule, kinds: Optional[Iterable[NodeKind]] = None) -> None:
        """Register rule for the given node kinds (defaults to rule.node_kinds)."""
        kinds = frozenset(rule.node_kinds if kinds is None else kinds)
        if rule not in self._rules:
            self._rules.append(rule)
        for kind in kinds:
            handlers = self._dispatch.setdefault(kind, [])
            if rule not in handlers:
                handlers.append(rule)
        logger.debug("Registered %s for %s", rule.id, sorted(kind.value for kind in kinds))

    def run(
        self,
        unit: SyntaxNode,
        oracle: SymbolOracle,
        *,
        path: Optional[Path] = None,
        source: Optional[bytes] = None,
        cancel: Optional[threading.Event] = None,
        sink: Optional[DiagnosticSink] = None,
    ) -> list[Diagnostic]:
        """
        Analyse one unit and return its diagnostics grouped by rule, then position.

        Diagnostics are buffered locally and only pushed to sink once the whole
        unit completed, so a faulted or cancelled unit contributes nothing.

        Raises:
            RuleFaultError: a rule raised; the cause is chained.
            AnalysisCancelledError: cancel was set during the walk.
        """
        diagnostics: list[Diagnostic] = []
        visited = 0
        # Pre-order walk with an explicit stack; deep expression chains would
        # exhaust the interpreter's recursion limit.
        stack: list[tuple[SyntaxNode, tuple[SyntaxNode, ...]]] = [(unit, ())]
        while stack:
            if cancel is not None and cancel.is_set():
                logger.info("Analysis of %s cancelled after %d node(s)", path or "<unit>", visited)
                raise AnalysisCancelledError(f"Analysis of {path or '<unit>'} was cancelled")
            node, chain = stack.pop()
            visited += 1
            handlers = self._dispatch.get(node.kind)
            if handlers:
                context = NodeContext(declarations=chain, oracle=oracle, path=path, source=source)
                for rule in handlers:
                    diagnostics.extend(self._invoke(rule, node, context))
            if node.kind in DECLARATION_KINDS:
                chain = chain + (node,)
            for child in reversed(node.children):
                stack.append((child, chain))

        diagnostics.sort(key=Diagnostic.sort_key)
        logger.info(
            "Analysed %s: %d node(s), %d diagnostic(s)",
            path or "<unit>",
            visited,
            len(diagnostics),
        )
        if sink is not None:
            sink.extend(diagnostics)
        return diagnostics

    @staticmethod
    def _invoke(rule: Rule, node: SyntaxNode, context: NodeContext) -> list[Diagnostic]:
        try:
            return list(rule.run(node, context))
        except AnalysisError:
            raise
        except Exception as exc:
            raise RuleFaultError(rule.id, node) from exc


def initialize(register: RegisterCallback, config: Optional[Config] = None) -> None:
    """Hand every enabled rule and its node kinds to a host registration callback."""
    for rule in get_enabled_rules(config):
        register(rule, rule.node_kinds)


def create_engine(config: Optional[Config] = None) -> RuleEngine:
    engine = RuleEngine()
    initialize(engine.register, config)
    return engine


def analyze(
    unit: SyntaxNode,
    oracle: SymbolOracle,
    config: Optional[Config] = None,
    **kwargs,
) -> Sequence[Diagnostic]:
    """One-shot convenience: build an engine for config and run it on unit."""
    return create_engine(config).run(unit, oracle, **kwargs)

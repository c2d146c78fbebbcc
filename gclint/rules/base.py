# Rule interface (abstract base class): defines the contract all rules implement.
# Concrete rules (gc_collect, resource_disposal, etc.) subclass Rule, declare the
# node kinds they inspect and implement run().

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Optional

from gclint.findings.models import Diagnostic, Location, RuleDescriptor
from gclint.symbols import SymbolOracle
from gclint.syntax import NodeKind, Span, SyntaxNode


@dataclass(frozen=True)
class NodeContext:
    """
    What a rule sees besides the node itself.

    declarations is the enclosing declaration chain, outermost first (namespace,
    type, method...), not including the node being visited.
    """

    declarations: tuple[SyntaxNode, ...]
    oracle: SymbolOracle
    path: Optional[Path] = None
    source: Optional[bytes] = None

    def snippet(self, span: Span) -> Optional[str]:
        if self.source is None or span.end_byte <= span.start_byte:
            return None
        raw = self.source[span.start_byte : span.end_byte]
        return raw.decode("utf-8", errors="replace")

    def location(self, node: SyntaxNode, span: Optional[Span] = None) -> Location:
        """Location of node, or of a narrower span inside it such as its name token."""
        span = span or node.span
        return Location(
            path=self.path,
            line=span.line,
            column=span.column,
            end_line=span.end_line,
            end_column=span.end_column,
            snippet=self.snippet(span),
        )


class Rule(ABC):
    """
    Abstract base class for all analysis rules.

    Subclasses must define:
    - descriptor: RuleDescriptor with id, title, message template, severity
    - node_kinds: the NodeKinds the engine should hand to run()
    - run(node, context) -> list[Diagnostic]

    Rules are stateless and must not mutate the tree. Returning an empty list
    is the answer for unknown symbols and malformed shapes; raising is reserved
    for bugs and aborts the whole unit.
    """

    descriptor: ClassVar[RuleDescriptor]
    node_kinds: ClassVar[frozenset[NodeKind]]

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def name(self) -> str:
        return self.descriptor.title

    @abstractmethod
    def run(self, node: SyntaxNode, context: NodeContext) -> list[Diagnostic]:
        """
        Inspect one node of a registered kind.

        Args:
            node: The node being visited.
            context: Declaration chain, symbol oracle and location helpers.

        Returns:
            Diagnostics for this node; empty if nothing is wrong.
        """
        ...

    def report(
        self, context: NodeContext, node: SyntaxNode, *arguments: str, at: Optional[Span] = None
    ) -> Diagnostic:
        """Build a diagnostic located at node (or the span at) with the descriptor's formatted message."""
        return Diagnostic(
            rule_id=self.descriptor.id,
            severity=self.descriptor.default_severity,
            location=context.location(node, at),
            message=self.descriptor.format_message(*arguments),
            arguments=tuple(arguments),
            help_link=self.descriptor.help_link,
        )

# Engine-level failures. Unknown symbols and odd tree shapes are not errors: rules
# skip those nodes. Only a rule that raises, or a cancelled run, ends up here.

from __future__ import annotations

from typing import Optional

from gclint.syntax import SyntaxNode


class AnalysisError(Exception):
    """Base class: the compilation unit could not be fully analysed."""


class RuleFaultError(AnalysisError):
    """A rule raised while inspecting a node; the whole unit is abandoned."""

    def __init__(self, rule_id: str, node: Optional[SyntaxNode] = None) -> None:
        self.rule_id = rule_id
        self.node = node
        where = ""
        if node is not None:
            where = f" at {node.kind.value} {node.span.line}:{node.span.column}"
        super().__init__(f"Rule {rule_id} failed{where}")


class AnalysisCancelledError(AnalysisError):
    """The run was cancelled; no diagnostics are reported for the unit."""

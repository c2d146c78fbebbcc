# Explicit GC.Collect() detection: flags calls that force a garbage collection.

from __future__ import annotations

from gclint.findings.models import Diagnostic, RuleDescriptor, Severity
from gclint.rules.base import NodeContext, Rule
from gclint.rules.helpers import callee, names_gc_type
from gclint.symbols import GC_TYPE
from gclint.syntax import NodeKind, SyntaxNode

COLLECT_METHOD = "Collect"


class AvoidGCCollectRule(Rule):
    """Detects GC.Collect(), System.GC.Collect() and aliases the oracle resolves to System.GC."""

    descriptor = RuleDescriptor(
        id="RULE-001",
        title="Avoid calling GC.Collect()",
        message_format="Avoid calling GC.Collect(); the runtime schedules garbage collections better than application code",
        category="Performance",
        default_severity=Severity.WARNING,
        description=(
            "Forcing a collection blocks threads, promotes live objects to older generations "
            "and usually makes memory behaviour worse."
        ),
    )
    node_kinds = frozenset({NodeKind.INVOCATION})

    def run(self, node: SyntaxNode, context: NodeContext) -> list[Diagnostic]:
        target = callee(node)
        if target is None or target.kind is not NodeKind.MEMBER_ACCESS or target.name != COLLECT_METHOD:
            return []
        if names_gc_type(target.child_by_field_name("expression")):
            return [self.report(context, node)]
        symbol = context.oracle.resolve(target)
        if symbol is not None and symbol.containing_type == GC_TYPE:
            return [self.report(context, node)]
        return []

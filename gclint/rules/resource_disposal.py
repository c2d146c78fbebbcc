# Undisposed IDisposable detection: locals of disposable types that are neither
# disposed nor handed off before the method ends.
#
# Both checks are flow-insensitive text searches over the method body. Known
# blind spots: branches and loops are not distinguished (a Dispose() on one path
# counts for all), aliases are not tracked (var b = a; b.Dispose() leaves a
# flagged), reassignment is ignored, and passing the variable to *any* call is
# taken as ownership transfer, which hides leaks when the callee merely reads it.

from __future__ import annotations

import logging

from gclint.findings.models import Diagnostic, RuleDescriptor, Severity
from gclint.rules.base import NodeContext, Rule
from gclint.rules.helpers import is_identifier, member_call_receiver, passes_identifier
from gclint.symbols import DISPOSABLE
from gclint.syntax import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)

DISPOSE_METHOD = "Dispose"


def _declares(declaration: SyntaxNode, name: str) -> bool:
    return any(d.name == name for d in declaration.children_of_kind(NodeKind.VARIABLE_DECLARATOR))


def is_disposed(method: SyntaxNode, name: str) -> bool:
    """
    name is acquired by a using statement/declaration, or ``name.Dispose()``
    appears as a statement of its own.
    """
    for statement in method.descendants(NodeKind.USING_STATEMENT):
        declaration = statement.child_by_field_name("declaration")
        if declaration is not None and _declares(declaration, name):
            return True
        if is_identifier(statement.child_by_field_name("expression"), name):
            return True

    for invocation in method.descendants(NodeKind.INVOCATION):
        receiver = member_call_receiver(invocation, DISPOSE_METHOD)
        if not is_identifier(receiver, name):
            continue
        if invocation.parent is not None and invocation.parent.kind is NodeKind.EXPRESSION_STATEMENT:
            return True
    return False


def has_escaped(method: SyntaxNode, name: str) -> bool:
    """name is returned directly, or passed directly as an argument to any call."""
    for statement in method.descendants(NodeKind.RETURN_STATEMENT):
        if is_identifier(statement.child_by_field_name("expression"), name):
            return True
    return any(passes_identifier(call, name) for call in method.descendants(NodeKind.INVOCATION))


class ResourceDisposalRule(Rule):
    """Reports local variables of IDisposable types that are never disposed or handed off."""

    descriptor = RuleDescriptor(
        id="RULE-003",
        title="Dispose IDisposable objects",
        message_format="Object of type '{0}' is not disposed; wrap it in a using statement or call Dispose()",
        category="Usage",
        default_severity=Severity.WARNING,
        description=(
            "Types implementing IDisposable hold resources that the garbage collector does not "
            "release promptly. Dispose them deterministically."
        ),
    )
    node_kinds = frozenset({NodeKind.METHOD_DECLARATION})

    def run(self, node: SyntaxNode, context: NodeContext) -> list[Diagnostic]:
        oracle = context.oracle
        findings: list[Diagnostic] = []
        for declaration in node.descendants(NodeKind.LOCAL_DECLARATION):
            type_node = declaration.child_by_field_name("type")
            if type_node is None:
                continue
            symbol = oracle.type_of(type_node)
            if symbol is None:
                logger.debug("Skipping local declaration: type %r unresolved", type_node.text)
                continue
            if not oracle.implements(symbol, DISPOSABLE):
                continue
            for declarator in declaration.children_of_kind(NodeKind.VARIABLE_DECLARATOR):
                name = declarator.name
                if not name:
                    continue
                if is_disposed(node, name) or has_escaped(node, name):
                    continue
                findings.append(self.report(context, declarator, symbol.name))
        return findings

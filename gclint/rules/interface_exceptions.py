# Interface contracts that throw: interface methods whose body throws or whose
# documentation lists <exception> tags.

from __future__ import annotations

from gclint.findings.models import Diagnostic, RuleDescriptor, Severity
from gclint.rules.base import NodeContext, Rule
from gclint.syntax import TYPE_DECLARATION_KINDS, NodeKind, SyntaxNode

EXCEPTION_DOC_TAG = "exception"


def has_throw(method: SyntaxNode) -> bool:
    """Block or expression body contains a throw statement or throw expression."""
    body = method.child_by_field_name("body")
    if body is None:
        return False
    return any(n.kind in (NodeKind.THROW_STATEMENT, NodeKind.THROW_EXPRESSION) for n in body.walk())


def has_documented_exceptions(method: SyntaxNode) -> bool:
    doc = method.documentation
    return doc is not None and EXCEPTION_DOC_TAG in doc.doc_tags()


def display_name(method: SyntaxNode) -> str:
    """Fully qualified display form, e.g. ``Acme.Storage.IStore.Load(string, int)``."""
    scopes = []
    for ancestor in method.ancestors():
        if ancestor.kind in TYPE_DECLARATION_KINDS or ancestor.kind is NodeKind.NAMESPACE_DECLARATION:
            scopes.append(ancestor.name or "")
        elif ancestor.kind is NodeKind.COMPILATION_UNIT and ancestor.name:
            scopes.append(ancestor.name)
    parameter_types = []
    for parameter in method.children_of_kind(NodeKind.PARAMETER):
        type_node = parameter.child_by_field_name("type")
        parameter_types.append(type_node.text if type_node is not None and type_node.text else "?")
    qualified = ".".join([s for s in reversed(scopes) if s] + [method.name or ""])
    return f"{qualified}({', '.join(parameter_types)})"


class InterfaceMethodExceptionRule(Rule):
    """Interface members should describe failure through return values, not exceptions."""

    descriptor = RuleDescriptor(
        id="RULE-004",
        title="Interface methods should not throw exceptions",
        message_format="Interface method '{0}' throws or documents exceptions",
        category="Design",
        default_severity=Severity.WARNING,
        description=(
            "Exceptions are not part of an interface's type signature; implementations and callers "
            "cannot rely on them. Prefer result types or Try-pattern methods."
        ),
    )
    node_kinds = frozenset({NodeKind.METHOD_DECLARATION})

    def run(self, node: SyntaxNode, context: NodeContext) -> list[Diagnostic]:
        parent = node.parent
        if parent is None or parent.kind is not NodeKind.INTERFACE_DECLARATION:
            return []
        if has_throw(node) or has_documented_exceptions(node):
            return [self.report(context, node, display_name(node), at=node.name_span)]
        return []

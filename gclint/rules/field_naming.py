# Private field naming: instance fields must be _camelCase.

from __future__ import annotations

import re

from gclint.findings.models import Diagnostic, RuleDescriptor, Severity
from gclint.rules.base import NodeContext, Rule
from gclint.syntax import TYPE_DECLARATION_KINDS, NodeKind, SyntaxNode

FIELD_NAME_PATTERN = re.compile(r"_[a-z][a-zA-Z0-9]*")
EXEMPT_MODIFIERS = frozenset({"static", "const", "readonly"})


def is_valid_field_name(name: str) -> bool:
    """One leading underscore, a lowercase ASCII letter, then ASCII letters/digits only."""
    return bool(name) and FIELD_NAME_PATTERN.fullmatch(name) is not None


class FieldNamingConventionRule(Rule):
    descriptor = RuleDescriptor(
        id="RULE-005",
        title="Private fields should be named _camelCase",
        message_format="Field '{0}' should start with an underscore followed by a lowercase letter",
        category="Naming",
        default_severity=Severity.WARNING,
        description="Private instance fields use an underscore prefix and camelCase, e.g. _itemCount.",
    )
    node_kinds = frozenset({NodeKind.FIELD_DECLARATION})

    def run(self, node: SyntaxNode, context: NodeContext) -> list[Diagnostic]:
        if node.modifiers & EXEMPT_MODIFIERS:
            return []
        owner = node.parent
        if owner is None or owner.kind not in TYPE_DECLARATION_KINDS:
            return []
        if owner.kind in (NodeKind.INTERFACE_DECLARATION, NodeKind.ENUM_DECLARATION):
            return []
        # Only an explicit private keyword counts, on the field or its type.
        if "private" not in node.modifiers and "private" not in owner.modifiers:
            return []

        return [
            self.report(context, declarator, declarator.name, at=declarator.name_span)
            for declarator in node.children_of_kind(NodeKind.VARIABLE_DECLARATOR)
            if declarator.name and not is_valid_field_name(declarator.name)
        ]

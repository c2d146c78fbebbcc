# Syntax Model: immutable, parent-linked tree of typed nodes consumed by the rules.

from gclint.syntax.nodes import DECLARATION_KINDS, TYPE_DECLARATION_KINDS, NodeKind, Span, SyntaxNode, dotted_name

__all__ = [
    "DECLARATION_KINDS",
    "TYPE_DECLARATION_KINDS",
    "NodeKind",
    "Span",
    "SyntaxNode",
    "dotted_name",
]

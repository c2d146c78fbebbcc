# Small syntactic queries shared by the rules (calls, arguments, names).

from __future__ import annotations

from typing import Iterator, Optional

from gclint.syntax import NodeKind, SyntaxNode, dotted_name

# Spellings of the runtime GC class accepted without asking the oracle.
GC_RECEIVER_NAMES = frozenset({"GC", "System.GC", "global::System.GC"})


def is_identifier(node: Optional[SyntaxNode], name: str) -> bool:
    return node is not None and node.kind is NodeKind.IDENTIFIER and node.text == name


def callee(invocation: SyntaxNode) -> Optional[SyntaxNode]:
    """The expression being called, e.g. the ``GC.Collect`` in ``GC.Collect()``."""
    return invocation.child_by_field_name("expression")


def member_call_receiver(invocation: SyntaxNode, member: str) -> Optional[SyntaxNode]:
    """Receiver of ``receiver.member(...)``, or None if the call has another shape."""
    target = callee(invocation)
    if target is None or target.kind is not NodeKind.MEMBER_ACCESS or target.name != member:
        return None
    return target.child_by_field_name("expression")


def argument_expressions(call: SyntaxNode) -> Iterator[SyntaxNode]:
    """Direct argument expressions of an invocation or object creation."""
    for argument in call.children_of_kind(NodeKind.ARGUMENT):
        expression = argument.child_by_field_name("expression")
        if expression is not None:
            yield expression


def passes_identifier(call: SyntaxNode, name: str) -> bool:
    return any(is_identifier(expression, name) for expression in argument_expressions(call))


def names_gc_type(receiver: Optional[SyntaxNode]) -> bool:
    return dotted_name(receiver) in GC_RECEIVER_NAMES

# Small factory for assembling syntax trees by hand, without a parser.

from __future__ import annotations

from typing import Iterable, Optional

from gclint.syntax.nodes import NodeKind, Span, SyntaxNode


def node(
    kind: NodeKind,
    *children: SyntaxNode,
    line: int = 1,
    column: int = 1,
    text: Optional[str] = None,
    name: Optional[str] = None,
    modifiers: Iterable[str] = (),
    field: Optional[str] = None,
) -> SyntaxNode:
    """Build one node; the span ends where its last child ends."""
    end_line, end_column = line, column
    for child in children:
        if child.span.sort_key()[2:] > (end_line, end_column):
            end_line, end_column = child.span.end_line, child.span.end_column
    span = Span(line, column, end_line, end_column)
    return SyntaxNode(kind, span, children, text=text, name=name, modifiers=modifiers, field=field)


def identifier(text: str, *, field: Optional[str] = None, line: int = 1, column: int = 1) -> SyntaxNode:
    return node(NodeKind.IDENTIFIER, text=text, field=field, line=line, column=column)


def member_access(
    receiver: SyntaxNode, member: str, *, field: Optional[str] = None, line: int = 1, column: int = 1
) -> SyntaxNode:
    """``receiver.member``."""
    return node(
        NodeKind.MEMBER_ACCESS,
        _with_field(receiver, "expression"),
        identifier(member, field="name", line=line, column=column),
        name=member,
        field=field,
        line=line,
        column=column,
    )


def invocation(
    callee: SyntaxNode, *arguments: SyntaxNode, field: Optional[str] = None, line: int = 1, column: int = 1
) -> SyntaxNode:
    """``callee(arg, ...)``; each argument expression is wrapped in an Argument node."""
    wrapped = [
        node(NodeKind.ARGUMENT, _with_field(arg, "expression"), field="argument", line=line, column=column)
        for arg in arguments
    ]
    return node(
        NodeKind.INVOCATION,
        _with_field(callee, "expression"),
        *wrapped,
        field=field,
        line=line,
        column=column,
    )


def _with_field(child: SyntaxNode, field: str) -> SyntaxNode:
    """Return child playing the given role, copying the subtree if it plays another one."""
    if child.field == field and child.parent is None:
        return child
    return _copy(child, field)


def _copy(source: SyntaxNode, field: Optional[str]) -> SyntaxNode:
    return SyntaxNode(
        source.kind,
        source.span,
        [_copy(child, child.field) for child in source.children],
        text=source.text,
        name=source.name,
        modifiers=source.modifiers,
        field=field,
    )

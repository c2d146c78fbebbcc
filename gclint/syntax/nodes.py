# Syntax node types: NodeKind tags, source spans, and the immutable SyntaxNode tree.
# The analyzer never parses; a host builds these nodes (see gclint.frontend) and
# rules only read them.

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Optional


class NodeKind(str, Enum):
    """Closed set of node kinds the rules can dispatch on."""

    COMPILATION_UNIT = "CompilationUnit"
    NAMESPACE_DECLARATION = "NamespaceDeclaration"
    USING_DIRECTIVE = "UsingDirective"
    CLASS_DECLARATION = "ClassDeclaration"
    STRUCT_DECLARATION = "StructDeclaration"
    RECORD_DECLARATION = "RecordDeclaration"
    INTERFACE_DECLARATION = "InterfaceDeclaration"
    ENUM_DECLARATION = "EnumDeclaration"
    METHOD_DECLARATION = "MethodDeclaration"
    FIELD_DECLARATION = "FieldDeclaration"
    PARAMETER = "Parameter"
    LOCAL_DECLARATION = "LocalDeclaration"
    VARIABLE_DECLARATOR = "VariableDeclarator"
    BLOCK = "Block"
    EXPRESSION_STATEMENT = "ExpressionStatement"
    RETURN_STATEMENT = "ReturnStatement"
    THROW_STATEMENT = "ThrowStatement"
    THROW_EXPRESSION = "ThrowExpression"
    USING_STATEMENT = "ScopedAcquisitionStatement"
    UNSAFE_BLOCK = "UnsafeBlock"
    FIXED_STATEMENT = "FixedStatement"
    INVOCATION = "Invocation"
    ARGUMENT = "Argument"
    MEMBER_ACCESS = "MemberAccess"
    OBJECT_CREATION = "ObjectCreation"
    IDENTIFIER = "Identifier"
    STRING_LITERAL = "StringLiteral"
    TYPE_REFERENCE = "TypeReference"
    ATTRIBUTE = "Attribute"
    DOC_COMMENT = "DocComment"
    OTHER = "Other"


TYPE_DECLARATION_KINDS = frozenset(
    {
        NodeKind.CLASS_DECLARATION,
        NodeKind.STRUCT_DECLARATION,
        NodeKind.RECORD_DECLARATION,
        NodeKind.INTERFACE_DECLARATION,
        NodeKind.ENUM_DECLARATION,
    }
)

DECLARATION_KINDS = TYPE_DECLARATION_KINDS | {
    NodeKind.NAMESPACE_DECLARATION,
    NodeKind.METHOD_DECLARATION,
    NodeKind.FIELD_DECLARATION,
}

# Start tags inside XML documentation, e.g. <exception cref="...">.
_DOC_TAG_RE = re.compile(r"<\s*([A-Za-z_][\w.:-]*)[^<>]*?>")


@dataclass(frozen=True)
class Span:
    """1-based line/column range of a node in its compilation unit."""

    line: int
    column: int
    end_line: int
    end_column: int
    start_byte: int = 0
    end_byte: int = 0

    def sort_key(self) -> tuple[int, int, int, int]:
        return (self.line, self.column, self.end_line, self.end_column)


_NO_SPAN = Span(1, 1, 1, 1)


class SyntaxNode:
    """
    One node of the syntax tree.

    Attributes:
        kind: NodeKind tag used by the engine for dispatch.
        span: Source range of the node.
        children: Ordered child nodes (document order).
        parent: Enclosing node, or None for the root. Set exactly once, when the
                node is passed as a child to its parent's constructor.
        text: Literal text for leaves: identifier spelling, the unescaped value
              of a string literal, the written form of a type reference, the raw
              text of a documentation comment, the name of an attribute.
        name: Declared name for declarations, parameters and declarators; the
              accessed member name for member accesses.
        name_span: Source range of the declared name token, when known.
        modifiers: Modifier keywords (private, static, readonly, extern, ...).
        field: Role of this node inside its parent ("expression", "arguments",
               "type", "body", "documentation", ...), in the spirit of
               tree-sitter field names.

    Nodes are immutable once constructed; the only late write is the parent
    link, which the parent performs on construction.
    """

    __slots__ = ("kind", "span", "children", "parent", "text", "name", "name_span", "modifiers", "field")

    def __init__(
        self,
        kind: NodeKind,
        span: Optional[Span] = None,
        children: Iterable[SyntaxNode] = (),
        *,
        text: Optional[str] = None,
        name: Optional[str] = None,
        name_span: Optional[Span] = None,
        modifiers: Iterable[str] = (),
        field: Optional[str] = None,
    ) -> None:
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "span", span or _NO_SPAN)
        object.__setattr__(self, "children", tuple(children))
        object.__setattr__(self, "parent", None)
        object.__setattr__(self, "text", text)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "name_span", name_span)
        object.__setattr__(self, "modifiers", frozenset(modifiers))
        object.__setattr__(self, "field", field)
        for child in self.children:
            child._attach(self)

    def _attach(self, parent: SyntaxNode) -> None:
        if self.parent is not None:
            raise ValueError(f"{self.kind.value} node already has a parent")
        object.__setattr__(self, "parent", parent)

    def __setattr__(self, key: str, value: object) -> None:
        raise AttributeError(f"SyntaxNode is immutable; cannot set {key!r}")

    def __repr__(self) -> str:
        label = self.name or self.text
        suffix = f" {label!r}" if label is not None else ""
        return f"<{self.kind.value}{suffix} @{self.span.line}:{self.span.column}>"

    # --- navigation -----------------------------------------------------------

    def child_by_field_name(self, field: str) -> Optional[SyntaxNode]:
        """Return the first child playing the given role, or None."""
        for child in self.children:
            if child.field == field:
                return child
        return None

    def children_by_field_name(self, field: str) -> list[SyntaxNode]:
        return [child for child in self.children if child.field == field]

    def children_of_kind(self, *kinds: NodeKind) -> list[SyntaxNode]:
        return [child for child in self.children if child.kind in kinds]

    def walk(self) -> Iterator[SyntaxNode]:
        """Yield this node and every descendant in document order (pre-order DFS)."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def descendants(self, *kinds: NodeKind) -> Iterator[SyntaxNode]:
        """Yield strict descendants, optionally restricted to the given kinds."""
        walker = self.walk()
        next(walker)
        for node in walker:
            if not kinds or node.kind in kinds:
                yield node

    def ancestors(self) -> Iterator[SyntaxNode]:
        """Yield the parent chain, nearest first."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def first_ancestor(self, *kinds: NodeKind) -> Optional[SyntaxNode]:
        for node in self.ancestors():
            if node.kind in kinds:
                return node
        return None

    def has_ancestor(self, *kinds: NodeKind) -> bool:
        return self.first_ancestor(*kinds) is not None

    # --- declaration helpers --------------------------------------------------

    @property
    def documentation(self) -> Optional[SyntaxNode]:
        """Leading documentation comment attached to a declaration, if any."""
        return self.child_by_field_name("documentation")

    @property
    def attributes(self) -> list[SyntaxNode]:
        return self.children_of_kind(NodeKind.ATTRIBUTE)

    def doc_tags(self) -> list[str]:
        """Names of the XML start tags in a documentation comment, in order."""
        if self.kind is not NodeKind.DOC_COMMENT or not self.text:
            return []
        return _DOC_TAG_RE.findall(self.text)


def dotted_name(node: Optional[SyntaxNode]) -> Optional[str]:
    """
    Return the dotted spelling of an identifier or member-access chain.

    ``GC`` -> "GC", ``System.GC`` -> "System.GC". Anything that is not a pure
    name chain (calls, indexers, literals) returns None.
    """
    parts: list[str] = []
    while node is not None and node.kind is NodeKind.MEMBER_ACCESS:
        if node.name is None:
            return None
        parts.append(node.name)
        node = node.child_by_field_name("expression")
    if node is None or node.kind is not NodeKind.IDENTIFIER or node.text is None:
        return None
    parts.append(node.text)
    return ".".join(reversed(parts))

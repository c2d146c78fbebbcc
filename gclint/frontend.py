# C# frontend: lowers tree-sitter-c-sharp trees into the analyzer's Syntax Model.
# Only the shapes the rules inspect get dedicated node kinds; everything else is
# kept as Other nodes so descendants (string literals, calls) stay reachable.

from __future__ import annotations

import logging
import re
from typing import Any, Generator, Iterable, Optional, Sequence

import tree_sitter
from tree_sitter import Node as TSNode

from gclint.parser import parse_bytes
from gclint.syntax import NodeKind, Span, SyntaxNode

logger = logging.getLogger(__name__)

# A lowering step: yields (node, field, docs) requests, receives lowered nodes.
_Steps = Generator[tuple[TSNode, Optional[str], tuple[TSNode, ...]], Optional[list[SyntaxNode]], Any]

TYPE_DECLARATIONS: dict[str, NodeKind] = {
    "class_declaration": NodeKind.CLASS_DECLARATION,
    "struct_declaration": NodeKind.STRUCT_DECLARATION,
    "record_struct_declaration": NodeKind.STRUCT_DECLARATION,
    "record_declaration": NodeKind.RECORD_DECLARATION,
    "interface_declaration": NodeKind.INTERFACE_DECLARATION,
    "enum_declaration": NodeKind.ENUM_DECLARATION,
}

MODIFIER_KEYWORDS = frozenset(
    {
        "abstract", "async", "const", "extern", "file", "internal", "new", "override",
        "partial", "private", "protected", "public", "readonly", "required", "sealed",
        "static", "unsafe", "virtual", "volatile", "ref", "out", "in", "this", "params",
        "scoped",
    }
)

_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "\\": "\\",
    '"': '"',
    "'": "'",
}
_ESCAPE_RE = re.compile(r"\\(u[0-9A-Fa-f]{4}|U[0-9A-Fa-f]{8}|x[0-9A-Fa-f]{1,4}|.)", re.DOTALL)


def _unescape(body: str) -> str:
    def repl(m: re.Match) -> str:
        seq = m.group(1)
        if seq[0] in "uUx" and len(seq) > 1:
            try:
                return chr(int(seq[1:], 16))
            except ValueError:
                return m.group(0)
        return _ESCAPES.get(seq, seq)

    return _ESCAPE_RE.sub(repl, body)


def string_literal_value(raw: str) -> str:
    """
    Value of a C# string literal as the compiler sees it.

    Handles regular ("a\\tb"), verbatim (@"C:\\dir", doubled quotes) and raw
    (\"\"\"...\"\"\") literals, with or without the u8 suffix.
    """
    text = raw.strip()
    if text.endswith("u8"):
        text = text[:-2]
    if text.startswith('@"'):
        return text[2:-1].replace('""', '"')
    if text.startswith('"""'):
        quotes = len(text) - len(text.lstrip('"'))
        body = text[quotes:-quotes] if len(text) >= 2 * quotes else ""
        if "\n" not in body:
            return body
        lines = body.replace("\r\n", "\n").split("\n")
        indent = lines[-1]
        content = [line[len(indent) :] if line.startswith(indent) else line.lstrip() for line in lines[1:-1]]
        return "\n".join(content)
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return _unescape(text[1:-1])
    return text


def _is_doc_comment(text: str) -> bool:
    return text.startswith("///") or (text.startswith("/**") and not text.startswith("/**/"))


class _Lowering:
    """One-shot converter from a tree-sitter tree to SyntaxNodes for one source buffer."""

    def __init__(self, source: bytes) -> None:
        self.source = source
        self.file_namespace: Optional[str] = None

    # --- primitives -----------------------------------------------------------

    def text(self, ts: TSNode) -> str:
        return self.source[ts.start_byte : ts.end_byte].decode("utf-8", errors="replace")

    @staticmethod
    def span(ts: TSNode, last: Optional[TSNode] = None) -> Span:
        end = last or ts
        return Span(
            line=ts.start_point[0] + 1,
            column=ts.start_point[1] + 1,
            end_line=end.end_point[0] + 1,
            end_column=end.end_point[1] + 1,
            start_byte=ts.start_byte,
            end_byte=end.end_byte,
        )

    def modifiers(self, ts: TSNode) -> set[str]:
        found: set[str] = set()
        for child in ts.children:
            if child.type in ("modifier", "parameter_modifier"):
                found.add(self.text(child).strip())
            elif not child.is_named and child.type in MODIFIER_KEYWORDS:
                found.add(child.type)
        return found

    @staticmethod
    def named(ts: TSNode) -> list[TSNode]:
        return [child for child in ts.named_children if child.type != "comment"]

    @staticmethod
    def first_of_type(ts: TSNode, types: Sequence[str]) -> Optional[TSNode]:
        for child in ts.named_children:
            if child.type in types:
                return child
        return None

    def simple_name(self, ts: TSNode) -> str:
        if ts.type == "generic_name" and ts.named_children:
            return self.text(ts.named_children[0])
        return self.text(ts)

    def type_ref(self, ts: TSNode, field: Optional[str] = "type") -> SyntaxNode:
        return SyntaxNode(NodeKind.TYPE_REFERENCE, self.span(ts), text=self.text(ts).strip(), field=field)

    # --- dispatch -------------------------------------------------------------
    # Handlers are generators. They request child subtrees through visit() and
    # get the lowered nodes sent back, so tree depth never reaches the
    # interpreter stack. Leaf handlers may return their list directly.

    def lower(self, ts: TSNode, field: Optional[str] = None, docs: Sequence[TSNode] = ()) -> list[SyntaxNode]:
        """Lower one subtree, building nodes post-order from an explicit stack."""
        work = self.start(ts, field, tuple(docs))
        if isinstance(work, list):
            return work
        stack: list[_Steps] = [work]
        lowered: Optional[list[SyntaxNode]] = None
        while True:
            try:
                request = stack[-1].send(lowered)
            except StopIteration as stop:
                stack.pop()
                lowered = stop.value
                if not stack:
                    return lowered
                continue
            work = self.start(*request)
            if isinstance(work, list):
                lowered = work
            else:
                stack.append(work)
                lowered = None

    def start(self, ts: TSNode, field: Optional[str], docs: tuple[TSNode, ...]) -> _Steps | list[SyntaxNode]:
        if ts.type in TYPE_DECLARATIONS:
            return self.type_declaration(ts, field, docs)
        handler = getattr(self, f"lower_{ts.type}", self.lower_other)
        return handler(ts, field, docs)

    @staticmethod
    def visit(ts: TSNode, field: Optional[str] = None, docs: Sequence[TSNode] = ()) -> _Steps:
        lowered = yield (ts, field, tuple(docs))
        return lowered

    def lower_other(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        children = yield from self.children(ts)
        return [SyntaxNode(NodeKind.OTHER, self.span(ts), children, field=field)]

    def children(self, ts: TSNode, skip: Optional[TSNode] = None) -> _Steps:
        """Lower named children, attaching /// comments to the declaration that follows."""
        out: list[SyntaxNode] = []
        pending: list[TSNode] = []
        for child in ts.named_children:
            if skip is not None and child == skip:
                continue
            if child.type == "comment":
                if _is_doc_comment(self.text(child)):
                    pending.append(child)
                continue
            out.extend((yield from self.visit(child, docs=pending)))
            pending = []
        return out

    # --- declarations ---------------------------------------------------------

    def documentation(self, docs: Sequence[TSNode]) -> Optional[SyntaxNode]:
        if not docs:
            return None
        lines: list[str] = []
        for comment in docs:
            raw = self.text(comment)
            if raw.startswith("/**"):
                for line in raw[3:-2].splitlines():
                    lines.append(line.strip().lstrip("*").strip())
            else:
                lines.append(raw[3:].strip())
        return SyntaxNode(
            NodeKind.DOC_COMMENT,
            self.span(docs[0], docs[-1]),
            text="\n".join(lines),
            field="documentation",
        )

    def declaration_prefix(self, ts: TSNode, docs: Sequence[TSNode]) -> _Steps:
        """Documentation node (if any) followed by the declaration's attributes."""
        docs = list(docs)
        for child in ts.named_children:
            if child.type == "comment" and _is_doc_comment(self.text(child)):
                docs.append(child)
            elif child.type not in ("comment", "attribute_list"):
                break
        prefix: list[SyntaxNode] = []
        doc = self.documentation(docs)
        if doc is not None:
            prefix.append(doc)
        for child in ts.named_children:
            if child.type == "attribute_list":
                prefix.extend((yield from self.lower_attribute_list(child)))
        return prefix

    def type_declaration(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        name = ts.child_by_field_name("name")
        body = ts.child_by_field_name("body") or self.first_of_type(
            ts, ("declaration_list", "enum_member_declaration_list")
        )
        children = yield from self.declaration_prefix(ts, docs)
        for child in ts.named_children:
            if child.type in ("attribute_list", "modifier", "comment") or child == name:
                continue
            if child.type == "base_list":
                children.extend(self.base_types(child))
            elif child == body:
                children.extend((yield from self.children(child)))
            else:
                children.extend((yield from self.visit(child)))
        node = SyntaxNode(
            TYPE_DECLARATIONS[ts.type],
            self.span(ts),
            children,
            name=self.text(name) if name is not None else None,
            name_span=self.span(name) if name is not None else None,
            modifiers=self.modifiers(ts),
            field=field,
        )
        return [node]

    def base_types(self, ts: TSNode) -> list[SyntaxNode]:
        bases = []
        for child in self.named(ts):
            if child.type == "primary_constructor_base_type":
                inner = child.child_by_field_name("type") or (child.named_children[0] if child.named_children else None)
                if inner is not None:
                    bases.append(self.type_ref(inner, field="base"))
            else:
                bases.append(self.type_ref(child, field="base"))
        return bases

    def lower_method_declaration(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        name = ts.child_by_field_name("name")
        returns = ts.child_by_field_name("returns") or ts.child_by_field_name("type")
        parameters = ts.child_by_field_name("parameters") or self.first_of_type(ts, ("parameter_list",))
        body = ts.child_by_field_name("body") or self.first_of_type(ts, ("block", "arrow_expression_clause"))
        children = yield from self.declaration_prefix(ts, docs)
        for child in ts.named_children:
            if child.type in ("attribute_list", "modifier", "comment") or child == name:
                continue
            if child == returns:
                children.append(self.type_ref(child))
            elif child == parameters:
                children.extend((yield from self.lower_parameter_list(child)))
            elif child == body:
                children.extend((yield from self.visit(child, field="body")))
            else:
                children.extend((yield from self.visit(child)))
        return [
            SyntaxNode(
                NodeKind.METHOD_DECLARATION,
                self.span(ts),
                children,
                name=self.text(name) if name is not None else None,
                name_span=self.span(name) if name is not None else None,
                modifiers=self.modifiers(ts),
                field=field,
            )
        ]

    def lower_field_declaration(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        children = yield from self.declaration_prefix(ts, docs)
        for child in ts.named_children:
            if child.type in ("attribute_list", "modifier", "comment"):
                continue
            if child.type == "variable_declaration":
                children.extend((yield from self.variable_declaration(child)))
            else:
                children.extend((yield from self.visit(child)))
        return [
            SyntaxNode(NodeKind.FIELD_DECLARATION, self.span(ts), children, modifiers=self.modifiers(ts), field=field)
        ]

    def lower_namespace_declaration(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        name = ts.child_by_field_name("name")
        body = ts.child_by_field_name("body") or self.first_of_type(ts, ("declaration_list",))
        # File-scoped namespaces hold their members directly.
        if body is not None:
            children = yield from self.children(body)
        else:
            children = yield from self.children(ts, skip=name)
        return [
            SyntaxNode(
                NodeKind.NAMESPACE_DECLARATION,
                self.span(ts),
                children,
                name=self.text(name) if name is not None else None,
                name_span=self.span(name) if name is not None else None,
                field=field,
            )
        ]

    def lower_file_scoped_namespace_declaration(
        self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]
    ) -> _Steps:
        name = ts.child_by_field_name("name")
        members = [child for child in ts.named_children if child != name]
        if all(child.type == "comment" for child in members):
            # Declarations follow as siblings; record the namespace on the unit.
            self.file_namespace = self.text(name) if name is not None else None
            return []
        return (yield from self.lower_namespace_declaration(ts, field, docs))

    def lower_declaration_list(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        return (yield from self.children(ts))

    def lower_using_directive(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> list[SyntaxNode]:
        named = self.named(ts)
        alias = ts.child_by_field_name("name")
        if alias is None:
            name_equals = self.first_of_type(ts, ("name_equals",))
            if name_equals is not None and name_equals.named_children:
                alias = name_equals.named_children[0]
            elif len(named) > 1 and any(child.type == "=" for child in ts.children):
                alias = named[0]
        target = named[-1] if named else None
        if target is not None and alias is not None and target == alias:
            target = None
        return [
            SyntaxNode(
                NodeKind.USING_DIRECTIVE,
                self.span(ts),
                name=self.text(alias) if alias is not None else None,
                text=self.text(target) if target is not None else None,
                field=field,
            )
        ]

    # --- attributes and parameters --------------------------------------------

    def lower_attribute_list(self, ts: TSNode, field: Optional[str] = None, docs: Sequence[TSNode] = ()) -> _Steps:
        attributes = []
        for child in self.named(ts):
            if child.type != "attribute":
                continue
            name = child.child_by_field_name("name") or (child.named_children[0] if child.named_children else None)
            lowered: list[SyntaxNode] = []
            for arg in self.named(child):
                if arg != name:
                    lowered.extend((yield from self.visit(arg)))
            attributes.append(
                SyntaxNode(
                    NodeKind.ATTRIBUTE,
                    self.span(child),
                    lowered,
                    text=self.text(name) if name is not None else None,
                )
            )
        return attributes

    def lower_parameter_list(self, ts: TSNode, field: Optional[str] = None, docs: Sequence[TSNode] = ()) -> _Steps:
        out: list[SyntaxNode] = []
        for child in self.named(ts):
            out.extend((yield from self.visit(child)))
        return out

    def lower_parameter(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        name = ts.child_by_field_name("name")
        type_node = ts.child_by_field_name("type")
        children: list[SyntaxNode] = []
        for child in self.named(ts):
            if child.type == "attribute_list":
                children.extend((yield from self.lower_attribute_list(child)))
            elif child.type in ("modifier", "parameter_modifier") or child == name:
                continue
            elif child == type_node:
                children.append(self.type_ref(child))
            else:
                children.extend((yield from self.visit(child)))
        return [
            SyntaxNode(
                NodeKind.PARAMETER,
                self.span(ts),
                children,
                name=self.text(name) if name is not None else None,
                name_span=self.span(name) if name is not None else None,
                modifiers=self.modifiers(ts),
                field=field,
            )
        ]

    # --- variables ------------------------------------------------------------

    def variable_declaration(self, ts: TSNode) -> _Steps:
        """Type reference followed by one VariableDeclarator per declared name."""
        named = self.named(ts)
        type_node = ts.child_by_field_name("type") or (named[0] if named else None)
        out: list[SyntaxNode] = []
        for child in named:
            if child == type_node:
                out.append(self.type_ref(child))
            elif child.type == "variable_declarator":
                out.append((yield from self.declarator(child)))
            else:
                out.extend((yield from self.visit(child)))
        return out

    def declarator(self, ts: TSNode) -> _Steps:
        name = ts.child_by_field_name("name") or self.first_of_type(ts, ("identifier",))
        children: list[SyntaxNode] = []
        for child in self.named(ts):
            if child == name:
                continue
            if child.type == "equals_value_clause":
                value = self.named(child)
                if value:
                    children.extend((yield from self.visit(value[0], field="initializer")))
            elif child.type in ("bracketed_argument_list", "tuple_pattern"):
                children.extend((yield from self.visit(child)))
            else:
                children.extend((yield from self.visit(child, field="initializer")))
        return SyntaxNode(
            NodeKind.VARIABLE_DECLARATOR,
            self.span(ts),
            children,
            name=self.text(name) if name is not None else None,
            name_span=self.span(name) if name is not None else None,
        )

    def lower_variable_declaration(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        children = yield from self.variable_declaration(ts)
        return [SyntaxNode(NodeKind.LOCAL_DECLARATION, self.span(ts), children, field=field)]

    def lower_local_declaration_statement(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        children: list[SyntaxNode] = []
        for child in self.named(ts):
            if child.type == "modifier":
                continue
            if child.type == "variable_declaration":
                children.extend((yield from self.variable_declaration(child)))
            else:
                children.extend((yield from self.visit(child)))
        modifiers = self.modifiers(ts)
        if any(child.type == "using" for child in ts.children):
            # `using var x = ...;` releases x at the end of the enclosing block.
            declaration = SyntaxNode(
                NodeKind.LOCAL_DECLARATION, self.span(ts), children, modifiers=modifiers, field="declaration"
            )
            return [SyntaxNode(NodeKind.USING_STATEMENT, self.span(ts), [declaration], field=field)]
        return [SyntaxNode(NodeKind.LOCAL_DECLARATION, self.span(ts), children, modifiers=modifiers, field=field)]

    # --- statements -----------------------------------------------------------

    def _statement(self, kind: NodeKind, ts: TSNode, field: Optional[str], expression_field: bool) -> _Steps:
        children: list[SyntaxNode] = []
        for index, child in enumerate(self.named(ts)):
            role = "expression" if expression_field and index == 0 else None
            children.extend((yield from self.visit(child, field=role)))
        return [SyntaxNode(kind, self.span(ts), children, field=field)]

    def lower_block(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        children = yield from self.children(ts)
        return [SyntaxNode(NodeKind.BLOCK, self.span(ts), children, field=field)]

    def lower_expression_statement(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        return self._statement(NodeKind.EXPRESSION_STATEMENT, ts, field, expression_field=True)

    def lower_return_statement(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        return self._statement(NodeKind.RETURN_STATEMENT, ts, field, expression_field=True)

    def lower_throw_statement(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        return self._statement(NodeKind.THROW_STATEMENT, ts, field, expression_field=True)

    def lower_throw_expression(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        return self._statement(NodeKind.THROW_EXPRESSION, ts, field, expression_field=True)

    def lower_unsafe_statement(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        return self._statement(NodeKind.UNSAFE_BLOCK, ts, field, expression_field=False)

    def lower_fixed_statement(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        return self._statement(NodeKind.FIXED_STATEMENT, ts, field, expression_field=False)

    def lower_using_statement(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        named = self.named(ts)
        body = ts.child_by_field_name("body") or (named[-1] if len(named) > 1 else None)
        children: list[SyntaxNode] = []
        for child in named:
            if child == body:
                children.extend((yield from self.visit(child, field="body")))
            elif child.type == "variable_declaration":
                declared = yield from self.variable_declaration(child)
                children.append(
                    SyntaxNode(NodeKind.LOCAL_DECLARATION, self.span(child), declared, field="declaration")
                )
            else:
                children.extend((yield from self.visit(child, field="expression")))
        return [SyntaxNode(NodeKind.USING_STATEMENT, self.span(ts), children, field=field)]

    # --- expressions ----------------------------------------------------------

    def arguments(self, ts: Optional[TSNode]) -> _Steps:
        out: list[SyntaxNode] = []
        if ts is None:
            return out
        for child in self.named(ts):
            if child.type != "argument":
                out.extend((yield from self.visit(child)))
                continue
            name = child.child_by_field_name("name")
            parts = [part for part in self.named(child) if part != name and part.type != "name_colon"]
            lowered: list[SyntaxNode] = []
            for index, part in enumerate(parts):
                role = "expression" if index == len(parts) - 1 else None
                lowered.extend((yield from self.visit(part, field=role)))
            out.append(
                SyntaxNode(
                    NodeKind.ARGUMENT,
                    self.span(child),
                    lowered,
                    name=self.text(name) if name is not None else None,
                    name_span=self.span(name) if name is not None else None,
                    modifiers=self.modifiers(child),
                    field="argument",
                )
            )
        return out

    def lower_invocation_expression(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        named = self.named(ts)
        function = ts.child_by_field_name("function") or (named[0] if named else None)
        arguments = ts.child_by_field_name("arguments") or self.first_of_type(ts, ("argument_list",))
        children: list[SyntaxNode] = []
        if function is not None:
            children.extend((yield from self.visit(function, field="expression")))
        children.extend((yield from self.arguments(arguments)))
        return [SyntaxNode(NodeKind.INVOCATION, self.span(ts), children, field=field)]

    def lower_object_creation_expression(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        type_node = ts.child_by_field_name("type")
        arguments = ts.child_by_field_name("arguments") or self.first_of_type(ts, ("argument_list",))
        children: list[SyntaxNode] = []
        for child in self.named(ts):
            if child == type_node:
                children.append(self.type_ref(child))
            elif child == arguments:
                children.extend((yield from self.arguments(child)))
            else:
                children.extend((yield from self.visit(child)))
        return [SyntaxNode(NodeKind.OBJECT_CREATION, self.span(ts), children, field=field)]

    def _member_access(
        self, ts: TSNode, field: Optional[str], receiver: Optional[TSNode], name: Optional[TSNode]
    ) -> _Steps:
        if receiver is None or name is None:
            return (yield from self.lower_other(ts, field, ()))
        member = self.simple_name(name)
        children = yield from self.visit(receiver, field="expression")
        children.append(SyntaxNode(NodeKind.IDENTIFIER, self.span(name), text=member, field="name"))
        return [SyntaxNode(NodeKind.MEMBER_ACCESS, self.span(ts), children, name=member, field=field)]

    def lower_member_access_expression(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        named = self.named(ts)
        receiver = ts.child_by_field_name("expression") or (named[0] if named else None)
        name = ts.child_by_field_name("name") or (named[-1] if len(named) > 1 else None)
        return self._member_access(ts, field, receiver, name)

    def lower_qualified_name(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        named = self.named(ts)
        qualifier = ts.child_by_field_name("qualifier") or (named[0] if named else None)
        name = ts.child_by_field_name("name") or (named[-1] if len(named) > 1 else None)
        return self._member_access(ts, field, qualifier, name)

    def lower_identifier(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> list[SyntaxNode]:
        return [SyntaxNode(NodeKind.IDENTIFIER, self.span(ts), text=self.text(ts), field=field)]

    def lower_alias_qualified_name(
        self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]
    ) -> list[SyntaxNode]:
        return self.lower_identifier(ts, field, docs)

    def lower_generic_name(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> list[SyntaxNode]:
        return [SyntaxNode(NodeKind.IDENTIFIER, self.span(ts), text=self.simple_name(ts), field=field)]

    def lower_string_literal(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> list[SyntaxNode]:
        return [
            SyntaxNode(NodeKind.STRING_LITERAL, self.span(ts), text=string_literal_value(self.text(ts)), field=field)
        ]

    lower_verbatim_string_literal = lower_string_literal
    lower_raw_string_literal = lower_string_literal

    # --- root -----------------------------------------------------------------

    def lower_compilation_unit(self, ts: TSNode, field: Optional[str], docs: Sequence[TSNode]) -> _Steps:
        children = yield from self.children(ts)
        return [SyntaxNode(NodeKind.COMPILATION_UNIT, self.span(ts), children, name=self.file_namespace)]


def lower_tree(tree: tree_sitter.Tree, source: bytes) -> SyntaxNode:
    """Convert a parsed C# tree into a CompilationUnit SyntaxNode."""
    root = tree.root_node
    lowering = _Lowering(source)
    if root.type == "compilation_unit":
        return lowering.lower(root)[0]
    logger.warning("Unexpected root node %r; wrapping it in a compilation unit", root.type)
    return SyntaxNode(NodeKind.COMPILATION_UNIT, lowering.span(root), lowering.lower(root))


def parse_unit(source: bytes, parser: Optional[tree_sitter.Parser] = None) -> SyntaxNode:
    """Parse C# source and return its lowered CompilationUnit."""
    return lower_tree(parse_bytes(source, parser=parser), source)


def count_nodes(unit: SyntaxNode, kinds: Iterable[NodeKind] = ()) -> int:
    kinds = frozenset(kinds)
    return sum(1 for node in unit.walk() if not kinds or node.kind in kinds)

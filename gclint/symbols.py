# Symbol oracle: resolved identities of names and types, and the best-effort
# table-driven oracle the host builds from a compilation unit.

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Optional

from gclint.syntax import TYPE_DECLARATION_KINDS, NodeKind, SyntaxNode, dotted_name

logger = logging.getLogger(__name__)

DISPOSABLE = "System.IDisposable"
STRING = "System.String"
GC_TYPE = "System.GC"

# C# keyword aliases for framework types.
PREDEFINED_TYPES: dict[str, str] = {
    "bool": "System.Boolean",
    "byte": "System.Byte",
    "sbyte": "System.SByte",
    "char": "System.Char",
    "short": "System.Int16",
    "ushort": "System.UInt16",
    "int": "System.Int32",
    "uint": "System.UInt32",
    "long": "System.Int64",
    "ulong": "System.UInt64",
    "nint": "System.IntPtr",
    "nuint": "System.UIntPtr",
    "float": "System.Single",
    "double": "System.Double",
    "decimal": "System.Decimal",
    "string": STRING,
    "object": "System.Object",
    "dynamic": "System.Object",
    "void": "System.Void",
}

_GENERIC_ARGS_RE = re.compile(r"<.*>")


@dataclass(frozen=True)
class Symbol:
    """
    Resolved identity of a type, method or other named entity.

    capabilities holds the qualified names of every interface and base type the
    symbol inherits from, transitively closed.
    """

    name: str
    qualified_name: str
    kind: str = "type"
    declared_type: Optional[str] = None
    modifiers: frozenset[str] = frozenset()
    capabilities: frozenset[str] = frozenset()
    is_value_type: bool = False
    is_extern: bool = False
    containing_type: Optional[str] = None

    @property
    def is_string(self) -> bool:
        return self.qualified_name == STRING


class SymbolOracle(ABC):
    """
    Read-only symbol/type resolution service consumed by the rules.

    Every query may answer None, meaning "unknown"; callers must skip the
    candidate instead of guessing.
    """

    @abstractmethod
    def type_of(self, node: SyntaxNode) -> Optional[Symbol]:
        """Declared type of a type reference or expression."""

    @abstractmethod
    def resolve(self, node: SyntaxNode) -> Optional[Symbol]:
        """Symbol a name, member access, invocation or attribute refers to."""

    def implements(self, symbol: Symbol, capability: str) -> bool:
        """True if symbol is, or transitively implements, the named capability."""
        return symbol.qualified_name == capability or capability in symbol.capabilities


def _simple_name(qualified: str) -> str:
    return qualified.rsplit(".", 1)[-1]


def _framework_type(
    qualified: str,
    *,
    bases: Iterable[str] = (),
    value: bool = False,
) -> tuple[Symbol, tuple[str, ...]]:
    return Symbol(name=_simple_name(qualified), qualified_name=qualified, is_value_type=value), tuple(bases)


# Framework types the host oracle knows about without reference assemblies.
FRAMEWORK_TYPES = [
    _framework_type(DISPOSABLE),
    _framework_type("System.IAsyncDisposable"),
    _framework_type("System.Object"),
    _framework_type(STRING),
    _framework_type("System.Exception"),
    _framework_type("System.Attribute"),
    _framework_type(GC_TYPE),
    _framework_type("System.Text.StringBuilder"),
    _framework_type("System.Collections.Generic.List"),
    _framework_type("System.Collections.Generic.Dictionary"),
    _framework_type("System.IO.Stream", bases=[DISPOSABLE, "System.IAsyncDisposable"]),
    _framework_type("System.IO.FileStream", bases=["System.IO.Stream"]),
    _framework_type("System.IO.MemoryStream", bases=["System.IO.Stream"]),
    _framework_type("System.IO.BufferedStream", bases=["System.IO.Stream"]),
    _framework_type("System.IO.TextReader", bases=[DISPOSABLE]),
    _framework_type("System.IO.TextWriter", bases=[DISPOSABLE, "System.IAsyncDisposable"]),
    _framework_type("System.IO.StreamReader", bases=["System.IO.TextReader"]),
    _framework_type("System.IO.StreamWriter", bases=["System.IO.TextWriter"]),
    _framework_type("System.IO.StringReader", bases=["System.IO.TextReader"]),
    _framework_type("System.IO.StringWriter", bases=["System.IO.TextWriter"]),
    _framework_type("System.IO.BinaryReader", bases=[DISPOSABLE]),
    _framework_type("System.IO.BinaryWriter", bases=[DISPOSABLE, "System.IAsyncDisposable"]),
    _framework_type("System.Net.Http.HttpClient", bases=[DISPOSABLE]),
    _framework_type("System.Net.Http.HttpResponseMessage", bases=[DISPOSABLE]),
    _framework_type("System.Net.Sockets.Socket", bases=[DISPOSABLE]),
    _framework_type("System.Net.Sockets.TcpClient", bases=[DISPOSABLE]),
    _framework_type("System.Data.SqlClient.SqlConnection", bases=[DISPOSABLE]),
    _framework_type("System.Data.SqlClient.SqlCommand", bases=[DISPOSABLE]),
    _framework_type("System.Data.SqlClient.SqlDataReader", bases=[DISPOSABLE]),
    _framework_type("System.Threading.Timer", bases=[DISPOSABLE]),
    _framework_type("System.Threading.CancellationTokenSource", bases=[DISPOSABLE]),
    _framework_type("System.Threading.SemaphoreSlim", bases=[DISPOSABLE]),
    _framework_type("System.Threading.ManualResetEvent", bases=[DISPOSABLE]),
    _framework_type("System.Diagnostics.Process", bases=[DISPOSABLE]),
    _framework_type("System.Runtime.InteropServices.SafeHandle", bases=[DISPOSABLE]),
    _framework_type("System.Runtime.InteropServices.DllImportAttribute", bases=["System.Attribute"]),
    _framework_type("System.Runtime.InteropServices.LibraryImportAttribute", bases=["System.Attribute"]),
    _framework_type("System.Runtime.InteropServices.GCHandle", value=True),
    _framework_type("System.DateTime", value=True),
    _framework_type("System.TimeSpan", value=True),
    _framework_type("System.Guid", value=True),
] + [_framework_type(qn, value=True) for qn in sorted(set(PREDEFINED_TYPES.values()) - {STRING, "System.Object"})]

FRAMEWORK_METHODS = [
    Symbol(name=member, qualified_name=f"{GC_TYPE}.{member}", kind="method", containing_type=GC_TYPE)
    for member in ("Collect", "KeepAlive", "SuppressFinalize", "ReRegisterForFinalize", "WaitForPendingFinalizers")
]


@dataclass
class SymbolTable(SymbolOracle):
    """
    In-memory oracle backed by dictionaries of types and methods.

    Types are keyed by qualified name and also reachable by simple name when that
    name is unambiguous. Methods are keyed by containing type; methods declared in
    the analysed unit are additionally reachable by simple name so that calls like
    ``NativeMethods.Foo(x)`` or ``Foo(x)`` resolve without a receiver type.
    """

    types: dict[str, Symbol] = field(default_factory=dict)
    members: dict[str, dict[str, list[Symbol]]] = field(default_factory=dict)
    unit_methods: dict[str, list[Symbol]] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)

    @classmethod
    def with_framework_types(cls) -> SymbolTable:
        table = cls()
        pending = {symbol.qualified_name: (symbol, bases) for symbol, bases in FRAMEWORK_TYPES}
        done: dict[str, Symbol] = {}
        for qualified in pending:
            table.add_type(table._close_capabilities(qualified, pending, done))
        for method in FRAMEWORK_METHODS:
            table.add_method(method)
        return table

    # --- population -----------------------------------------------------------

    def add_type(self, symbol: Symbol) -> None:
        self.types[symbol.qualified_name] = symbol

    def add_method(self, symbol: Symbol, *, declared_in_unit: bool = False) -> None:
        owner = symbol.containing_type or ""
        self.members.setdefault(owner, {}).setdefault(symbol.name, []).append(symbol)
        if declared_in_unit:
            self.unit_methods.setdefault(symbol.name, []).append(symbol)

    def add_alias(self, alias: str, target: str) -> None:
        self.aliases[alias] = target

    def _close_capabilities(
        self,
        qualified: str,
        pending: dict[str, tuple[Symbol, tuple[str, ...]]],
        done: dict[str, Symbol],
    ) -> Symbol:
        """Compute the transitive capability set of a pending type (cycles tolerated)."""
        if qualified in done:
            return done[qualified]
        symbol, bases = pending[qualified]
        # Placeholder breaks inheritance cycles in malformed input.
        done[qualified] = symbol
        capabilities: set[str] = set()
        for written in bases:
            base_name = self._qualify(written, pending)
            if base_name is None:
                logger.debug("Unresolved base type %r of %s", written, qualified)
                continue
            capabilities.add(base_name)
            if base_name in pending:
                capabilities |= self._close_capabilities(base_name, pending, done).capabilities
            elif base_name in self.types:
                capabilities |= self.types[base_name].capabilities
        closed = Symbol(
            name=symbol.name,
            qualified_name=symbol.qualified_name,
            kind=symbol.kind,
            modifiers=symbol.modifiers,
            capabilities=frozenset(capabilities),
            is_value_type=symbol.is_value_type,
        )
        done[qualified] = closed
        return closed

    def _qualify(self, written: str, pending: dict[str, tuple[Symbol, tuple[str, ...]]]) -> Optional[str]:
        name = self._normalize(written)
        if name in pending or name in self.types:
            return name
        simple = _simple_name(name)
        for candidates in (pending, self.types):
            matches = [qn for qn in candidates if _simple_name(qn) == simple]
            if len(matches) == 1:
                return matches[0]
        return None

    # --- lookup ---------------------------------------------------------------

    def _normalize(self, written: str) -> str:
        name = written.strip().replace(" ", "")
        if name.startswith("global::"):
            name = name[len("global::") :]
        name = _GENERIC_ARGS_RE.sub("", name).rstrip("?")
        head, _, rest = name.partition(".")
        if head in self.aliases:
            name = self.aliases[head] + ("." + rest if rest else "")
        return PREDEFINED_TYPES.get(name, name)

    def lookup_type(self, written: Optional[str]) -> Optional[Symbol]:
        """Resolve a type as written in source; None when unknown or ambiguous."""
        if not written:
            return None
        name = self._normalize(written)
        if name.endswith("]"):
            element = name[: name.index("[")]
            return Symbol(name=f"{_simple_name(element)}[]", qualified_name=f"{element}[]")
        if name.endswith("*"):
            return Symbol(name=_simple_name(name), qualified_name=name, is_value_type=True)
        if name in self.types:
            return self.types[name]
        simple = _simple_name(name)
        matches = [symbol for qn, symbol in self.types.items() if _simple_name(qn) == simple]
        if len(matches) == 1 and (simple == name or matches[0].qualified_name.endswith("." + name)):
            return matches[0]
        return None

    def _unit_method(self, name: Optional[str]) -> Optional[Symbol]:
        overloads = self.unit_methods.get(name or "", [])
        if not overloads:
            return None
        if len({symbol.is_extern for symbol in overloads}) > 1:
            logger.debug("Overloads of %s disagree on extern; leaving unresolved", name)
            return None
        return overloads[0]

    def _member(self, owner: Symbol, name: Optional[str]) -> Optional[Symbol]:
        overloads = self.members.get(owner.qualified_name, {}).get(name or "", [])
        return overloads[0] if overloads else None

    # --- oracle ---------------------------------------------------------------

    def type_of(self, node: SyntaxNode) -> Optional[Symbol]:
        if node.kind is NodeKind.OBJECT_CREATION:
            type_node = node.child_by_field_name("type")
            return self.type_of(type_node) if type_node is not None else None
        if node.kind is not NodeKind.TYPE_REFERENCE:
            return None
        if node.text == "var":
            return self._infer_var(node)
        return self.lookup_type(node.text)

    def _infer_var(self, type_node: SyntaxNode) -> Optional[Symbol]:
        declaration = type_node.parent
        if declaration is None:
            return None
        for declarator in declaration.children_of_kind(NodeKind.VARIABLE_DECLARATOR):
            initializer = declarator.child_by_field_name("initializer")
            if initializer is not None and initializer.kind is NodeKind.OBJECT_CREATION:
                return self.type_of(initializer)
            return None
        return None

    def resolve(self, node: SyntaxNode) -> Optional[Symbol]:
        if node.kind is NodeKind.INVOCATION:
            callee = node.child_by_field_name("expression")
            return self.resolve(callee) if callee is not None else None
        if node.kind is NodeKind.ATTRIBUTE:
            written = node.text or ""
            return self.lookup_type(written + "Attribute") or self.lookup_type(written)
        if node.kind is NodeKind.IDENTIFIER:
            return self._unit_method(node.text) or self.lookup_type(node.text)
        if node.kind is NodeKind.MEMBER_ACCESS:
            receiver = dotted_name(node.child_by_field_name("expression"))
            owner = self.lookup_type(receiver)
            if owner is not None:
                return self._member(owner, node.name)
            return self._unit_method(node.name)
        return None


def _qualified_declaration_name(declaration: SyntaxNode) -> str:
    parts = [declaration.name or ""]
    for ancestor in declaration.ancestors():
        if ancestor.kind in TYPE_DECLARATION_KINDS or ancestor.kind is NodeKind.NAMESPACE_DECLARATION:
            parts.append(ancestor.name or "")
        elif ancestor.kind is NodeKind.COMPILATION_UNIT:
            # File-scoped namespace: recorded on the unit itself.
            if ancestor.name:
                parts.append(ancestor.name)
    return ".".join(reversed([part for part in parts if part]))


def build_symbol_table(unit: SyntaxNode) -> SymbolTable:
    """
    Build a best-effort oracle for one compilation unit.

    Registers alias using-directives, every type declared in the unit (base
    lists become capabilities, transitively closed against the framework
    catalogue) and every method (recording ``extern``).
    """
    table = SymbolTable.with_framework_types()
    pending: dict[str, tuple[Symbol, tuple[str, ...]]] = {}

    for node in unit.walk():
        if node.kind is NodeKind.USING_DIRECTIVE and node.name and node.text:
            table.add_alias(node.name, node.text)
        elif node.kind in TYPE_DECLARATION_KINDS and node.name:
            qualified = _qualified_declaration_name(node)
            bases = tuple(base.text or "" for base in node.children_by_field_name("base"))
            symbol = Symbol(
                name=node.name,
                qualified_name=qualified,
                modifiers=node.modifiers,
                is_value_type=node.kind in (NodeKind.STRUCT_DECLARATION, NodeKind.ENUM_DECLARATION),
            )
            pending[qualified] = (symbol, bases)

    done: dict[str, Symbol] = {}
    for qualified in pending:
        table.add_type(table._close_capabilities(qualified, pending, done))

    for node in unit.walk():
        if node.kind is not NodeKind.METHOD_DECLARATION or not node.name:
            continue
        owner = node.first_ancestor(*TYPE_DECLARATION_KINDS)
        containing = _qualified_declaration_name(owner) if owner is not None else None
        return_type = node.child_by_field_name("type")
        table.add_method(
            Symbol(
                name=node.name,
                qualified_name=_qualified_declaration_name(node),
                kind="method",
                declared_type=return_type.text if return_type is not None else None,
                modifiers=node.modifiers,
                is_extern="extern" in node.modifiers,
                containing_type=containing,
            ),
            declared_in_unit=True,
        )

    logger.debug(
        "Symbol table: %d type(s), %d unit method name(s), %d alias(es)",
        len(table.types),
        len(table.unit_methods),
        len(table.aliases),
    )
    return table

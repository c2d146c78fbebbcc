# Missing GC.KeepAlive detection: managed objects handed to native code (P/Invoke,
# unsafe or fixed blocks) can be collected while the native side still uses them.

from __future__ import annotations

import logging

from gclint.findings.models import Diagnostic, RuleDescriptor, Severity
from gclint.rules.base import NodeContext, Rule
from gclint.rules.helpers import is_identifier, member_call_receiver, names_gc_type, passes_identifier
from gclint.symbols import SymbolOracle
from gclint.syntax import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)

KEEP_ALIVE_METHOD = "KeepAlive"

INTEROP_ATTRIBUTES = frozenset(
    {
        "System.Runtime.InteropServices.DllImportAttribute",
        "System.Runtime.InteropServices.LibraryImportAttribute",
    }
)
INTEROP_ATTRIBUTE_NAMES = frozenset({"DllImport", "DllImportAttribute", "LibraryImport", "LibraryImportAttribute"})


def _is_interop_attribute(attribute: SyntaxNode, oracle: SymbolOracle) -> bool:
    symbol = oracle.resolve(attribute)
    if symbol is not None:
        return symbol.qualified_name in INTEROP_ATTRIBUTES
    written = (attribute.text or "").rsplit(".", 1)[-1]
    return written in INTEROP_ATTRIBUTE_NAMES


def extern_invocations(method: SyntaxNode, oracle: SymbolOracle) -> list[SyntaxNode]:
    """Invocations in method whose target the oracle reports as extern."""
    calls = []
    for invocation in method.descendants(NodeKind.INVOCATION):
        symbol = oracle.resolve(invocation)
        if symbol is not None and symbol.is_extern:
            calls.append(invocation)
    return calls


def has_interop_surface(method: SyntaxNode, oracle: SymbolOracle, externs: list[SyntaxNode]) -> bool:
    """Method is itself a P/Invoke declaration or calls one."""
    return bool(externs) or any(_is_interop_attribute(attr, oracle) for attr in method.attributes)


def is_used_unsafely(method: SyntaxNode, name: str, externs: list[SyntaxNode]) -> bool:
    """
    Name appears inside an unsafe or fixed block, or is passed directly to an
    extern call. Purely lexical: shadowing locals are not distinguished.
    """
    for block in method.descendants(NodeKind.UNSAFE_BLOCK, NodeKind.FIXED_STATEMENT):
        if any(is_identifier(ident, name) for ident in block.descendants(NodeKind.IDENTIFIER)):
            return True
    return any(passes_identifier(call, name) for call in externs)


def has_keep_alive(method: SyntaxNode, name: str) -> bool:
    """GC.KeepAlive(name) occurs anywhere in the method (position is not checked)."""
    for invocation in method.descendants(NodeKind.INVOCATION):
        receiver = member_call_receiver(invocation, KEEP_ALIVE_METHOD)
        if names_gc_type(receiver) and passes_identifier(invocation, name):
            return True
    return False


class UseGCKeepAliveRule(Rule):
    """Reports reference-type parameters used by native code without a GC.KeepAlive."""

    descriptor = RuleDescriptor(
        id="RULE-002",
        title="Use GC.KeepAlive for objects passed to native code",
        message_format="Parameter '{0}' is used by native or unsafe code; call GC.KeepAlive({0}) after its last native use",
        category="Reliability",
        default_severity=Severity.INFO,
        description=(
            "The garbage collector cannot see references held by native code. An object only "
            "reachable through a native handle may be collected before the native call finishes."
        ),
    )
    node_kinds = frozenset({NodeKind.METHOD_DECLARATION})

    def run(self, node: SyntaxNode, context: NodeContext) -> list[Diagnostic]:
        oracle = context.oracle
        externs = extern_invocations(node, oracle)
        if not has_interop_surface(node, oracle, externs):
            return []

        findings: list[Diagnostic] = []
        for parameter in node.children_of_kind(NodeKind.PARAMETER):
            type_node = parameter.child_by_field_name("type")
            if type_node is None or not parameter.name:
                continue
            symbol = oracle.type_of(type_node)
            if symbol is None:
                logger.debug("Skipping parameter %s: type %r unresolved", parameter.name, type_node.text)
                continue
            if symbol.is_value_type or symbol.is_string:
                continue
            if is_used_unsafely(node, parameter.name, externs) and not has_keep_alive(node, parameter.name):
                findings.append(self.report(context, parameter, parameter.name))
        return findings

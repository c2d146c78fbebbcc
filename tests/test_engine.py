"""Tests for the rule engine: dispatch, ordering, fault isolation and cancellation."""

import threading
from pathlib import Path

import pytest

from gclint.config import get_default_config
from gclint.engine import RuleEngine, analyze, create_engine, initialize
from gclint.errors import AnalysisCancelledError, RuleFaultError
from gclint.findings.models import RuleDescriptor, Severity
from gclint.findings.sink import DiagnosticSink
from gclint.frontend import parse_unit
from gclint.rules.base import Rule
from gclint.symbols import SymbolTable, build_symbol_table
from gclint.syntax import NodeKind
from gclint.syntax.builder import identifier, invocation, member_access, node


class ExplodingRule(Rule):
    descriptor = RuleDescriptor(
        id="TEST-900",
        title="Explodes",
        message_format="boom",
        category="Testing",
        default_severity=Severity.ERROR,
    )
    node_kinds = frozenset({NodeKind.STRING_LITERAL})

    def run(self, node, context):
        raise KeyError("bug in rule")


class RecordingRule(Rule):
    descriptor = RuleDescriptor(
        id="TEST-901",
        title="Records",
        message_format="saw {0}",
        category="Testing",
        default_severity=Severity.INFO,
    )
    node_kinds = frozenset({NodeKind.IDENTIFIER})

    def __init__(self):
        self.seen = []
        self.chains = []

    def run(self, node, context):
        self.seen.append(node.text)
        self.chains.append([d.kind for d in context.declarations])
        return [self.report(context, node, node.text)]


SOURCE = b"""
namespace Demo
{
    class Cache
    {
        private int Size;

        void Flush()
        {
            GC.Collect();
            Console.WriteLine("cache flushed");
        }
    }
}
"""


def _collect_call():
    gc_collect = member_access(identifier("GC"), "Collect", line=3, column=9)
    body = node(NodeKind.BLOCK, node(NodeKind.EXPRESSION_STATEMENT, invocation(gc_collect, line=3, column=9)), field="body")
    method = node(NodeKind.METHOD_DECLARATION, body, name="Flush", line=2, column=5)
    return node(NodeKind.COMPILATION_UNIT, node(NodeKind.CLASS_DECLARATION, method, name="Cache"))


def test_hand_built_tree_analysed():
    diagnostics = analyze(_collect_call(), SymbolTable.with_framework_types())
    assert [d.rule_id for d in diagnostics] == ["RULE-001"]
    assert diagnostics[0].location.line == 3


def test_diagnostics_grouped_by_rule_then_position():
    unit = parse_unit(SOURCE)
    diagnostics = create_engine().run(unit, build_symbol_table(unit), path=Path("Cache.cs"), source=SOURCE)
    assert [d.rule_id for d in diagnostics] == ["RULE-001", "RULE-005", "RULE-006"]
    assert [d.location.line for d in diagnostics] == [10, 6, 11]


def test_analysis_is_idempotent():
    unit = parse_unit(SOURCE)
    oracle = build_symbol_table(unit)
    engine = create_engine()
    first = engine.run(unit, oracle, path=Path("Cache.cs"))
    second = engine.run(unit, oracle, path=Path("Cache.cs"))
    assert first == second


def test_disabled_rules_not_registered():
    config = get_default_config(disabled_rules=["RULE-006", "RULE-005"])
    unit = parse_unit(SOURCE)
    diagnostics = create_engine(config).run(unit, build_symbol_table(unit))
    assert [d.rule_id for d in diagnostics] == ["RULE-001"]


def test_initialize_hands_rules_and_kinds_to_callback():
    registered = []
    initialize(lambda rule, kinds: registered.append((rule.id, frozenset(kinds))))
    assert [rule_id for rule_id, _ in registered] == [f"RULE-00{i}" for i in range(1, 7)]
    assert dict(registered)["RULE-001"] == {NodeKind.INVOCATION}
    assert dict(registered)["RULE-006"] == {NodeKind.STRING_LITERAL}


def test_declaration_chain_passed_to_rules():
    rule = RecordingRule()
    engine = RuleEngine()
    engine.register(rule)
    engine.run(_collect_call(), SymbolTable())
    assert rule.seen == ["GC", "Collect"]
    assert rule.chains[0] == [NodeKind.CLASS_DECLARATION, NodeKind.METHOD_DECLARATION]


def test_rule_fault_aborts_unit_and_sink_stays_empty():
    engine = create_engine()
    engine.register(ExplodingRule())
    unit = parse_unit(SOURCE)
    sink = DiagnosticSink()
    with pytest.raises(RuleFaultError) as excinfo:
        engine.run(unit, build_symbol_table(unit), sink=sink)
    assert excinfo.value.rule_id == "TEST-900"
    assert isinstance(excinfo.value.__cause__, KeyError)
    assert len(sink) == 0


def test_cancellation_reports_nothing():
    cancel = threading.Event()
    cancel.set()
    sink = DiagnosticSink()
    unit = parse_unit(SOURCE)
    with pytest.raises(AnalysisCancelledError):
        create_engine().run(unit, build_symbol_table(unit), cancel=cancel, sink=sink)
    assert sink.snapshot() == []


def test_successful_run_pushes_to_sink():
    sink = DiagnosticSink()
    unit = parse_unit(SOURCE)
    returned = create_engine().run(unit, build_symbol_table(unit), sink=sink)
    assert sink.drain() == returned
    assert len(sink) == 0


def test_register_twice_does_not_duplicate():
    rule = RecordingRule()
    engine = RuleEngine()
    engine.register(rule)
    engine.register(rule, [NodeKind.IDENTIFIER])
    engine.run(_collect_call(), SymbolTable())
    assert rule.seen == ["GC", "Collect"]
    assert engine.rules == [rule]

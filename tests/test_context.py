"""Tests for gclint.context: UnitContext, create_context, load_contexts, analyze_contexts."""

import logging
from pathlib import Path

from gclint.context import analyze_contexts, count_tree_stats, create_context, load_contexts
from gclint.engine import RuleEngine, create_engine
from gclint.findings.models import RuleDescriptor, Severity
from gclint.findings.sink import DiagnosticSink
from gclint.frontend import parse_unit
from gclint.rules.base import Rule
from gclint.syntax import NodeKind

PROGRAM = b"""
class Program {
    static void Main() {
        GC.Collect();
    }
}
"""


class FailOnClassRule(Rule):
    descriptor = RuleDescriptor(
        id="TEST-910",
        title="Fails on a class named Broken",
        message_format="unused",
        category="Testing",
        default_severity=Severity.ERROR,
    )
    node_kinds = frozenset({NodeKind.CLASS_DECLARATION})

    def run(self, node, context):
        if node.name == "Broken":
            raise RuntimeError("cannot handle Broken")
        return []


def test_count_tree_stats():
    nodes, methods = count_tree_stats(parse_unit(PROGRAM))
    assert nodes > 5
    assert methods == 1


def test_create_context(tmp_path):
    cs_file = tmp_path / "Program.cs"
    cs_file.write_bytes(PROGRAM)
    ctx = create_context(cs_file)
    assert ctx is not None
    assert ctx.path == cs_file
    assert ctx.source == PROGRAM
    assert ctx.unit.kind is NodeKind.COMPILATION_UNIT
    assert ctx.oracle.lookup_type("Program") is not None
    assert ctx.has_parse_errors is False


def test_create_context_nonexistent():
    assert create_context(Path("/nonexistent/Program.cs")) is None


def test_create_context_malformed_still_returns_context(tmp_path, caplog):
    cs_file = tmp_path / "Bad.cs"
    cs_file.write_bytes(b"class Bad { void M( { }\n")
    with caplog.at_level(logging.WARNING):
        ctx = create_context(cs_file)
    assert ctx is not None
    assert ctx.has_parse_errors is True
    assert "syntax errors" in caplog.text


def test_load_contexts_skips_unreadable(tmp_path):
    a = tmp_path / "A.cs"
    a.write_bytes(PROGRAM)
    contexts = load_contexts([a, tmp_path / "Missing.cs"])
    assert [ctx.path for ctx in contexts] == [a]


def test_analyze_contexts_collects_into_sink(tmp_path):
    paths = []
    for name in ("A.cs", "B.cs", "C.cs"):
        path = tmp_path / name
        path.write_bytes(PROGRAM)
        paths.append(path)
    sink = DiagnosticSink()
    failed = analyze_contexts(load_contexts(paths), create_engine(), sink, jobs=3)
    assert failed == []
    assert sorted(d.location.path.name for d in sink.snapshot()) == ["A.cs", "B.cs", "C.cs"]


def test_failing_unit_does_not_affect_others(tmp_path, caplog):
    good = tmp_path / "Good.cs"
    good.write_bytes(PROGRAM)
    bad = tmp_path / "Broken.cs"
    bad.write_bytes(b"class Broken { void M() { GC.Collect(); } }\n")

    engine = create_engine()
    engine.register(FailOnClassRule())
    sink = DiagnosticSink()
    with caplog.at_level(logging.ERROR):
        failed = analyze_contexts(load_contexts([good, bad]), engine, sink, jobs=2)

    assert failed == [bad]
    assert {d.location.path for d in sink.snapshot()} == {good}
    assert "Analysis of" in caplog.text


def test_unit_context_analyze_returns_diagnostics(tmp_path):
    cs_file = tmp_path / "Program.cs"
    cs_file.write_bytes(PROGRAM)
    engine = RuleEngine()
    for rule in create_engine().rules:
        engine.register(rule)
    diagnostics = create_context(cs_file).analyze(engine)
    assert [d.rule_id for d in diagnostics] == ["RULE-001"]


def _long_concatenation(terms):
    parts = " + ".join(f'"abc{i}"' for i in range(terms))
    return f"class Deep {{ void M() {{ var s = {parts}; }} }}\n".encode()


def test_long_concatenation_unit_is_analysed(tmp_path):
    deep = tmp_path / "Deep.cs"
    deep.write_bytes(_long_concatenation(1200))
    ok = tmp_path / "Ok.cs"
    ok.write_bytes(PROGRAM)

    failed = []
    contexts = load_contexts([deep, ok], failed=failed)
    assert failed == []
    assert [ctx.path for ctx in contexts] == [deep, ok]

    sink = DiagnosticSink()
    assert analyze_contexts(contexts, create_engine(), sink, jobs=2) == []
    rule_ids = {d.rule_id for d in sink.snapshot() if d.location.path == ok}
    assert rule_ids == {"RULE-001"}


def test_load_contexts_reports_unreadable(tmp_path):
    a = tmp_path / "A.cs"
    a.write_bytes(PROGRAM)
    missing = tmp_path / "Missing.cs"
    failed = []
    contexts = load_contexts([a, missing], failed=failed)
    assert [ctx.path for ctx in contexts] == [a]
    assert failed == [missing]


def test_lowering_failure_is_isolated(tmp_path, monkeypatch, caplog):
    import gclint.context

    real = gclint.context.build_symbol_table

    def build(unit):
        if any(d.name == "Broken" for d in unit.descendants(NodeKind.CLASS_DECLARATION)):
            raise RecursionError("maximum recursion depth exceeded")
        return real(unit)

    monkeypatch.setattr(gclint.context, "build_symbol_table", build)
    good = tmp_path / "Good.cs"
    good.write_bytes(PROGRAM)
    bad = tmp_path / "Broken.cs"
    bad.write_bytes(b"class Broken { }\n")

    failed = []
    with caplog.at_level(logging.ERROR):
        contexts = load_contexts([bad, good], failed=failed)

    assert [ctx.path for ctx in contexts] == [good]
    assert failed == [bad]
    assert "Failed to build the syntax tree" in caplog.text

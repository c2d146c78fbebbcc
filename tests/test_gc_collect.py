"""Unit tests for the GC.Collect rule (RULE-001)."""

from pathlib import Path

from gclint.engine import RuleEngine
from gclint.findings.models import Severity
from gclint.frontend import parse_unit
from gclint.rules.gc_collect import AvoidGCCollectRule
from gclint.symbols import build_symbol_table


def _run_rule(source: bytes, path: Path | None = None) -> list:
    """Parse source, build the symbol table, run AvoidGCCollectRule, return diagnostics."""
    if path is None:
        path = Path("Test.cs")
    unit = parse_unit(source)
    engine = RuleEngine()
    engine.register(AvoidGCCollectRule())
    return engine.run(unit, build_symbol_table(unit), path=path, source=source)


def test_gc_collect_detected():
    source = b"""
class Cache {
    void Flush() {
        GC.Collect();
    }
}
"""
    diagnostics = _run_rule(source)
    assert len(diagnostics) == 1
    d = diagnostics[0]
    assert d.rule_id == "RULE-001"
    assert d.severity == Severity.WARNING
    assert d.location.line == 4
    assert d.location.snippet == "GC.Collect()"
    assert d.help_link.endswith("/docs/rules/RULE-001.md")


def test_qualified_receivers_detected():
    source = b"""
class Cache {
    void Flush() {
        System.GC.Collect();
        global::System.GC.Collect(2);
    }
}
"""
    diagnostics = _run_rule(source)
    assert [d.location.line for d in diagnostics] == [4, 5]


def test_alias_resolved_through_oracle():
    source = b"""
using Collector = System.GC;

class Cache {
    void Flush() {
        Collector.Collect();
    }
}
"""
    diagnostics = _run_rule(source)
    assert len(diagnostics) == 1


def test_other_collect_methods_ignored():
    source = b"""
class Cache {
    void Flush(Garbage bin) {
        bin.Collect();
        Collect();
        GC.KeepAlive(bin);
        GC.SuppressFinalize(this);
    }
}
"""
    assert _run_rule(source) == []


def test_multiple_calls_in_one_method():
    source = b"""
class Cache {
    void Flush() {
        GC.Collect();
        GC.WaitForPendingFinalizers();
        GC.Collect();
    }
}
"""
    diagnostics = _run_rule(source)
    assert len(diagnostics) == 2
    assert diagnostics[0].location.line < diagnostics[1].location.line

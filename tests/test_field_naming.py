"""Unit tests for the private field naming rule (RULE-005)."""

from pathlib import Path

import pytest

from gclint.engine import RuleEngine
from gclint.findings.models import Severity
from gclint.frontend import parse_unit
from gclint.rules.field_naming import FieldNamingConventionRule, is_valid_field_name
from gclint.symbols import build_symbol_table


def _run_rule(source: bytes, path: Path | None = None) -> list:
    if path is None:
        path = Path("Test.cs")
    unit = parse_unit(source)
    engine = RuleEngine()
    engine.register(FieldNamingConventionRule())
    return engine.run(unit, build_symbol_table(unit), path=path, source=source)


@pytest.mark.parametrize(
    "name, valid",
    [
        ("_name", True),
        ("_itemCount2", True),
        ("name", False),
        ("_Name", False),
        ("__name", False),
        ("_1name", False),
        ("_na_me", False),
        ("_", False),
        ("", False),
    ],
)
def test_is_valid_field_name(name, valid):
    assert is_valid_field_name(name) is valid


def test_badly_named_private_field_reported():
    source = b"""
class Account {
    private int balance;
    private string _owner;
}
"""
    diagnostics = _run_rule(source)
    assert len(diagnostics) == 1
    d = diagnostics[0]
    assert d.rule_id == "RULE-005"
    assert d.severity == Severity.WARNING
    assert d.arguments == ("balance",)
    assert d.location.line == 3
    assert d.location.column == 17
    assert d.location.snippet == "balance"


def test_every_declarator_checked():
    source = b"""
class Account {
    private int _total, Count, __hidden;
}
"""
    assert [d.arguments for d in _run_rule(source)] == [("Count",), ("__hidden",)]


def test_static_const_and_readonly_exempt():
    source = b"""
class Account {
    private static int counter;
    private const int Limit = 3;
    private readonly int Seed;
    private static readonly object Gate = new object();
}
"""
    assert _run_rule(source) == []


def test_non_private_fields_ignored():
    source = b"""
class Account {
    public int Balance;
    protected int total;
    internal int count;
    int implicitlyPrivate;
}
"""
    assert _run_rule(source) == []


def test_struct_fields_checked():
    source = b"""
struct Point {
    private int X;
}
"""
    assert [d.arguments for d in _run_rule(source)] == [("X",)]

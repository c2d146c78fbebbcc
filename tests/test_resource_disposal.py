"""Unit tests for the undisposed IDisposable rule (RULE-003)."""

from pathlib import Path

from gclint.engine import RuleEngine
from gclint.findings.models import Severity
from gclint.frontend import parse_unit
from gclint.rules.resource_disposal import ResourceDisposalRule
from gclint.symbols import build_symbol_table


def _run_rule(source: bytes, path: Path | None = None) -> list:
    if path is None:
        path = Path("Test.cs")
    unit = parse_unit(source)
    engine = RuleEngine()
    engine.register(ResourceDisposalRule())
    return engine.run(unit, build_symbol_table(unit), path=path, source=source)


def _method(body: bytes) -> bytes:
    return (
        b"""
using System;
using System.IO;

class ResourceType : IDisposable {
    public void Dispose() { }
}

class Service {
    void Work() {
"""
        + body
        + b"""
    }
}
"""
    )


def test_undisposed_local_reported():
    diagnostics = _run_rule(_method(b"var r = new ResourceType();"))
    assert len(diagnostics) == 1
    d = diagnostics[0]
    assert d.rule_id == "RULE-003"
    assert d.severity == Severity.WARNING
    assert d.arguments == ("ResourceType",)
    assert "ResourceType" in d.message


def test_using_declaration_is_disposed():
    assert _run_rule(_method(b"using var r = new ResourceType();")) == []


def test_using_statement_is_disposed():
    assert _run_rule(_method(b"using (var r = new ResourceType()) { }")) == []


def test_explicit_dispose_call():
    source = _method(b"var r = new ResourceType();\n        r.Dispose();")
    assert _run_rule(source) == []


def test_returned_resource_has_escaped():
    source = b"""
class ResourceType : System.IDisposable {
    public void Dispose() { }
}

class Factory {
    ResourceType Create() {
        var r = new ResourceType();
        return r;
    }
}
"""
    assert _run_rule(source) == []


def test_resource_passed_to_another_call_has_escaped():
    source = _method(b"var r = new ResourceType();\n        Register(r);")
    assert _run_rule(source) == []


def test_framework_disposable_with_explicit_type():
    source = _method(b'FileStream stream = new FileStream("data.bin", FileMode.Open);')
    diagnostics = _run_rule(source)
    assert [d.arguments for d in diagnostics] == [("FileStream",)]


def test_transitive_disposable_through_base_class():
    source = b"""
class Base : System.IDisposable {
    public void Dispose() { }
}

class Derived : Base { }

class Service {
    void Work() {
        var d = new Derived();
    }
}
"""
    diagnostics = _run_rule(source)
    assert [d.arguments for d in diagnostics] == [("Derived",)]


def test_non_disposable_and_unknown_types_ignored():
    source = _method(
        b"""var builder = new System.Text.StringBuilder();
        var thing = new UnknownThing();
        var stream = File.OpenRead("data.bin");
        int count = 3;"""
    )
    assert _run_rule(source) == []


def test_each_declarator_checked():
    source = _method(b"ResourceType a = new ResourceType(), b = new ResourceType();\n        a.Dispose();")
    diagnostics = _run_rule(source)
    assert len(diagnostics) == 1
    assert diagnostics[0].location.snippet.startswith("b")


def test_dispose_inside_lambda_does_not_count():
    diagnostics = _run_rule(
        _method(b"var r = new ResourceType();\n        System.Action a = () => r.Dispose();")
    )
    assert [d.arguments for d in diagnostics] == [("ResourceType",)]


def test_conditional_dispose_does_not_count():
    diagnostics = _run_rule(_method(b"var r = new ResourceType();\n        r?.Dispose();"))
    assert [d.arguments for d in diagnostics] == [("ResourceType",)]

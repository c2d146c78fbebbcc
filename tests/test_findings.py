"""Tests for diagnostic models, help links and the shared sink."""

import threading
from pathlib import Path

import pytest
from pydantic import ValidationError

from gclint.config import get_default_config
from gclint.findings.models import Diagnostic, Location, Severity, get_help_link
from gclint.findings.sink import DiagnosticSink


def _diagnostic(rule_id="RULE-001", line=1, path="A.cs"):
    return Diagnostic(
        rule_id=rule_id,
        severity=Severity.WARNING,
        location=Location(path=Path(path), line=line, column=1),
        message="m",
    )


def test_help_link_format():
    assert get_help_link("RULE-003") == (
        "https://github.com/Devoo-Consulting/GCAnalyzer/blob/main/docs/rules/RULE-003.md"
    )


def test_descriptors_match_rule_table():
    expected = {
        "RULE-001": (Severity.WARNING, "Performance"),
        "RULE-002": (Severity.INFO, "Reliability"),
        "RULE-003": (Severity.WARNING, "Usage"),
        "RULE-004": (Severity.WARNING, "Design"),
        "RULE-005": (Severity.WARNING, "Naming"),
        "RULE-006": (Severity.INFO, "Maintainability"),
    }
    descriptors = {rule.id: rule.descriptor for rule in get_default_config().rules}
    assert {rid: (d.default_severity, d.category) for rid, d in descriptors.items()} == expected
    assert all(d.enabled_by_default for d in descriptors.values())
    assert descriptors["RULE-005"].format_message("count") == (
        "Field 'count' should start with an underscore followed by a lowercase letter"
    )


def test_location_is_one_based():
    with pytest.raises(ValidationError):
        Location(path=Path("A.cs"), line=0, column=1)


def test_diagnostics_are_frozen():
    diagnostic = _diagnostic()
    with pytest.raises(ValidationError):
        diagnostic.message = "other"


def test_sort_key_groups_by_rule_then_position():
    items = [_diagnostic("RULE-006", 1), _diagnostic("RULE-001", 9), _diagnostic("RULE-001", 2)]
    ordered = sorted(items, key=Diagnostic.sort_key)
    assert [(d.rule_id, d.location.line) for d in ordered] == [("RULE-001", 2), ("RULE-001", 9), ("RULE-006", 1)]


def test_sink_accepts_concurrent_batches():
    sink = DiagnosticSink()

    def push(n):
        sink.extend(_diagnostic(line=i + 1, path=f"{n}.cs") for i in range(50))

    threads = [threading.Thread(target=push, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(sink) == 400
    sink.extend([_diagnostic()])
    assert len(sink.drain()) == 401
    assert sink.snapshot() == []

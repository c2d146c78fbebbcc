# Rich console output: diagnostics grouped by file, colored by severity.

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gclint.findings.models import Diagnostic, Severity

# Remediation hints per rule (shown with --verbose)
RULE_REMEDIATIONS: dict[str, str] = {
    "RULE-001": (
        "Remove the explicit GC.Collect() call and let the runtime decide when to collect; "
        "use GC.AddMemoryPressure or GCSettings.LatencyMode for special cases."
    ),
    "RULE-002": (
        "Call GC.KeepAlive(obj) after the last native call that uses obj, "
        "or hold the handle in a SafeHandle."
    ),
    "RULE-003": (
        "Wrap the resource in a using statement or `using var` declaration, "
        "or call Dispose() in a finally block."
    ),
    "RULE-004": (
        "Report failure through the return value (a Try-pattern method or a result type) "
        "instead of throwing or documenting exceptions on the interface member."
    ),
    "RULE-005": "Rename private instance fields to _camelCase, e.g. _connectionString.",
    "RULE-006": "Move the text to a .resx resource or a named constant.",
}

SEVERITY_STYLE = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "bold yellow",
    Severity.INFO: "bold blue",
}

DEFAULT_SEVERITY_STYLE = "bold white"


def _severity_style(severity: Severity) -> str:
    return SEVERITY_STYLE.get(severity, DEFAULT_SEVERITY_STYLE)


def print_diagnostics(
    diagnostics: Sequence[Diagnostic],
    analyzed_files: Sequence[Path] | None = None,
    failed_files: Sequence[Path] = (),
    verbose: bool = False,
    console: Console | None = None,
) -> None:
    """
    Print diagnostics grouped by file with a per-file table.

    With verbose, remediation hints and rule documentation links are shown
    once per rule and file. If analyzed_files is given, a file summary table
    (clean / with diagnostics / failed) follows.
    """
    console = console or Console()

    if not diagnostics and not analyzed_files:
        console.print(
            Panel(
                "[green]No issues found.[/green]",
                title="gclint Analysis",
                border_style="green",
                box=box.ROUNDED,
            )
        )
        return

    by_file: dict[str, list[Diagnostic]] = {}
    for d in diagnostics:
        by_file.setdefault(str(d.location.path or "<unit>"), []).append(d)

    for path in sorted(by_file):
        file_diagnostics = sorted(by_file[path], key=lambda d: (d.location.line, d.location.column, d.rule_id))

        console.print()
        console.print(
            Panel(
                f"[bold cyan]{path}[/bold cyan]",
                box=box.SIMPLE_HEAD,
                border_style="blue",
                padding=(0, 1),
            )
        )

        table = Table(show_header=True, header_style="bold magenta", box=box.SIMPLE, padding=(0, 1))
        table.add_column("Line", justify="right", style="dim", width=5)
        table.add_column("Col", justify="right", style="dim", width=4)
        table.add_column("Severity", width=9)
        table.add_column("Rule", width=10)
        table.add_column("Message", style="white")

        for d in file_diagnostics:
            table.add_row(
                str(d.location.line),
                str(d.location.column),
                Text(d.severity.value.upper(), style=_severity_style(d.severity)),
                Text(d.rule_id, style="dim"),
                d.message,
            )
        console.print(table)

        if verbose:
            seen_rules: set[str] = set()
            for d in file_diagnostics:
                if d.rule_id in seen_rules:
                    continue
                seen_rules.add(d.rule_id)
                hint = RULE_REMEDIATIONS.get(d.rule_id)
                if hint:
                    console.print(f"  [dim][Fix][/dim] {d.rule_id}: {hint}", soft_wrap=True)
                if d.help_link:
                    console.print(f"  [dim][Doc][/dim] {d.help_link}", soft_wrap=True)
            console.print()

    if analyzed_files:
        _print_file_summary_table(diagnostics, analyzed_files, failed_files, console)

    _print_summary(diagnostics, failed_files, console)


def _print_file_summary_table(
    diagnostics: Sequence[Diagnostic],
    analyzed_files: Sequence[Path],
    failed_files: Sequence[Path],
    console: Console,
) -> None:
    counts: dict[str, int] = {}
    for d in diagnostics:
        key = str(d.location.path)
        counts[key] = counts.get(key, 0) + 1
    failed = {str(p) for p in failed_files}

    table = Table(
        title="Files Summary",
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
        padding=(0, 1),
    )
    table.add_column("File", style="white")
    table.add_column("Status", width=8)
    table.add_column("Diagnostics", justify="right", width=11)

    for p in sorted(analyzed_files, key=str):
        key = str(p)
        if key in failed:
            status = Text("FAILED", style="bold red")
        elif key in counts:
            status = Text("ISSUES", style="bold yellow")
        else:
            status = Text("OK", style="bold green")
        table.add_row(key, status, str(counts.get(key, 0)))

    console.print()
    console.print(Panel(table, border_style="cyan", box=box.ROUNDED))


def _print_summary(diagnostics: Sequence[Diagnostic], failed_files: Sequence[Path], console: Console) -> None:
    by_severity: dict[Severity, int] = {}
    for d in diagnostics:
        by_severity[d.severity] = by_severity.get(d.severity, 0) + 1

    total = len(diagnostics)
    parts = [f"[bold]{total} diagnostic{'s' if total != 1 else ''}[/bold]"]
    for severity in (Severity.ERROR, Severity.WARNING, Severity.INFO):
        if severity in by_severity:
            parts.append(f"[{_severity_style(severity)}]{by_severity[severity]} {severity.value}[/]")
    if failed_files:
        parts.append(f"[bold red]{len(failed_files)} failed unit(s)[/]")

    console.print()
    console.print(
        Panel(
            " | ".join(parts),
            title="Summary",
            border_style="yellow" if total or failed_files else "green",
            box=box.ROUNDED,
        )
    )

from __future__ import annotations

"""
Typer CLI entry point and orchestration of the analysis pipeline.

- Accepts a .cs file or a directory (scanned with traversal.find_cs_files)
- Builds a UnitContext (tree, lowered unit, symbol table) per file
- Runs the enabled rules from config.py on a thread pool
- Prints diagnostics with the rich console reporter

Exit code is 1 when at least one unit could not be fully analysed.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer

from gclint.config import Config, get_default_config, get_enabled_rules
from gclint.context import analyze_contexts, load_contexts
from gclint.engine import create_engine
from gclint.findings.models import Diagnostic
from gclint.findings.sink import DiagnosticSink
from gclint.reporting.console import print_diagnostics
from gclint.rules import StringLiteralOptions
from gclint.rules.hardcoded_strings import DEFAULT_ALLOWED_LITERALS, DEFAULT_MINIMUM_LENGTH
from gclint.traversal import find_cs_files

logger = logging.getLogger(__name__)

app = typer.Typer(help="gclint - memory-management and code-quality analysis for C# sources.")


def _collect_cs_files(target: Path) -> List[Path]:
    """
    Resolve a target path into a list of .cs files to analyze.

    - If target is a .cs file, return [target]
    - If target is a directory, use traversal.find_cs_files()
    """
    if target.is_file():
        if target.suffix.lower() != ".cs":
            raise typer.BadParameter(f"Target file must have .cs extension, got: {target}")
        return [target]

    if target.is_dir():
        files = find_cs_files(target)
        if not files:
            logger.warning("No .cs files found under %s", target)
        return files

    raise typer.BadParameter(f"Target path is neither a file nor a directory: {target}")


def build_config(
    min_length: int = DEFAULT_MINIMUM_LENGTH,
    allow: Optional[List[str]] = None,
    disable: Optional[List[str]] = None,
) -> Config:
    strings = StringLiteralOptions(
        minimum_length=min_length,
        allowed_literals=DEFAULT_ALLOWED_LITERALS | frozenset(allow or ()),
    )
    return get_default_config(strings=strings, disabled_rules=[rule_id.upper() for rule_id in disable or ()])


@app.callback()
def _configure_logging(
    log_level: str = typer.Option("WARNING", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)."),
) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def analyze(
    target: Path = typer.Argument(
        ...,
        exists=True,
        readable=True,
        resolve_path=True,
        help="C# file or directory to analyze.",
    ),
    min_length: int = typer.Option(
        DEFAULT_MINIMUM_LENGTH, "--min-length", min=0, help="Shortest string literal reported by RULE-006."
    ),
    allow: Optional[List[str]] = typer.Option(
        None, "--allow", help="Extra string literal RULE-006 accepts (repeatable)."
    ),
    disable: Optional[List[str]] = typer.Option(None, "--disable", help="Rule id to turn off (repeatable)."),
    jobs: int = typer.Option(4, "--jobs", "-j", min=1, help="Units analysed in parallel."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show remediation hints and rule docs."),
) -> None:
    """Analyze a single C# file or all .cs files under a directory."""
    config = build_config(min_length, allow, disable)
    if not get_enabled_rules(config):
        typer.echo("No rules are enabled in the current configuration.")
        raise typer.Exit(code=1)

    files = _collect_cs_files(target)
    unloaded: List[Path] = []
    contexts = load_contexts(files, failed=unloaded)
    engine = create_engine(config)
    sink = DiagnosticSink()

    failed = sorted(unloaded + analyze_contexts(contexts, engine, sink, jobs=jobs))

    diagnostics: List[Diagnostic] = sorted(sink.snapshot(), key=Diagnostic.sort_key)
    print_diagnostics(
        diagnostics,
        analyzed_files=files,
        failed_files=failed,
        verbose=verbose,
    )
    if failed:
        raise typer.Exit(code=1)


def main() -> None:
    """Entry point for the `gclint` console script and `python -m gclint.main`."""
    app()


if __name__ == "__main__":
    main()

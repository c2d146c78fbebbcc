# Per-unit analysis context: file path, source, tree-sitter tree, lowered syntax tree
# and symbol table. Handles reading/parsing C# files, logs node/method counts, and
# runs the engine over many units on a thread pool.

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Sequence

from tree_sitter import Parser, Tree

from gclint.engine import RuleEngine
from gclint.errors import AnalysisError
from gclint.findings.sink import DiagnosticSink
from gclint.frontend import count_nodes, lower_tree
from gclint.parser import create_parser, parse_bytes
from gclint.symbols import SymbolTable, build_symbol_table
from gclint.syntax import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)


def count_tree_stats(unit: SyntaxNode) -> tuple[int, int]:
    """
    Return (total node count, method declaration count) for a lowered unit.

    Useful for logging how much was parsed.
    """
    return count_nodes(unit), count_nodes(unit, (NodeKind.METHOD_DECLARATION,))


class UnitContext:
    """
    Per-file state for analysis: path, raw source bytes, parse tree, the lowered
    compilation unit and the symbol table built from it.
    """

    def __init__(
        self,
        path: Path,
        source: bytes,
        tree: Tree,
        unit: SyntaxNode,
        oracle: SymbolTable,
        *,
        has_parse_errors: bool = False,
    ) -> None:
        self.path = path
        self.source = source
        self.tree = tree
        self.unit = unit
        self.oracle = oracle
        self.has_parse_errors = has_parse_errors

    def analyze(
        self,
        engine: RuleEngine,
        *,
        sink: Optional[DiagnosticSink] = None,
        cancel: Optional[threading.Event] = None,
    ):
        return engine.run(self.unit, self.oracle, path=self.path, source=self.source, cancel=cancel, sink=sink)


def create_context(
    path: Path,
    parser: Optional[Parser] = None,
) -> Optional[UnitContext]:
    """
    Read a C# file and turn it into a UnitContext.

    - Unreadable file (permission, missing): returns None and logs error.
    - Malformed C# (syntax errors): still returns a context built from whatever
      tree-sitter recovered, with has_parse_errors=True; logs a warning.
    - Failure while lowering the tree or building the symbol table: returns
      None and logs the traceback, so other units are unaffected.
    """
    if parser is None:
        parser = create_parser()

    try:
        source = path.read_bytes()
    except OSError as e:
        logger.error("Failed to read file %s: %s", path, e)
        return None

    tree = parse_bytes(source, parser=parser)
    has_errors = tree.root_node.has_error
    if has_errors:
        logger.warning("File %s parsed with syntax errors; tree may be incomplete", path)

    try:
        unit = lower_tree(tree, source)
        oracle = build_symbol_table(unit)
    except Exception:
        logger.exception("Failed to build the syntax tree for %s", path)
        return None

    node_count, method_count = count_tree_stats(unit)
    logger.info(
        "Parsed %s: %d nodes, %d method(s)%s",
        path,
        node_count,
        method_count,
        " (with parse errors)" if has_errors else "",
    )

    return UnitContext(
        path=path,
        source=source,
        tree=tree,
        unit=unit,
        oracle=oracle,
        has_parse_errors=has_errors,
    )


def load_contexts(
    paths: Sequence[Path],
    parser: Optional[Parser] = None,
    *,
    failed: Optional[list[Path]] = None,
) -> list[UnitContext]:
    """
    Read and parse multiple C# files into UnitContexts.

    Files that cannot be read or lowered are skipped (logged) and, when failed
    is given, appended to it. Order matches input order.
    """
    if parser is None:
        parser = create_parser()

    contexts: list[UnitContext] = []
    for path in paths:
        ctx = create_context(path, parser=parser)
        if ctx is not None:
            contexts.append(ctx)
        elif failed is not None:
            failed.append(path)
    return contexts


def analyze_contexts(
    contexts: Sequence[UnitContext],
    engine: RuleEngine,
    sink: DiagnosticSink,
    *,
    jobs: int = 1,
    cancel: Optional[threading.Event] = None,
) -> list[Path]:
    """
    Run engine over every context, pushing diagnostics into sink.

    Units are independent: with jobs > 1 they are analysed concurrently and a
    failing unit does not stop the others.

    Returns:
        Paths of the units whose analysis failed (rule fault or cancellation).
    """
    failed: list[Path] = []
    failed_lock = threading.Lock()

    def _run(ctx: UnitContext) -> None:
        try:
            ctx.analyze(engine, sink=sink, cancel=cancel)
        except AnalysisError:
            logger.exception("Analysis of %s failed", ctx.path)
            with failed_lock:
                failed.append(ctx.path)

    if jobs <= 1 or len(contexts) <= 1:
        for ctx in contexts:
            _run(ctx)
    else:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            list(pool.map(_run, contexts))

    failed.sort()
    return failed

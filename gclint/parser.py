# Tree-sitter setup and CST parsing: parse C# source code into tree-sitter trees.

import logging
from pathlib import Path
from typing import Optional

import tree_sitter
from tree_sitter import Language
from tree_sitter_c_sharp import language as _c_sharp_language_capsule

logger = logging.getLogger(__name__)

# C# grammar: wrap the tree-sitter-c-sharp capsule for use with tree_sitter.Parser
_CSHARP_LANGUAGE = Language(_c_sharp_language_capsule())


def get_csharp_language() -> Language:
    """Return the Tree-sitter Language object for C#."""
    return _CSHARP_LANGUAGE


def create_parser() -> tree_sitter.Parser:
    """Create and return a Tree-sitter Parser configured for C#."""
    return tree_sitter.Parser(_CSHARP_LANGUAGE)


def parse_bytes(
    source: bytes,
    parser: Optional[tree_sitter.Parser] = None,
) -> tree_sitter.Tree:
    """
    Parse C# source bytes into a concrete syntax tree.

    Args:
        source: UTF-8 encoded C# source code.
        parser: Optional parser instance; if None, a new one is created.

    Returns:
        The parse tree. Check tree.root_node.has_error for ERROR nodes.
    """
    if parser is None:
        parser = create_parser()
    tree = parser.parse(source)
    if tree.root_node.has_error:
        logger.warning("Parse completed with errors: root=%s", tree.root_node.type)
    else:
        logger.debug("Parse succeeded: root=%s", tree.root_node.type)
    return tree


def parse_file(path: Path, parser: Optional[tree_sitter.Parser] = None) -> Optional[tree_sitter.Tree]:
    """
    Parse a C# source file.

    Returns:
        The parse tree, or None if the file could not be read.
    """
    try:
        source = path.read_bytes()
    except OSError as e:
        logger.error("Failed to read file %s: %s", path, e)
        return None
    tree = parse_bytes(source, parser=parser)
    logger.info("Parsed file %s: success=%s", path, not tree.root_node.has_error)
    return tree

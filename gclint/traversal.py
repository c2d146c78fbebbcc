"""
File system traversal: walk directories and collect C# source files.

Build output (bin/obj), package caches and IDE folders are skipped by default.
Unlike a security scan, test projects are analysed too: the hardcoded-string
rule knows how to stay quiet inside test code.

Typical usage:
    from pathlib import Path
    from gclint.traversal import find_cs_files

    sources = find_cs_files(Path("./MySolution"))
    sources = find_cs_files(Path("./MySolution"), ignore_dirs={"bin", "obj"})
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)

# Default directories to ignore during traversal
DEFAULT_IGNORE_DIRS: Set[str] = {
    # Build output
    "bin",
    "obj",
    "artifacts",
    "publish",
    "TestResults",
    # Package caches
    "packages",
    "node_modules",
    # Version control
    ".git",
    ".svn",
    ".hg",
    # IDE and editor directories
    ".vs",
    ".vscode",
    ".idea",
}

# Generated by the compiler or designers; never hand-written.
GENERATED_SUFFIXES = (".g.cs", ".g.i.cs", ".designer.cs", ".AssemblyInfo.cs")


def is_cs_file(path: Path) -> bool:
    """
    Check if a file is a C# source file (.cs extension).

    Examples:
        >>> is_cs_file(Path("Program.cs"))
        True
        >>> is_cs_file(Path("Program.csproj"))
        False
    """
    return path.suffix.lower() == ".cs"


def is_generated_file(path: Path) -> bool:
    name = path.name.lower()
    return any(name.endswith(suffix.lower()) for suffix in GENERATED_SUFFIXES)


def should_ignore_directory(dir_path: Path, ignore_dirs: Set[str]) -> bool:
    """True if dir_path's name is in ignore_dirs (case-sensitive, name only)."""
    return dir_path.name in ignore_dirs


def find_cs_files(
    root: Path,
    ignore_dirs: Optional[Set[str]] = None,
    follow_symlinks: bool = False,
    include_generated: bool = False,
    filter_fn: Optional[Callable[[Path], bool]] = None,
) -> list[Path]:
    """
    Recursively find all C# source files in a directory tree.

    Args:
        root: Root directory to start traversal from.
        ignore_dirs: Directory names to skip. If None, uses DEFAULT_IGNORE_DIRS.
        follow_symlinks: If True, follow symbolic links during traversal.
        include_generated: If True, keep *.g.cs / *.Designer.cs files.
        filter_fn: Optional extra predicate; only files it accepts are kept.

    Returns:
        Paths of all matching files, sorted for deterministic ordering.

    Raises:
        FileNotFoundError: If root does not exist.
        NotADirectoryError: If root is not a directory.
    """
    if ignore_dirs is None:
        ignore_dirs = DEFAULT_IGNORE_DIRS

    root = root.resolve()

    if not root.exists():
        logger.error("Root directory does not exist: %s", root)
        raise FileNotFoundError(f"Root directory does not exist: {root}")

    if not root.is_dir():
        logger.error("Root path is not a directory: %s", root)
        raise NotADirectoryError(f"Root path is not a directory: {root}")

    logger.info("Starting traversal from: %s", root)
    logger.debug(
        "Traversal config: follow_symlinks=%s, include_generated=%s, ignore_dirs=%s",
        follow_symlinks,
        include_generated,
        ignore_dirs,
    )

    collected_files: list[Path] = []

    def _walk_directory(current_dir: Path) -> None:
        try:
            for entry in current_dir.iterdir():
                if entry.is_symlink() and not follow_symlinks:
                    logger.debug("Skipping symlink: %s", entry)
                    continue

                if entry.is_dir():
                    if should_ignore_directory(entry, ignore_dirs):
                        logger.debug("Ignoring directory: %s", entry)
                        continue
                    _walk_directory(entry)

                elif entry.is_file() and is_cs_file(entry):
                    if not include_generated and is_generated_file(entry):
                        logger.debug("Skipping generated file: %s", entry)
                        continue
                    if filter_fn is not None and not filter_fn(entry):
                        logger.debug("Filtered out by custom filter: %s", entry)
                        continue
                    logger.debug("Found source file: %s", entry)
                    collected_files.append(entry)

        except PermissionError as e:
            logger.warning("Permission denied accessing directory %s: %s", current_dir, e)
        except OSError as e:
            logger.warning("Error accessing directory %s: %s", current_dir, e)

    _walk_directory(root)
    collected_files.sort()

    logger.info(
        "Traversal complete: found %d source file(s) in %s",
        len(collected_files),
        root,
    )
    return collected_files

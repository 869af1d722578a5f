"""Instruction file resolution: explicit paths or configured glob patterns."""

from __future__ import annotations

from collections.abc import Iterable
import glob
import logging
from pathlib import Path

from gemini_rulewriter.core.types import Document, Failure, Result, Success

log = logging.getLogger(__name__)

DEFAULT_EXCLUDE_DIRS = frozenset(
    {
        ".git",
        ".hg",
        "__pycache__",
        ".pytest_cache",
        "node_modules",
        ".venv",
        "venv",
        ".tox",
    }
)


def _absolute(directory: Path, path: str | Path) -> Path:
    candidate = Path(path).expanduser()
    return candidate if candidate.is_absolute() else directory / candidate


def read_documents(directory: str | Path, paths: Iterable[str | Path]) -> list[Document]:
    """Load each path (relative paths resolve against ``directory``).

    Unreadable files are kept as documents carrying the read error.
    """
    base = Path(directory)
    return [Document.load(_absolute(base, p)) for p in paths]


def _excluded(path: Path, root: Path) -> bool:
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        parts = path.parts
    return any(part in DEFAULT_EXCLUDE_DIRS for part in parts[:-1])


def expand_patterns(directory: str | Path, patterns: Iterable[str]) -> list[Path]:
    """Expand glob patterns to existing files, in pattern order, de-duplicated."""
    root = Path(directory)
    seen: set[Path] = set()
    found: list[Path] = []
    for pattern in patterns:
        pattern = pattern.strip()
        if not pattern:
            continue
        full = str(_absolute(root, pattern))
        for match in sorted(glob.glob(full, recursive=True)):
            path = Path(match)
            if not path.is_file() or _excluded(path, root):
                continue
            key = path.resolve()
            if key in seen:
                continue
            seen.add(key)
            found.append(path)
    return found


def discover(directory: str | Path, patterns: Iterable[str]) -> Result[list[Document], str]:
    """Find and read the instruction files named by ``patterns``."""
    pattern_list = [p for p in patterns if p.strip()]
    paths = expand_patterns(directory, pattern_list)
    if not paths:
        return Failure(
            f"No instruction files found in {directory} "
            f"(patterns: {', '.join(pattern_list) or 'none configured'})"
        )
    log.debug("Discovered %d instruction file(s): %s", len(paths), paths)
    return Success(read_documents(directory, paths))


def resolve_files(
    directory: str | Path,
    files_arg: str | None = None,
    patterns: Iterable[str] = (),
) -> Result[list[Document], str]:
    """Resolve documents from a comma-separated path list, else by discovery."""
    if files_arg:
        paths = [p.strip() for p in files_arg.split(",") if p.strip()]
        if not paths:
            return Failure("No valid file paths provided")
        documents = read_documents(directory, paths)
        if all(d.failed for d in documents):
            log.warning("None of the %d given path(s) could be read", len(documents))
        return Success(documents)

    return discover(directory, patterns)

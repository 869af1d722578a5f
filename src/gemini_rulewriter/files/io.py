"""File persistence: copy-on-write replacement and in-place appends."""

from __future__ import annotations

from contextlib import suppress
import os
from pathlib import Path
import shutil


def write_text_atomic(path: Path, content: str) -> None:
    """Replace the content of ``path`` all at once.

    Writes a sibling temp file and renames it over the target, so readers see
    either the old file or the new one. Symlinks are followed and the target
    keeps its permission bits. Raises ``OSError`` on failure, leaving the
    original untouched.
    """
    target = Path(path).resolve()
    tmp = target.with_name(f".{target.name}.{os.getpid()}.tmp")
    try:
        tmp.write_text(content, encoding="utf-8", newline="")
        if target.exists():
            shutil.copymode(target, tmp)
        Path.replace(tmp, target)
    except OSError:
        with suppress(OSError):
            tmp.unlink(missing_ok=True)
        raise


def append_text(path: Path, text: str) -> None:
    """Append ``text`` to the end of ``path`` without rewriting earlier bytes."""
    with Path(path).open("a", encoding="utf-8", newline="") as f:
        f.write(text)

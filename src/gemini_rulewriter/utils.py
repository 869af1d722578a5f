"""Small text helpers shared by the pipeline stages."""

import re

# Opening fence: anything on the line before it, optional json tag.
_OPEN_FENCE = re.compile(r"^.*?```(?:json)?\s*\n?", re.MULTILINE)
_CLOSE_FENCE = re.compile(r"\n?```\s*$", re.MULTILINE)


def strip_code_fences(text: str) -> str:
    """Strip one markdown code fence pair from a completion.

    Handles fences at line start as well as fences preceded by prose on the
    same line. Unfenced text is returned trimmed.
    """
    text = _OPEN_FENCE.sub("", text, count=1)
    text = _CLOSE_FENCE.sub("", text, count=1)
    return text.strip()


def byte_length(text: str) -> int:
    """UTF-8 encoded length of ``text``."""
    return len(text.encode("utf-8"))


def truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit]

"""Append newly structured rules to an existing instruction file.

Only the new input is sent to the completion service. The target is read
up front to fail fast, then read again just before writing so the separator
matches its current tail. The formatted block is appended in place; earlier
bytes are never rewritten.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from gemini_rulewriter.core.types import (
    DEFAULT_MODE,
    AppendOutcome,
    AppendSuccess,
    Document,
    FormattingFailure,
    OutputMode,
    ReadFailure,
    StructuringFailure,
    WriteFailure,
    resolve_mode,
)
from gemini_rulewriter.files.io import append_text
from gemini_rulewriter.pipeline.rewrite import join_rules, structure_and_format
from gemini_rulewriter.telemetry import TelemetryContext

if TYPE_CHECKING:
    from gemini_rulewriter.pipeline.retry import AskFn
    from gemini_rulewriter.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)


def separator_for(existing: str) -> str:
    """Text to place between ``existing`` and an appended block.

    Guarantees exactly one blank line between old and new content without
    touching the old content itself.
    """
    if not existing or existing.endswith("\n\n"):
        return ""
    if existing.endswith("\n"):
        return "\n"
    return "\n\n"


async def append_rules(
    text: str,
    file_path: str | Path,
    ask: AskFn,
    mode: OutputMode | str | None = DEFAULT_MODE,
    *,
    directory: str | Path | None = None,
    telemetry: TelemetryContextProtocol | None = None,
) -> AppendOutcome:
    """Structure and format ``text``, then append the rules to ``file_path``.

    Args:
        text: New unstructured instruction text.
        file_path: Target file; relative paths resolve against ``directory``.
        ask: Prompt capability bound to a completion session.
        mode: Output mode for the formatting stage.
        directory: Base directory for relative ``file_path`` values.
        telemetry: Optional telemetry context.

    Returns:
        ``AppendSuccess`` with the appended rule count, or the failure of the
        stage that stopped the append.
    """
    tele = telemetry or TelemetryContext()
    resolved_mode = resolve_mode(mode)
    path = Path(file_path).expanduser()
    if directory is not None and not path.is_absolute():
        path = Path(directory) / path

    target = Document.load(path)
    if target.error is not None:
        log.info("Cannot append to %s: %s", path, target.error)
        return ReadFailure(path, target.error)

    with tele("append", file=path.name):
        result = await structure_and_format(path, text, ask, resolved_mode, tele)
    if isinstance(result, StructuringFailure | FormattingFailure):
        return result

    block = join_rules(result, resolved_mode)
    current = Document.load(path)
    if current.error is not None:
        log.warning("Write failed for %s: %s", path, current.error)
        return WriteFailure(path, current.error)
    try:
        append_text(path, separator_for(current.content) + block)
    except OSError as e:
        log.warning("Write failed for %s: %s", path, e)
        return WriteFailure(path, str(e))

    log.info("Appended %d rule(s) to %s", len(result), path)
    return AppendSuccess(path=path, rule_count=len(result))

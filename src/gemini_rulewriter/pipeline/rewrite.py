"""Two-stage rewrite of one instruction file.

State machine, terminal on the first failure:
read-check -> structure -> format -> persist. Each stage failure becomes a
tagged outcome; nothing is raised for per-file problems.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gemini_rulewriter.core.schema import FormattedRuleSet, StructuredRuleSet
from gemini_rulewriter.core.types import (
    DEFAULT_MODE,
    Document,
    Failure,
    FileOutcome,
    FileSuccess,
    FormattingFailure,
    OutputMode,
    PromptOutcome,
    ReadFailure,
    StructuringFailure,
    Success,
    WriteFailure,
    resolve_mode,
)
from gemini_rulewriter.files.io import write_text_atomic
from gemini_rulewriter.prompts.builders import (
    build_format_prompt,
    build_structure_prompt,
)
from gemini_rulewriter.report import compare_bytes
from gemini_rulewriter.telemetry import TelemetryContext

if TYPE_CHECKING:
    from pathlib import Path

    from pydantic import BaseModel

    from gemini_rulewriter.pipeline.retry import AskFn
    from gemini_rulewriter.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

NO_DATA = "no data"


def error_of(outcome: PromptOutcome[BaseModel]) -> str | None:
    """Return the failure text of an exchange, treating an empty value as an error."""
    match outcome:
        case Failure(error=error):
            return error or NO_DATA
        case Success(value=None):
            return NO_DATA
        case Success():
            return None


def join_rules(rules: list[str], mode: OutputMode) -> str:
    """Join rendered rules into file text ending in a single newline.

    Concise bullet items form one contiguous list; other modes separate rules
    with a blank line.
    """
    separator = "\n" if mode is OutputMode.CONCISE else "\n\n"
    return separator.join(rules) + "\n"


async def structure_and_format(
    path: Path,
    text: str,
    ask: AskFn,
    mode: OutputMode,
    telemetry: TelemetryContextProtocol,
) -> StructuringFailure | FormattingFailure | list[str]:
    """Run the structuring then formatting exchanges over ``text``.

    Returns:
        The formatted rule strings, or the failure of the first stage that failed.
    """
    with telemetry("structure"):
        structured = await ask(build_structure_prompt(text), StructuredRuleSet)
    if (error := error_of(structured)) is not None:
        log.info("Structuring failed for %s: %s", path, error)
        return StructuringFailure(path, error)

    rules_json = structured.value.model_dump_json(exclude_none=True)
    with telemetry("format"):
        formatted = await ask(build_format_prompt(rules_json, mode), FormattedRuleSet)
    if (error := error_of(formatted)) is not None:
        log.info("Formatting failed for %s: %s", path, error)
        return FormattingFailure(path, error)

    return list(formatted.value.rules)


async def process_file(
    document: Document,
    ask: AskFn,
    mode: OutputMode | str | None = DEFAULT_MODE,
    *,
    telemetry: TelemetryContextProtocol | None = None,
) -> FileOutcome:
    """Structure, format and rewrite a single document.

    Args:
        document: The loaded document (possibly carrying a read failure).
        ask: Prompt capability bound to a completion session.
        mode: Output mode for the formatting stage.
        telemetry: Optional telemetry context.

    Returns:
        Exactly one ``FileOutcome`` for the document.
    """
    tele = telemetry or TelemetryContext()
    resolved_mode = resolve_mode(mode)
    path = document.path

    if document.error is not None:
        return ReadFailure(path, document.error)

    with tele("rewrite", file=path.name):
        result = await structure_and_format(
            path, document.content, ask, resolved_mode, tele
        )
    if isinstance(result, StructuringFailure | FormattingFailure):
        return result

    content = join_rules(result, resolved_mode)
    try:
        write_text_atomic(path, content)
    except OSError as e:
        log.warning("Write failed for %s: %s", path, e)
        return WriteFailure(path, str(e))

    log.info("Rewrote %s with %d rules", path, len(result))
    return FileSuccess(
        path=path,
        rule_count=len(result),
        comparison=compare_bytes(path.name, document.content, content),
    )

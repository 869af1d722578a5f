"""Turn messy user input into a numbered task hierarchy."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gemini_rulewriter.core.schema import ParsedPrompt, ParsedTask
from gemini_rulewriter.core.types import (
    Failure,
    RefineFailure,
    RefineSuccess,
    Success,
)
from gemini_rulewriter.prompts.builders import build_refine_prompt
from gemini_rulewriter.telemetry import TelemetryContext

if TYPE_CHECKING:
    from gemini_rulewriter.pipeline.retry import AskFn
    from gemini_rulewriter.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

NO_PARSE_DATA = "Parse returned no data"

type RefineOutcome = RefineSuccess[ParsedPrompt] | RefineFailure


async def process_prompt(
    text: str,
    ask: AskFn,
    *,
    telemetry: TelemetryContextProtocol | None = None,
) -> RefineOutcome:
    """Decompose ``text`` into tasks and render them as markdown."""
    tele = telemetry or TelemetryContext()
    with tele("refine"):
        outcome = await ask(build_refine_prompt(text), ParsedPrompt)

    match outcome:
        case Failure(error=error):
            log.info("Prompt refinement failed: %s", error)
            return RefineFailure(error or NO_PARSE_DATA)
        case Success(value=ParsedPrompt() as parsed):
            return RefineSuccess(formatted=format_prompt(parsed), parsed=parsed)
        case _:
            return RefineFailure(NO_PARSE_DATA)


def _format_task(task: ParsedTask, index: int, depth: int) -> list[str]:
    indent = "  " * depth
    marker = f"{index + 1}." if depth == 0 else "-"
    lines = [f"{indent}{marker} {task.intent}"]
    # Detail lines sit under the intent text, past the marker.
    detail = indent + "   "
    if task.targets:
        lines.append(f"{detail}Targets: {', '.join(task.targets)}")
    if task.constraints:
        lines.append(f"{detail}Constraints: {', '.join(task.constraints)}")
    if task.context:
        lines.append(f"{detail}Context: {task.context}")
    for i, subtask in enumerate(task.subtasks):
        lines.extend(_format_task(subtask, i, depth + 1))
    return lines


def format_prompt(parsed: ParsedPrompt) -> str:
    """Render a task hierarchy; top-level tasks are separated by a blank line."""
    return "\n\n".join(
        "\n".join(_format_task(task, i, 0)) for i, task in enumerate(parsed.tasks)
    )

"""Prompt-validate-retry driver.

One logical exchange with the completion service: send a prompt, validate
the reply against a pydantic schema, and on content failures re-prompt with a
correction message. The loop is bounded by ``MAX_ATTEMPTS``.

Failure taxonomy:
- transport: the completion function returned no data at all; not retried.
- upstream: the service annotated the reply with an error; not retried.
- content: empty, malformed or off-schema reply; retried with a correction
  prompt until attempts run out.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from gemini_rulewriter.core.types import (
    CompletionResponse,
    Failure,
    PromptOutcome,
    Success,
)
from gemini_rulewriter.core.validation import format_validation_error, validate_json
from gemini_rulewriter.prompts.builders import build_retry_prompt
from gemini_rulewriter.telemetry import TelemetryContext
from gemini_rulewriter.utils import strip_code_fences, truncate

if TYPE_CHECKING:
    from gemini_rulewriter.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
RAW_EXCERPT_LIMIT = 200

EMPTY_RESPONSE = "Empty response"
EMPTY_RESPONSE_CORRECTION = "Empty response. Return valid, non-empty JSON."

# Sends one prompt; returns None when the transport produced no data.
type Complete = Callable[[str], Awaitable[CompletionResponse | None]]

# The capability the pipelines depend on: prompt + expected shape -> outcome.
type AskFn = Callable[[str, type[BaseModel]], Awaitable[PromptOutcome[BaseModel]]]


class PromptRetryDriver:
    """Drives prompt exchanges through an injected completion function.

    The driver is agnostic to transport details; model and session binding
    live in the ``complete`` callable supplied by the caller.
    """

    def __init__(
        self,
        complete: Complete,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        """Initialize the driver.

        Args:
            complete: Async callable sending one prompt to the service.
            max_attempts: Attempt ceiling; clamped to ``1..MAX_ATTEMPTS``.
            telemetry: Optional telemetry context.
        """
        self._complete = complete
        self._max_attempts = max(1, min(max_attempts, MAX_ATTEMPTS))
        self._telemetry: TelemetryContextProtocol = telemetry or TelemetryContext()

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def ask[M: BaseModel](
        self, initial_prompt: str, schema: type[M]
    ) -> PromptOutcome[M]:
        """Ask for a value of ``schema``, retrying content failures.

        Returns:
            ``Success`` with the validated model, or ``Failure`` with a
            human-readable error.
        """
        prompt = initial_prompt
        last_error = ""

        with self._telemetry("prompt.ask", schema=schema.__name__):
            for attempt in range(1, self._max_attempts + 1):
                log.debug(
                    "Prompt attempt %d/%d for %s",
                    attempt,
                    self._max_attempts,
                    schema.__name__,
                )
                with self._telemetry("prompt.attempt", attempt=attempt):
                    response = await self._complete(prompt)

                if response is None:
                    log.warning("No response from completion service (attempt %d)", attempt)
                    return Failure(
                        f"No response from completion service (attempt {attempt})"
                    )

                if response.error:
                    log.warning("Completion service reported an error: %s", response.error)
                    return Failure(response.error)

                text = response.text
                if not text:
                    last_error = EMPTY_RESPONSE
                    prompt = build_retry_prompt(EMPTY_RESPONSE_CORRECTION)
                    self._telemetry.count("prompt.retry", reason="empty")
                    log.warning("Empty response on attempt %d; retrying", attempt)
                    continue

                cleaned = strip_code_fences(text)
                validation = validate_json(cleaned, schema)
                match validation:
                    case Success(value=value):
                        return Success(value)
                    case Failure(error=error):
                        message = format_validation_error(error)
                        last_error = (
                            f"{message} | raw: {truncate(cleaned, RAW_EXCERPT_LIMIT)}"
                        )
                        prompt = build_retry_prompt(message)
                        self._telemetry.count(
                            "prompt.retry", reason=type(error).__name__
                        )
                        log.warning(
                            "Invalid response on attempt %d; retrying: %s",
                            attempt,
                            message.splitlines()[0],
                        )

        return Failure(
            f"Failed after {self._max_attempts} attempts. Last error: {last_error}"
        )

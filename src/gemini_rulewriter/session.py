"""Scratch completion sessions and the bound ``ask`` capability.

A session is the conversational context every exchange of one command shares.
It is created explicitly, passed to whatever needs it, and torn down on a
best-effort basis: teardown problems are logged and never replace the
command's own result.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from gemini_rulewriter.pipeline.retry import MAX_ATTEMPTS, PromptRetryDriver

if TYPE_CHECKING:
    from gemini_rulewriter.core.types import CompletionResponse, ModelRef
    from gemini_rulewriter.pipeline.retry import AskFn
    from gemini_rulewriter.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)

DEFAULT_TITLE = "Rulewriter"


@runtime_checkable
class CompletionSession(Protocol):
    """One conversational context on the completion service."""

    id: str
    title: str
    model: ModelRef

    async def send(self, text: str) -> CompletionResponse | None:
        """Send one prompt; ``None`` means the transport produced no data."""
        ...


@runtime_checkable
class SessionProvider(Protocol):
    """Creates and destroys scratch sessions."""

    async def create_session(self, title: str, model: ModelRef) -> CompletionSession:
        """Create a session, raising ``SessionError`` when that is impossible."""
        ...

    async def delete_session(self, session: CompletionSession) -> None: ...


@asynccontextmanager
async def open_session(
    provider: SessionProvider,
    *,
    model: ModelRef,
    title: str = DEFAULT_TITLE,
) -> AsyncIterator[CompletionSession]:
    """Create a scratch session for the duration of the ``async with`` block."""
    session = await provider.create_session(title, model)
    log.debug("Opened session %s (%s) on %s", session.id, title, model.model_id)
    try:
        yield session
    finally:
        try:
            await provider.delete_session(session)
            log.debug("Closed session %s", session.id)
        except Exception as e:
            log.debug("Session %s teardown failed: %s", session.id, e)


def bind_ask(
    session: CompletionSession,
    *,
    max_attempts: int = MAX_ATTEMPTS,
    telemetry: TelemetryContextProtocol | None = None,
) -> AskFn:
    """Build the pipelines' ``ask`` capability over ``session``."""
    driver = PromptRetryDriver(
        session.send, max_attempts=max_attempts, telemetry=telemetry
    )
    return driver.ask

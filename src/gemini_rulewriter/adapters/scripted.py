"""Deterministic session provider that replays queued replies (no network)."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
import itertools

from gemini_rulewriter.core.types import CompletionResponse, ModelRef
from gemini_rulewriter.exceptions import SessionError

type ScriptedReply = CompletionResponse | str | None


class ScriptedSession:
    def __init__(
        self,
        session_id: str,
        title: str,
        model: ModelRef,
        provider: ScriptedSessionProvider,
    ):
        self.id = session_id
        self.title = title
        self.model = model
        self._provider = provider

    async def send(self, text: str) -> CompletionResponse | None:
        return self._provider._next_reply(self, text)


class ScriptedSessionProvider:
    """Serves replies in order across all of its sessions.

    ``str`` replies become single-part responses and ``None`` simulates a
    transport failure. Running out of replies also yields ``None``.
    """

    def __init__(
        self,
        replies: Iterable[ScriptedReply] = (),
        *,
        fail_create: bool = False,
        fail_delete: bool = False,
    ):
        self._replies: deque[ScriptedReply] = deque(replies)
        self._fail_create = fail_create
        self._fail_delete = fail_delete
        self._ids = itertools.count(1)
        self.prompts: list[tuple[str, str]] = []
        self.created: list[ScriptedSession] = []
        self.deleted: list[str] = []

    def queue(self, *replies: ScriptedReply) -> None:
        self._replies.extend(replies)

    @property
    def remaining(self) -> int:
        return len(self._replies)

    async def create_session(self, title: str, model: ModelRef) -> ScriptedSession:
        if self._fail_create:
            raise SessionError(f"Failed to create session '{title}'")
        session = ScriptedSession(f"scripted-{next(self._ids)}", title, model, self)
        self.created.append(session)
        return session

    async def delete_session(self, session: ScriptedSession) -> None:
        if self._fail_delete:
            raise SessionError(f"Failed to delete session {session.id}")
        self.deleted.append(session.id)

    def _next_reply(
        self, session: ScriptedSession, text: str
    ) -> CompletionResponse | None:
        self.prompts.append((session.id, text))
        if not self._replies:
            return None
        reply = self._replies.popleft()
        if isinstance(reply, str):
            return CompletionResponse.from_text(reply)
        return reply

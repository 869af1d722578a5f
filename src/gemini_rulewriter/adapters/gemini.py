"""Gemini completion sessions backed by ``google-genai`` async chats.

Each scratch session is one ``client.aio.chats`` chat, so its history is the
conversational context shared by every exchange of a command. Provider SDK
types never leave this module: replies are mapped to ``CompletionResponse``.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any

from google import genai
from google.genai import errors, types
import httpx

from gemini_rulewriter.core.types import CompletionResponse, ModelRef, TextPart
from gemini_rulewriter.exceptions import MissingKeyError, SessionError

log = logging.getLogger(__name__)

# Finish reasons that mean the service refused to answer the request.
_REJECTING_FINISH_REASONS = frozenset(
    {"SAFETY", "RECITATION", "BLOCKLIST", "PROHIBITED_CONTENT", "SPII"}
)


def _enum_name(value: Any) -> str:
    return str(getattr(value, "name", value))


def to_completion_response(response: Any) -> CompletionResponse:
    """Map a ``GenerateContentResponse`` onto the neutral response type."""
    feedback = getattr(response, "prompt_feedback", None)
    block_reason = getattr(feedback, "block_reason", None)
    if block_reason:
        return CompletionResponse(error=f"Prompt blocked: {_enum_name(block_reason)}")

    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return CompletionResponse()

    candidate = candidates[0]
    finish_reason = getattr(candidate, "finish_reason", None)
    if finish_reason is not None and _enum_name(finish_reason) in _REJECTING_FINISH_REASONS:
        return CompletionResponse(
            error=f"Response stopped: {_enum_name(finish_reason)}"
        )

    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []
    return CompletionResponse(
        parts=tuple(
            TextPart(p.text)
            for p in parts
            if getattr(p, "text", None) and not getattr(p, "thought", False)
        )
    )


class GeminiSession:
    """A chat on the Gemini API used as a scratch completion session."""

    def __init__(self, session_id: str, title: str, model: ModelRef, chat: Any):
        self.id = session_id
        self.title = title
        self.model = model
        self._chat = chat

    async def send(self, text: str) -> CompletionResponse | None:
        try:
            response = await self._chat.send_message(text)
        except errors.APIError as e:
            log.warning("Gemini API error in session %s: %s", self.id, e)
            return CompletionResponse(error=f"{e.code} {e.message or e.status}")
        except httpx.TransportError as e:
            log.warning("Gemini transport error in session %s: %s", self.id, e)
            return None
        except Exception as e:  # SDK errors outside APIError end this exchange only
            log.warning("Gemini client error in session %s: %s", self.id, e)
            return CompletionResponse(error=f"{type(e).__name__}: {e}")
        return to_completion_response(response)


class GeminiSessionProvider:
    """Creates Gemini chats; chats live client-side, so deletion drops them."""

    def __init__(
        self,
        api_key: str | None,
        *,
        client: Any | None = None,
        temperature: float | None = None,
    ):
        if client is None:
            if not api_key:
                raise MissingKeyError(
                    "A Gemini API key is required; set GEMINI_RULEWRITER_API_KEY "
                    "or api_key in the configuration"
                )
            client = genai.Client(api_key=api_key)
        self._client = client
        self._temperature = temperature
        self._ids = itertools.count(1)
        self._open: dict[str, GeminiSession] = {}

    @property
    def open_sessions(self) -> int:
        return len(self._open)

    async def create_session(self, title: str, model: ModelRef) -> GeminiSession:
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            temperature=self._temperature,
        )
        try:
            chat = self._client.aio.chats.create(model=model.model_id, config=config)
        except (errors.APIError, ValueError) as e:
            raise SessionError(f"Failed to create session '{title}': {e}") from e

        session = GeminiSession(f"gemini-{next(self._ids)}", title, model, chat)
        self._open[session.id] = session
        return session

    async def delete_session(self, session: GeminiSession) -> None:
        if self._open.pop(session.id, None) is None:
            raise SessionError(f"Unknown session: {session.id}")

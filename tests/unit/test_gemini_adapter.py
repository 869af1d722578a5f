"""
Unit tests for the google-genai session provider, with the SDK client mocked.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from google.genai import errors
import httpx
import pytest

from gemini_rulewriter.adapters.gemini import (
    GeminiSessionProvider,
    to_completion_response,
)
from gemini_rulewriter.core.types import CompletionResponse, ModelRef, TextPart
from gemini_rulewriter.exceptions import MissingKeyError, SessionError

MODEL = ModelRef("google", "gemini-2.0-flash")


def part(text=None, thought=None):
    return SimpleNamespace(text=text, thought=thought)


def reply(*parts, finish_reason="STOP", block_reason=None):
    return SimpleNamespace(
        prompt_feedback=SimpleNamespace(block_reason=block_reason),
        candidates=[
            SimpleNamespace(
                finish_reason=SimpleNamespace(name=finish_reason),
                content=SimpleNamespace(parts=list(parts)),
            )
        ],
    )


def provider_with(chat) -> tuple[GeminiSessionProvider, MagicMock]:
    client = MagicMock()
    client.aio.chats.create.return_value = chat
    return GeminiSessionProvider(None, client=client), client


@pytest.mark.unit
class TestResponseMapping:
    def test_text_parts_are_kept_and_thoughts_dropped(self):
        response = to_completion_response(
            reply(part('{"rules"'), part("thinking...", thought=True), part(': []}'))
        )
        assert response == CompletionResponse(
            parts=(TextPart('{"rules"'), TextPart(": []}"))
        )
        assert response.text == '{"rules": []}'

    def test_blocked_prompt_is_an_upstream_error(self):
        response = to_completion_response(
            reply(block_reason=SimpleNamespace(name="SAFETY"))
        )
        assert response.error == "Prompt blocked: SAFETY"

    def test_safety_finish_reason_is_an_upstream_error(self):
        response = to_completion_response(reply(part("x"), finish_reason="SAFETY"))
        assert response.error == "Response stopped: SAFETY"

    def test_max_tokens_is_not_an_error(self):
        response = to_completion_response(reply(part("{"), finish_reason="MAX_TOKENS"))
        assert response.error is None
        assert response.text == "{"

    def test_no_candidates_is_an_empty_response(self):
        response = to_completion_response(SimpleNamespace(candidates=None))
        assert response == CompletionResponse()


def test_missing_api_key_raises():
    with pytest.raises(MissingKeyError):
        GeminiSessionProvider(None)


@pytest.mark.asyncio
async def test_session_sends_through_chat():
    chat = MagicMock()
    chat.send_message = AsyncMock(return_value=reply(part('{"rules": []}')))
    provider, client = provider_with(chat)

    session = await provider.create_session("Rulewriter Rewrite", MODEL)
    response = await session.send("prompt text")

    assert response.text == '{"rules": []}'
    chat.send_message.assert_awaited_once_with("prompt text")
    assert client.aio.chats.create.call_args.kwargs["model"] == "gemini-2.0-flash"
    assert provider.open_sessions == 1


@pytest.mark.asyncio
async def test_api_error_becomes_upstream_error():
    chat = MagicMock()
    chat.send_message = AsyncMock(
        side_effect=errors.APIError(
            429, {"error": {"message": "quota exhausted", "status": "RESOURCE_EXHAUSTED"}}
        )
    )
    provider, _ = provider_with(chat)
    session = await provider.create_session("t", MODEL)

    response = await session.send("p")

    assert response is not None
    assert response.error == "429 quota exhausted"


@pytest.mark.asyncio
async def test_transport_error_means_no_data():
    chat = MagicMock()
    chat.send_message = AsyncMock(side_effect=httpx.ConnectError("refused"))
    provider, _ = provider_with(chat)
    session = await provider.create_session("t", MODEL)

    assert await session.send("p") is None


@pytest.mark.asyncio
async def test_unexpected_sdk_error_becomes_upstream_error():
    chat = MagicMock()
    chat.send_message = AsyncMock(side_effect=RuntimeError("stream closed"))
    provider, _ = provider_with(chat)
    session = await provider.create_session("t", MODEL)

    response = await session.send("p")

    assert response is not None
    assert response.error == "RuntimeError: stream closed"


@pytest.mark.asyncio
async def test_create_failure_raises_session_error():
    client = MagicMock()
    client.aio.chats.create.side_effect = ValueError("bad model")
    provider = GeminiSessionProvider(None, client=client)

    with pytest.raises(SessionError, match="bad model"):
        await provider.create_session("t", MODEL)


@pytest.mark.asyncio
async def test_delete_drops_session_and_rejects_unknown():
    provider, _ = provider_with(MagicMock())
    session = await provider.create_session("t", MODEL)

    await provider.delete_session(session)
    assert provider.open_sessions == 0

    with pytest.raises(SessionError):
        await provider.delete_session(session)

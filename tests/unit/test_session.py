import logging

import pytest

from gemini_rulewriter.adapters.scripted import ScriptedSessionProvider
from gemini_rulewriter.core.schema import FormattedRuleSet
from gemini_rulewriter.core.types import CompletionResponse, Failure, ModelRef, Success
from gemini_rulewriter.exceptions import SessionError
from gemini_rulewriter.session import (
    CompletionSession,
    SessionProvider,
    bind_ask,
    open_session,
)

MODEL = ModelRef("google", "gemini-2.0-flash")


def test_scripted_provider_satisfies_protocols():
    provider = ScriptedSessionProvider()
    assert isinstance(provider, SessionProvider)


@pytest.mark.asyncio
async def test_open_session_creates_and_deletes():
    provider = ScriptedSessionProvider()

    async with open_session(provider, model=MODEL, title="Rulewriter Add") as session:
        assert isinstance(session, CompletionSession)
        assert session.title == "Rulewriter Add"
        assert session.model == MODEL
        assert provider.deleted == []

    assert provider.deleted == [session.id]


@pytest.mark.asyncio
async def test_session_is_deleted_when_body_raises():
    provider = ScriptedSessionProvider()

    with pytest.raises(RuntimeError, match="boom"):
        async with open_session(provider, model=MODEL):
            raise RuntimeError("boom")

    assert len(provider.deleted) == 1


@pytest.mark.asyncio
async def test_teardown_failure_is_swallowed_and_logged(caplog):
    provider = ScriptedSessionProvider(fail_delete=True)

    with caplog.at_level(logging.DEBUG, logger="gemini_rulewriter.session"):
        async with open_session(provider, model=MODEL) as session:
            result = session.id

    assert result == "scripted-1"
    assert "teardown failed" in caplog.text


@pytest.mark.asyncio
async def test_create_failure_raises_session_error():
    provider = ScriptedSessionProvider(fail_create=True)
    with pytest.raises(SessionError):
        async with open_session(provider, model=MODEL):
            pass


@pytest.mark.asyncio
async def test_bind_ask_drives_retries_through_the_session():
    provider = ScriptedSessionProvider(["not json", '{"rules": ["- a"]}'])

    async with open_session(provider, model=MODEL) as session:
        ask = bind_ask(session)
        result = await ask("format these", FormattedRuleSet)

    assert isinstance(result, Success)
    assert result.value.rules == ["- a"]
    sent = [text for _, text in provider.prompts]
    assert sent[0] == "format these"
    assert sent[1].startswith("Your previous response was invalid.")


@pytest.mark.asyncio
async def test_scripted_provider_reports_no_data_when_exhausted():
    provider = ScriptedSessionProvider([CompletionResponse(error="quota")])

    async with open_session(provider, model=MODEL) as session:
        ask = bind_ask(session)
        first = await ask("p", FormattedRuleSet)
        second = await ask("p", FormattedRuleSet)

    assert first == Failure("quota")
    assert second == Failure("No response from completion service (attempt 1)")
    assert provider.remaining == 0

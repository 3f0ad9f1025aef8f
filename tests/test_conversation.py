"""Tests for Conversation turn handling."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from aurora.chat import conversation as conversation_module
from aurora.chat.conversation import (
    BUSY_NOTICE,
    LOW_CONFIDENCE_NOTICE,
    Conversation,
    get_conversation,
)
from aurora.chat.models import Message, Role
from aurora.connectivity import Connectivity, ConnectivityMonitor
from aurora.engine.router import IntentRouter
from aurora.engine.session import SessionPhase
from aurora.errors import ModelError, PersistenceError, SpeechError
from aurora.llm.client import LLMFallback
from aurora.logbuffer import LogBuffer
from aurora.notifications import Notice
from aurora.speech import Transcript

# -- Helpers -----------------------------------------------------------------


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.01)


@pytest.fixture
def connectivity() -> MagicMock:
    monitor = MagicMock(spec=ConnectivityMonitor)
    monitor.status = AsyncMock(return_value=Connectivity.ONLINE)
    return monitor


@pytest.fixture
def notifier() -> MagicMock:
    fake = MagicMock()
    fake.notify = AsyncMock(return_value=True)
    return fake


@pytest.fixture
def make_conversation(store, toolkit, llm, connectivity, notifier):
    def _make(**overrides) -> Conversation:
        chosen_llm = overrides.pop("llm", llm)
        kwargs = {
            "store": store,
            "router": IntentRouter(toolkit, chosen_llm),
            "llm": chosen_llm,
            "connectivity": connectivity,
            "notifier": notifier,
        }
        kwargs.update(overrides)
        return Conversation("s1", **kwargs)

    return _make


# -- Turns -------------------------------------------------------------------


async def test_submit_persists_both_turns(make_conversation, store, llm) -> None:
    conv = make_conversation()

    reply = await conv.submit("hello there")

    assert reply is not None
    assert reply.text == "model reply"
    assert reply.role is Role.ASSISTANT
    history = await store.history("s1")
    assert [(m.role, m.text) for m in history] == [
        (Role.USER, "hello there"),
        (Role.ASSISTANT, "model reply"),
    ]
    llm.complete.assert_awaited_once()
    assert not conv.busy


async def test_history_is_passed_without_current_utterance(make_conversation, llm) -> None:
    conv = make_conversation()
    await conv.submit("first question")
    await conv.submit("second question")

    history = llm.complete.await_args_list[1].args[1]
    assert [m.text for m in history] == ["first question", "model reply"]


async def test_blank_utterance_is_ignored(make_conversation, store) -> None:
    conv = make_conversation()
    assert await conv.submit("   ") is None
    assert await store.history("s1") == []


async def test_route_notices_are_delivered(make_conversation, llm, notifier) -> None:
    llm.complete.side_effect = ModelError("API Error: 500 - boom")
    conv = make_conversation()

    reply = await conv.submit("hello there")

    assert reply.text.startswith("I'm experiencing some technical difficulties")
    notifier.notify.assert_awaited_once_with(
        "s1", Notice.error("Failed to get response: API Error: 500 - boom")
    )


async def test_session_state_carries_across_turns(make_conversation, monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.creator_phrase", "i am calvin")
    monkeypatch.setattr("aurora.config.settings.creator_password", "1945")
    conv = make_conversation()

    await conv.submit("I am Calvin")
    assert conv.session.phase is SessionPhase.AWAITING_PASSWORD
    await conv.submit("1945")
    assert conv.session.phase is SessionPhase.CREATOR_MODE


# -- Persistence failures ----------------------------------------------------


async def test_user_persist_failure_aborts_turn(make_conversation, llm, notifier) -> None:
    store = MagicMock()
    store.history = AsyncMock(return_value=[])
    store.append = AsyncMock(side_effect=PersistenceError("disk full"))
    conv = make_conversation(store=store)

    assert await conv.submit("hello there") is None

    llm.complete.assert_not_awaited()
    notifier.notify.assert_awaited_once_with(
        "s1", Notice.error("Failed to send message: disk full")
    )
    assert not conv.busy


async def test_reply_persist_failure_notifies(make_conversation, notifier) -> None:
    store = MagicMock()
    store.history = AsyncMock(return_value=[])
    store.append = AsyncMock(
        side_effect=[Message(id="u1", role=Role.USER, text="hi"), PersistenceError("disk full")]
    )
    conv = make_conversation(store=store)

    assert await conv.submit("hello there") is None
    notifier.notify.assert_awaited_once_with(
        "s1", Notice.error("Failed to save AI response: disk full")
    )


# -- Concurrency -------------------------------------------------------------


async def test_busy_conversation_rejects_new_message(make_conversation, toolkit, notifier) -> None:
    started = asyncio.Event()
    release = asyncio.Event()

    async def slow_weather(location: str) -> str:
        started.set()
        await release.wait()
        return "sunny"

    toolkit.weather.side_effect = slow_weather
    conv = make_conversation()

    pending = asyncio.create_task(conv.submit("weather in Paris"))
    async with asyncio.timeout(2):
        await started.wait()

    assert conv.busy
    assert await conv.submit("hello there") is None
    notifier.notify.assert_awaited_once_with("s1", Notice.warning(BUSY_NOTICE))

    release.set()
    reply = await pending
    assert reply.text == "sunny"
    assert not conv.busy


def _gated_client() -> MagicMock:
    """Blocks forever on a lone "one" and answers anything else at once."""
    gate = asyncio.Event()

    async def _create(**kwargs):
        if kwargs["messages"][-1]["content"] == "one":
            await gate.wait()
            return SimpleNamespace(content=[SimpleNamespace(type="text", text="stale")])
        return SimpleNamespace(content=[SimpleNamespace(type="text", text="fresh")])

    client = MagicMock()
    client.messages.create = _create
    return client


async def test_new_message_cancels_pending_model_call(make_conversation, store) -> None:
    llm = LLMFallback()
    conv = make_conversation(llm=llm)

    with patch("aurora.llm.client._get_client", return_value=_gated_client()):
        first = asyncio.create_task(conv.submit("one"))
        await _wait_until(lambda: llm.in_flight)

        second = await conv.submit("two")
        assert await first is None

    assert second.text == "fresh"
    history = await store.history("s1")
    assert [m.text for m in history] == ["one", "two", "fresh"]
    assert not conv.busy


# -- Speech ------------------------------------------------------------------


async def test_low_confidence_transcript_is_rejected(make_conversation, store, notifier) -> None:
    conv = make_conversation()

    assert await conv.submit_transcript(Transcript("hello there", 0.5)) is None

    notifier.notify.assert_awaited_once_with("s1", Notice.warning(LOW_CONFIDENCE_NOTICE))
    assert await store.history("s1") == []


async def test_confident_transcript_is_submitted(make_conversation) -> None:
    conv = make_conversation()
    reply = await conv.submit_transcript(Transcript("hello there", 0.7))
    assert reply.text == "model reply"


async def test_reply_is_spoken(make_conversation) -> None:
    speaker = MagicMock()
    speaker.speak = AsyncMock()
    conv = make_conversation(speaker=speaker)

    await conv.submit("hello there")
    await asyncio.gather(*conv._speech_tasks)

    speaker.speak.assert_awaited_once_with("model reply")


async def test_speech_error_becomes_warning(make_conversation, notifier) -> None:
    speaker = MagicMock()
    speaker.speak = AsyncMock(side_effect=SpeechError("no audio device"))
    conv = make_conversation(speaker=speaker)

    reply = await conv.submit("hello there")
    await asyncio.gather(*conv._speech_tasks)

    assert reply.text == "model reply"
    notifier.notify.assert_awaited_once_with("s1", Notice.warning("Speech error: no audio device"))


# -- Logs and clearing -------------------------------------------------------


async def test_turn_logs_are_filed_under_session(make_conversation) -> None:
    buffer = LogBuffer.install()
    conv = make_conversation(log_buffer=buffer)

    await conv.submit("hello there")

    messages = [entry.message for entry in buffer.recent("s1")]
    assert "User message saved." in messages
    assert buffer.recent("someone-else") == []


async def test_clear_resets_everything(make_conversation, store, llm) -> None:
    buffer = LogBuffer.install()
    conv = make_conversation(log_buffer=buffer)
    await conv.submit("my interests are chess")
    await conv.submit("hello there")
    assert conv.session.interests == ["chess"]

    count = await conv.clear()

    assert count == 4
    assert await store.history("s1") == []
    assert conv.session.interests == []
    assert buffer.recent("s1") == []
    llm.cancel.assert_called_once()


# -- Registry ----------------------------------------------------------------


def test_get_conversation_reuses_instance() -> None:
    first = get_conversation(42)
    assert get_conversation("42") is first
    assert first.session_id == "42"
    assert first._speaker is None
    assert conversation_module._conversations == {"42": first}


def test_get_conversation_with_speech(monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.speech_enabled", True)
    assert get_conversation("7")._speaker is not None

"""Tests for the model fallback client: message building, errors and cancellation."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from aurora.chat.models import Message, Role
from aurora.errors import ModelError, RequestCancelledError
from aurora.llm.client import LLMFallback, build_messages, clean_reply


def _msg(role: Role, text: str) -> Message:
    return Message(id=f"{role}-{text}", role=role, text=text)


def _response(*texts: str) -> SimpleNamespace:
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=t) for t in texts])


def _mock_client(**create_kwargs) -> MagicMock:
    client = MagicMock()
    client.messages.create = AsyncMock(**create_kwargs)
    return client


def _status_error(status: int, message: str) -> anthropic.APIStatusError:
    return anthropic.APIStatusError(
        message=f"Error code: {status}",
        response=MagicMock(status_code=status, headers={}),
        body={"type": "error", "error": {"type": "api_error", "message": message}},
    )


# -- build_messages ------------------------------------------------------------


def test_build_messages_appends_utterance() -> None:
    history = [_msg(Role.USER, "hi"), _msg(Role.ASSISTANT, "hello")]
    assert build_messages("how are you", history) == [
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "user", "content": "how are you"},
    ]


def test_build_messages_drops_blank_and_merges_same_role() -> None:
    history = [
        _msg(Role.USER, "first"),
        _msg(Role.ASSISTANT, "   "),
        _msg(Role.USER, "second"),
    ]
    assert build_messages("third", history) == [
        {"role": "user", "content": "first\n\nsecond\n\nthird"},
    ]


def test_build_messages_starts_with_user() -> None:
    history = [_msg(Role.ASSISTANT, "orphan"), _msg(Role.USER, "q"), _msg(Role.ASSISTANT, "a")]
    messages = build_messages("next", history)
    assert messages[0] == {"role": "user", "content": "q"}


def test_build_messages_respects_window(monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.conversation_window_size", 2)
    history = [
        _msg(Role.USER, "one"),
        _msg(Role.ASSISTANT, "two"),
        _msg(Role.USER, "three"),
        _msg(Role.ASSISTANT, "four"),
    ]
    assert build_messages("five", history) == [
        {"role": "user", "content": "three"},
        {"role": "assistant", "content": "four"},
        {"role": "user", "content": "five"},
    ]


def test_clean_reply_strips_asterisks() -> None:
    assert clean_reply("  **Bold** and *italic*  ") == "Bold and italic"


# -- complete ------------------------------------------------------------------


async def test_complete_returns_cleaned_text() -> None:
    client = _mock_client(return_value=_response("**Hello** ", "there"))
    with patch("aurora.llm.client._get_client", return_value=client):
        text = await LLMFallback().complete("hi")

    assert text == "Hello there"
    kwargs = client.messages.create.await_args.kwargs
    assert kwargs["messages"] == [{"role": "user", "content": "hi"}]
    assert "Aurora" in kwargs["system"]
    assert "Creator mode" not in kwargs["system"]


async def test_complete_includes_creator_section() -> None:
    client = _mock_client(return_value=_response("ok"))
    with patch("aurora.llm.client._get_client", return_value=client):
        await LLMFallback().complete("hi", creator_mode=True)

    assert "Creator mode" in client.messages.create.await_args.kwargs["system"]


async def test_complete_uses_configured_model(monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.chat_model", "claude-test")
    monkeypatch.setattr("aurora.config.settings.llm_max_tokens", 64)
    client = _mock_client(return_value=_response("ok"))
    with patch("aurora.llm.client._get_client", return_value=client):
        await LLMFallback().complete("hi")

    kwargs = client.messages.create.await_args.kwargs
    assert kwargs["model"] == "claude-test"
    assert kwargs["max_tokens"] == 64


async def test_status_error_becomes_model_error() -> None:
    client = _mock_client(side_effect=_status_error(529, "Overloaded"))
    with (
        patch("aurora.llm.client._get_client", return_value=client),
        pytest.raises(ModelError, match="API Error: 529 - Overloaded"),
    ):
        await LLMFallback().complete("hi")


async def test_connection_error_becomes_model_error() -> None:
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    client = _mock_client(side_effect=anthropic.APIConnectionError(request=request))
    with (
        patch("aurora.llm.client._get_client", return_value=client),
        pytest.raises(ModelError),
    ):
        await LLMFallback().complete("hi")


async def test_empty_response_is_model_error() -> None:
    client = _mock_client(return_value=SimpleNamespace(content=[]))
    with (
        patch("aurora.llm.client._get_client", return_value=client),
        pytest.raises(ModelError, match="Empty or malformed"),
    ):
        await LLMFallback().complete("hi")


async def test_non_text_blocks_are_ignored() -> None:
    client = _mock_client(
        return_value=SimpleNamespace(content=[SimpleNamespace(type="tool_use", id="x")])
    )
    with (
        patch("aurora.llm.client._get_client", return_value=client),
        pytest.raises(ModelError),
    ):
        await LLMFallback().complete("hi")


# -- Cancellation --------------------------------------------------------------


def _gated_client() -> tuple[MagicMock, asyncio.Event]:
    """A client that blocks on "one" until released and answers anything else at once."""
    release = asyncio.Event()

    async def _create(**kwargs):
        if kwargs["messages"][-1]["content"] == "one":
            await release.wait()
            return _response("stale")
        return _response("fresh")

    client = MagicMock()
    client.messages.create = _create
    return client, release


async def test_second_request_cancels_first() -> None:
    client, _ = _gated_client()
    llm = LLMFallback()
    with patch("aurora.llm.client._get_client", return_value=client):
        first = asyncio.create_task(llm.complete("one"))
        await asyncio.sleep(0)
        assert llm.in_flight

        second = await llm.complete("two")

        with pytest.raises(RequestCancelledError):
            await first

    assert second == "fresh"
    assert not llm.in_flight


async def test_explicit_cancel() -> None:
    client, _ = _gated_client()
    llm = LLMFallback()
    with patch("aurora.llm.client._get_client", return_value=client):
        pending = asyncio.create_task(llm.complete("one"))
        await asyncio.sleep(0)

        assert llm.cancel() is True
        with pytest.raises(RequestCancelledError):
            await pending

    assert llm.cancel() is False


async def test_caller_cancellation_is_not_converted() -> None:
    client, _ = _gated_client()
    llm = LLMFallback()
    with patch("aurora.llm.client._get_client", return_value=client):
        pending = asyncio.create_task(llm.complete("one"))
        await asyncio.sleep(0)

        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending

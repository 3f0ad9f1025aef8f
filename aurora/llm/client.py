"""Async Claude client used as the catch-all reply generator."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import anthropic

from aurora.chat.models import Message, Role
from aurora.config import settings
from aurora.errors import ModelError, RequestCancelledError
from aurora.llm.prompt import build_system_prompt

logger = logging.getLogger(__name__)

_client: anthropic.AsyncAnthropic | None = None


def _get_client() -> anthropic.AsyncAnthropic:
    """Lazily initialize the Anthropic client."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)
    return _client


def build_messages(utterance: str, history: Sequence[Message]) -> list[dict[str, str]]:
    """Convert stored turns plus the new utterance into API messages.

    Blank turns are dropped and consecutive turns from the same role are
    merged so the list alternates. Only the most recent
    ``conversation_window_size`` turns are kept.
    """
    turns = [m for m in history if not m.is_blank][-settings.conversation_window_size :]
    messages: list[dict[str, str]] = []
    for turn in [*turns, Message.create(Role.USER, utterance)]:
        role = "user" if turn.role is Role.USER else "assistant"
        if messages and messages[-1]["role"] == role:
            messages[-1]["content"] += "\n\n" + turn.text
        else:
            messages.append({"role": role, "content": turn.text})
    # The API requires the first message to come from the user.
    while messages and messages[0]["role"] != "user":
        messages.pop(0)
    return messages


def clean_reply(text: str) -> str:
    """Strip markdown emphasis asterisks from a model reply."""
    return text.replace("*", "").strip()


def _provider_message(exc: anthropic.APIStatusError) -> str:
    body = exc.body
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return exc.message or "Unknown error"


async def _create(system: str, messages: list[dict[str, str]]) -> str:
    client = _get_client()
    kwargs: dict[str, Any] = {
        "model": settings.chat_model,
        "max_tokens": settings.llm_max_tokens,
        "system": system,
        "messages": messages,
    }
    logger.info("Calling model %s with %d message(s)", settings.chat_model, len(messages))
    try:
        response = await client.messages.create(**kwargs)
    except anthropic.APIStatusError as exc:
        detail = _provider_message(exc)
        logger.error("Model API error: %s - %s", exc.status_code, detail)
        raise ModelError(f"API Error: {exc.status_code} - {detail}") from exc
    except anthropic.APIError as exc:
        logger.error("Model API error: %s", exc)
        raise ModelError(f"API Error: {exc}") from exc

    parts = [
        block.text
        for block in (response.content or [])
        if getattr(block, "type", None) == "text" and getattr(block, "text", None)
    ]
    text = clean_reply("".join(parts))
    if not text:
        logger.warning("Empty or malformed model response")
        raise ModelError("Empty or malformed model response")

    logger.info("Model response received")
    return text


class LLMFallback:
    """Single-flight model caller for one conversation.

    A new ``complete()`` cancels whatever request is still outstanding; the
    superseded caller gets ``RequestCancelledError``.
    """

    def __init__(self) -> None:
        self._inflight: asyncio.Task[str] | None = None

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def cancel(self) -> bool:
        """Cancel the outstanding request. Returns True if one was running."""
        task = self._inflight
        if task is None or task.done():
            return False
        task.cancel()
        logger.info("Cancelled outstanding model request")
        return True

    async def complete(
        self,
        utterance: str,
        history: Sequence[Message] = (),
        *,
        creator_mode: bool = False,
    ) -> str:
        """Generate a reply for ``utterance`` in the context of ``history``."""
        system = build_system_prompt(creator_mode=creator_mode)
        messages = build_messages(utterance, history)

        self.cancel()
        task = asyncio.create_task(_create(system, messages))
        self._inflight = task
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if task.cancelled() and (current is None or not current.cancelling()):
                logger.info("Model request was cancelled")
                raise RequestCancelledError from None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

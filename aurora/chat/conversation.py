"""Conversation: runs one user turn end to end.

A turn persists the user message, routes it, persists the reply, starts
speech in the background and raises notices. One Conversation exists per
session id; see ``get_conversation``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from aurora.chat.models import Message, Role
from aurora.chat.store import ChatStore
from aurora.config import settings
from aurora.connectivity import ConnectivityMonitor
from aurora.engine.router import IntentRouter
from aurora.engine.session import SessionState
from aurora.errors import PersistenceError, RequestCancelledError, SpeechError
from aurora.llm.client import LLMFallback
from aurora.logbuffer import LogBuffer, current_session
from aurora.notifications import Notice, NotificationRouter
from aurora.speech import SayOutput, Speaker
from aurora.tools import build_toolkit

if TYPE_CHECKING:
    from aurora.speech import Transcript

logger = logging.getLogger(__name__)

BUSY_NOTICE = "Please wait for the current response to finish."
LOW_CONFIDENCE_NOTICE = "Low confidence in speech recognition. Please try again."


class Conversation:
    """One session's chat: history, in-memory session state and the router."""

    def __init__(
        self,
        session_id: str,
        *,
        store: ChatStore | None = None,
        router: IntentRouter | None = None,
        llm: LLMFallback | None = None,
        connectivity: ConnectivityMonitor | None = None,
        notifier: NotificationRouter | None = None,
        speaker: Speaker | None = None,
        log_buffer: LogBuffer | None = None,
    ) -> None:
        self.session_id = session_id
        self.session = SessionState()
        self._store = store or ChatStore.get()
        self._llm = llm or LLMFallback()
        self._router = router or IntentRouter(build_toolkit(), self._llm)
        self._connectivity = connectivity or ConnectivityMonitor.get()
        self._notifier = notifier or NotificationRouter.get()
        self._speaker = speaker
        self._logs = log_buffer or LogBuffer.get()
        self._turns = 0
        self._pending: int | None = None
        self._speech_tasks: set[asyncio.Task[None]] = set()

    @property
    def busy(self) -> bool:
        return self._pending is not None

    async def _notify(self, notice: Notice) -> None:
        await self._notifier.notify(self.session_id, notice)

    async def history(self) -> list[Message]:
        return await self._store.history(self.session_id)

    async def submit(self, utterance: str) -> Message | None:
        """Run one turn. Returns the stored reply, or None if the turn produced none.

        A new utterance while a turn is pending is rejected, unless that turn
        is waiting on the model: then the model request is cancelled and the
        earlier turn ends silently.
        """
        text = utterance.strip()
        if not text:
            return None

        if self.busy:
            if not self._llm.in_flight:
                await self._notify(Notice.warning(BUSY_NOTICE))
                return None
            logger.info("New message while waiting on the model; cancelling earlier request")
            self._llm.cancel()

        self._turns += 1
        turn = self._turns
        self._pending = turn
        token = current_session.set(self.session_id)
        try:
            return await self._run_turn(text)
        finally:
            current_session.reset(token)
            if self._pending == turn:
                self._pending = None

    async def submit_transcript(self, transcript: Transcript) -> Message | None:
        """Submit a speech transcript unless recognition confidence is too low."""
        if transcript.confidence < settings.low_confidence_threshold:
            logger.warning(
                "Low confidence transcript (%.2f): %s", transcript.confidence, transcript.text
            )
            await self._notify(Notice.warning(LOW_CONFIDENCE_NOTICE))
            return None
        return await self.submit(transcript.text)

    async def _run_turn(self, text: str) -> Message | None:
        try:
            history = await self._store.history(self.session_id)
            await self._store.append(self.session_id, Message.create(Role.USER, text))
        except PersistenceError as exc:
            logger.error("Error saving user message: %s", exc)
            await self._notify(Notice.error(f"Failed to send message: {exc}"))
            return None
        logger.info("User message saved.")

        status = await self._connectivity.status()
        logs = self._logs.recent(self.session_id, settings.log_buffer_size)
        try:
            result = await self._router.route(text, self.session, status, history, logs)
        except RequestCancelledError:
            logger.info("Turn superseded by a newer message")
            return None

        for notice in result.notices:
            await self._notify(notice)

        try:
            stored = await self._store.append(
                self.session_id, Message.create(Role.ASSISTANT, result.reply)
            )
        except PersistenceError as exc:
            logger.error("Error saving AI message: %s", exc)
            await self._notify(Notice.error(f"Failed to save AI response: {exc}"))
            return None
        logger.info("AI response saved.")

        self._speak(stored.text)
        return stored

    def _speak(self, text: str) -> None:
        if self._speaker is None:
            return
        task = asyncio.create_task(self._play(text))
        self._speech_tasks.add(task)
        task.add_done_callback(self._speech_tasks.discard)

    async def _play(self, text: str) -> None:
        try:
            await self._speaker.speak(text)
        except SpeechError as exc:
            await self._notify(Notice.warning(f"Speech error: {exc}"))

    async def clear(self) -> int:
        """Delete the stored history and reset session state and logs."""
        self._llm.cancel()
        count = await self._store.delete_all(self.session_id)
        self.session.reset()
        self._logs.clear(self.session_id)
        return count


_conversations: dict[str, Conversation] = {}


def _default_speaker() -> Speaker | None:
    return Speaker(SayOutput()) if settings.speech_enabled else None


def get_conversation(session_id: str | int) -> Conversation:
    """Get or create the Conversation for a session."""
    key = str(session_id)
    if key not in _conversations:
        _conversations[key] = Conversation(key, speaker=_default_speaker())
    return _conversations[key]

"""ChatStore — aiosqlite persistence for per-session chat history."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import aiosqlite

from aurora.chat.models import Message, Role
from aurora.config import settings
from aurora.errors import PersistenceError

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

HistoryCallback = Callable[[list[Message]], Awaitable[None]]

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS chat_messages (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    session_id TEXT NOT NULL,
    role TEXT NOT NULL,
    text TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""

_CREATE_INDEX = """
CREATE INDEX IF NOT EXISTS idx_chat_messages_session
    ON chat_messages (session_id, created_at, seq)
"""


def _from_row(row: tuple) -> Message:
    msg_id, role, text, created_at = row
    return Message(
        id=msg_id,
        role=Role(role),
        text=text,
        timestamp=datetime.fromisoformat(created_at),
    )


class ChatStore:
    """Append-only message log per session, with change subscriptions.

    Singleton accessed via ``ChatStore.get()``.  Pass an explicit *db_path*
    for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    _instance: ChatStore | None = None

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or settings.database_path
        self._initialised = False
        self._subscribers: dict[str, list[HistoryCallback]] = {}

    @classmethod
    def get(cls) -> ChatStore:
        """Return the shared ChatStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    # -- Internal helpers ------------------------------------------------------

    async def _connect(self) -> aiosqlite.Connection:
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            db = await aiosqlite.connect(str(self._db_path))
            if not self._initialised:
                await db.execute(_CREATE_TABLE)
                await db.execute(_CREATE_INDEX)
                await db.commit()
                self._initialised = True
        except (OSError, aiosqlite.Error) as exc:
            msg = f"Cannot open chat database: {exc}"
            raise PersistenceError(msg) from exc
        return db

    async def _publish(self, session_id: str) -> None:
        callbacks = list(self._subscribers.get(session_id, ()))
        if not callbacks:
            return
        snapshot = await self.history(session_id)
        for callback in callbacks:
            try:
                await callback(snapshot)
            except Exception:
                logger.exception("History subscriber failed for session %s", session_id)

    # -- Operations ------------------------------------------------------------

    async def append(self, session_id: str, message: Message) -> Message:
        """Store ``message``; returns the copy with its store id and timestamp."""
        stored = message.model_copy(
            update={"id": uuid.uuid4().hex, "timestamp": datetime.now(UTC)}
        )
        db = await self._connect()
        try:
            await db.execute(
                """
                INSERT INTO chat_messages (id, session_id, role, text, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    stored.id,
                    session_id,
                    str(stored.role),
                    stored.text,
                    stored.timestamp.isoformat(),
                ),
            )
            await db.commit()
        except aiosqlite.Error as exc:
            logger.error("Failed to save %s message: %s", message.role, exc)
            msg = f"Failed to save message: {exc}"
            raise PersistenceError(msg) from exc
        finally:
            await db.close()

        logger.debug("Stored message %s for session %s", stored.id, session_id)
        await self._publish(session_id)
        return stored

    async def history(self, session_id: str) -> list[Message]:
        """All messages for ``session_id``, oldest first."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                """
                SELECT id, role, text, created_at FROM chat_messages
                WHERE session_id = ?
                ORDER BY created_at, seq
                """,
                (session_id,),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            msg = f"Failed to load chat history: {exc}"
            raise PersistenceError(msg) from exc
        finally:
            await db.close()
        return [_from_row(row) for row in rows]

    async def delete_all(self, session_id: str) -> int:
        """Delete every message for ``session_id``. Returns the count removed."""
        db = await self._connect()
        try:
            cursor = await db.execute(
                "DELETE FROM chat_messages WHERE session_id = ?", (session_id,)
            )
            await db.commit()
            deleted = cursor.rowcount
        except aiosqlite.Error as exc:
            logger.error("Failed to clear chat for session %s: %s", session_id, exc)
            msg = f"Failed to clear chat: {exc}"
            raise PersistenceError(msg) from exc
        finally:
            await db.close()

        logger.info("Cleared %d message(s) for session %s", deleted, session_id)
        await self._publish(session_id)
        return deleted

    async def subscribe(
        self, session_id: str, callback: HistoryCallback
    ) -> Callable[[], None]:
        """Deliver the current history now and after every change.

        Returns a function that removes the subscription.
        """
        self._subscribers.setdefault(session_id, []).append(callback)
        await callback(await self.history(session_id))

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(session_id, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(session_id, None)

        return unsubscribe

"""Per-session ring buffer of recent log records.

Creator mode can dump "system logs" into the chat. Records are captured by a
``logging.Handler`` on the ``aurora`` logger and filed under the session that
was active when they were emitted. The active session is tracked with a
``ContextVar`` so records logged from tasks spawned during a turn land in the
right buffer too.
"""

from __future__ import annotations

import logging
from collections import deque
from contextvars import ContextVar
from dataclasses import dataclass
from datetime import datetime

from aurora.config import settings

current_session: ContextVar[str | None] = ContextVar("current_session", default=None)


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    level: str
    message: str

    def format(self) -> str:
        return f"{self.timestamp.strftime('%I:%M:%S %p')} [{self.level}]: {self.message}"


class LogBuffer(logging.Handler):
    """Keeps the last ``maxlen`` records for each session.

    Singleton accessed via ``LogBuffer.get()``; ``install()`` attaches it to
    the package logger.
    """

    _instance: LogBuffer | None = None

    def __init__(self, maxlen: int | None = None) -> None:
        super().__init__(level=logging.INFO)
        self._maxlen = maxlen or settings.log_buffer_size
        self._entries: dict[str, deque[LogEntry]] = {}

    @classmethod
    def get(cls) -> LogBuffer:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Detach and drop the singleton — for tests only."""
        if cls._instance is not None:
            logging.getLogger("aurora").removeHandler(cls._instance)
        cls._instance = None

    @classmethod
    def install(cls) -> LogBuffer:
        """Attach the shared buffer to the ``aurora`` logger (idempotent)."""
        buffer = cls.get()
        root = logging.getLogger("aurora")
        if buffer not in root.handlers:
            root.addHandler(buffer)
        if root.level == logging.NOTSET or root.level > logging.INFO:
            root.setLevel(logging.INFO)
        return buffer

    def emit(self, record: logging.LogRecord) -> None:
        session_id = current_session.get()
        if session_id is None:
            return
        try:
            entry = LogEntry(
                timestamp=datetime.fromtimestamp(record.created),
                level=record.levelname,
                message=record.getMessage(),
            )
        except Exception:
            self.handleError(record)
            return
        bucket = self._entries.setdefault(session_id, deque(maxlen=self._maxlen))
        bucket.append(entry)

    def recent(self, session_id: str, limit: int | None = None) -> list[LogEntry]:
        """Return up to ``limit`` most recent entries, oldest first."""
        entries = list(self._entries.get(session_id, ()))
        if limit is not None:
            entries = entries[-limit:]
        return entries

    def clear(self, session_id: str) -> None:
        self._entries.pop(session_id, None)

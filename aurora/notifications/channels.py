"""Notice model and the NotificationChannel protocol."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class NoticeLevel(enum.StrEnum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A transient toast shown next to the conversation."""

    message: str
    level: NoticeLevel = NoticeLevel.INFO

    @classmethod
    def info(cls, message: str) -> Notice:
        return cls(message, NoticeLevel.INFO)

    @classmethod
    def success(cls, message: str) -> Notice:
        return cls(message, NoticeLevel.SUCCESS)

    @classmethod
    def warning(cls, message: str) -> Notice:
        return cls(message, NoticeLevel.WARNING)

    @classmethod
    def error(cls, message: str) -> Notice:
        return cls(message, NoticeLevel.ERROR)


@runtime_checkable
class NotificationChannel(Protocol):
    """Protocol that all notification channels must satisfy."""

    @property
    def name(self) -> str:
        """Unique channel identifier (e.g. 'telegram', 'log')."""
        ...

    async def notify(self, session_id: str, notice: Notice) -> bool:
        """Deliver a notice. Returns True on success."""
        ...


class LogChannel:
    """Writes notices to the application log. Always available."""

    _LEVELS = {
        NoticeLevel.INFO: logging.INFO,
        NoticeLevel.SUCCESS: logging.INFO,
        NoticeLevel.WARNING: logging.WARNING,
        NoticeLevel.ERROR: logging.ERROR,
    }

    @property
    def name(self) -> str:
        return "log"

    async def notify(self, session_id: str, notice: Notice) -> bool:
        logger.log(self._LEVELS[notice.level], "[%s] %s", session_id, notice.message)
        return True

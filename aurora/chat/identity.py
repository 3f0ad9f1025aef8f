"""Session identity: who the chat history belongs to."""

from __future__ import annotations

import logging
import uuid
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class AuthProvider(Protocol):
    def session_id(self) -> str:
        """Stable identifier that keys history, session state and logs."""
        ...


class AnonymousAuth:
    """Mints a random ``anon-<hex>`` id once and keeps it."""

    def __init__(self) -> None:
        self._session_id = f"anon-{uuid.uuid4().hex}"
        logger.info("Signed in anonymously as %s", self._session_id)

    def session_id(self) -> str:
        return self._session_id


class StaticAuth:
    """An id supplied by the frontend, e.g. a Telegram chat id."""

    def __init__(self, session_id: str | int) -> None:
        self._session_id = str(session_id)

    def session_id(self) -> str:
        return self._session_id

"""Conversation turn model."""

from __future__ import annotations

import enum
import time
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Role(enum.StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single conversation turn. Immutable once created.

    ``timestamp`` is assigned by the store; optimistic local copies carry
    ``None`` until they have been appended.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    text: str
    timestamp: datetime | None = None

    @classmethod
    def create(cls, role: Role, text: str) -> Message:
        """Build an optimistic message with a local ``user-<ms>``/``ai-<ms>`` id."""
        prefix = "user" if role is Role.USER else "ai"
        return cls(id=f"{prefix}-{int(time.time() * 1000)}", role=role, text=text)

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

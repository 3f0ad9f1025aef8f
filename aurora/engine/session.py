"""Per-conversation session state: password gate, creator mode, interests."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class PasswordGate(enum.StrEnum):
    CLOSED = "closed"
    AWAITING_PASSWORD = "awaiting_password"


class SessionPhase(enum.StrEnum):
    ANONYMOUS = "anonymous"
    AWAITING_PASSWORD = "awaiting_password"
    CREATOR_MODE = "creator_mode"


@dataclass(frozen=True)
class SessionUpdate:
    """A set of state changes produced by one routing pass.

    ``None`` fields are left untouched. ``add_interests`` is merged into the
    existing list, keeping order and dropping duplicates.
    """

    gate: PasswordGate | None = None
    creator_mode: bool | None = None
    add_interests: tuple[str, ...] = ()

    @property
    def empty(self) -> bool:
        return self.gate is None and self.creator_mode is None and not self.add_interests


ENTER_PASSWORD_GATE = SessionUpdate(gate=PasswordGate.AWAITING_PASSWORD)
ENTER_CREATOR_MODE = SessionUpdate(gate=PasswordGate.CLOSED, creator_mode=True)
RESET_TO_ANONYMOUS = SessionUpdate(gate=PasswordGate.CLOSED, creator_mode=False)


@dataclass
class SessionState:
    """Mutable, in-memory state for one conversation. Never persisted."""

    gate: PasswordGate = PasswordGate.CLOSED
    creator_mode: bool = False
    interests: list[str] = field(default_factory=list)

    @property
    def phase(self) -> SessionPhase:
        if self.creator_mode:
            return SessionPhase.CREATOR_MODE
        if self.gate is PasswordGate.AWAITING_PASSWORD:
            return SessionPhase.AWAITING_PASSWORD
        return SessionPhase.ANONYMOUS

    def apply(self, update: SessionUpdate) -> None:
        """Apply ``update``, enforcing that creator mode implies a closed gate."""
        gate = self.gate if update.gate is None else update.gate
        creator_mode = self.creator_mode if update.creator_mode is None else update.creator_mode
        if creator_mode and gate is not PasswordGate.CLOSED:
            msg = "Creator mode requires the password gate to be closed"
            raise ValueError(msg)

        previous = self.phase
        self.gate = gate
        self.creator_mode = creator_mode
        for interest in update.add_interests:
            if interest not in self.interests:
                self.interests.append(interest)

        if self.phase is not previous:
            logger.info("Session phase %s -> %s", previous, self.phase)

    def reset(self) -> None:
        """Return to a fresh anonymous session (used on chat clear)."""
        self.gate = PasswordGate.CLOSED
        self.creator_mode = False
        self.interests.clear()

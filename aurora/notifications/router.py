"""NotificationRouter — singleton that dispatches notices to registered channels."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from aurora.notifications.channels import Notice, NotificationChannel

logger = logging.getLogger(__name__)


class NotificationRouter:
    """Routes notices to the appropriate channel.

    Singleton accessed via ``NotificationRouter.get()``.
    """

    _instance: NotificationRouter | None = None

    def __init__(self) -> None:
        self._channels: dict[str, NotificationChannel] = {}
        self._default: str = ""

    @classmethod
    def get(cls) -> NotificationRouter:
        """Return the singleton instance, creating it if needed."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset singleton — for tests only."""
        cls._instance = None

    def register_channel(self, channel: NotificationChannel) -> None:
        """Register a notification channel. Raises ValueError on duplicate name."""
        if channel.name in self._channels:
            msg = f"Channel '{channel.name}' is already registered"
            raise ValueError(msg)
        self._channels[channel.name] = channel

    def set_default_channel(self, name: str) -> None:
        """Set the default channel by name. Raises KeyError if not registered."""
        if name not in self._channels:
            msg = f"Channel '{name}' is not registered"
            raise KeyError(msg)
        self._default = name

    def list_channels(self) -> list[str]:
        """Return names of all registered channels."""
        return list(self._channels.keys())

    @property
    def default_channel_name(self) -> str:
        """The name of the current default channel."""
        return self._default

    def _resolve_channel(self, name: str | None) -> NotificationChannel | None:
        """Resolve a channel: explicit name → default → only registered channel."""
        if name:
            return self._channels.get(name)
        if self._default:
            return self._channels.get(self._default)
        if len(self._channels) == 1:
            return next(iter(self._channels.values()))
        return None

    async def notify(
        self,
        session_id: str,
        notice: Notice,
        *,
        channel: str | None = None,
    ) -> bool:
        """Deliver a notice via the resolved channel."""
        ch = self._resolve_channel(channel)
        if ch is None:
            logger.warning(
                "No channel resolved for notice (requested=%s): %s", channel, notice.message
            )
            return False
        return await ch.notify(session_id, notice)

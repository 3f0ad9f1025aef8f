"""Telegram implementation of the NotificationChannel protocol."""

from __future__ import annotations

import logging

import telegram

from aurora.notifications.channels import Notice, NoticeLevel

logger = logging.getLogger(__name__)

_PREFIX = {
    NoticeLevel.WARNING: "⚠️",
    NoticeLevel.ERROR: "❌",
}


class TelegramChannel:
    """Sends warning and error notices to the Telegram chat.

    Info and success notices are only logged; the chat reply already
    carries that information.
    """

    def __init__(self, bot: telegram.Bot) -> None:
        self._bot = bot

    @property
    def name(self) -> str:
        return "telegram"

    async def notify(self, session_id: str, notice: Notice) -> bool:
        prefix = _PREFIX.get(notice.level)
        if prefix is None:
            logger.debug("Notice for %s (%s): %s", session_id, notice.level, notice.message)
            return True
        if not session_id.lstrip("-").isdigit():
            logger.info("No Telegram chat for session %s: %s", session_id, notice.message)
            return False
        try:
            await self._bot.send_message(
                chat_id=int(session_id), text=f"{prefix} {notice.message}"
            )
            return True
        except Exception:
            logger.exception("TelegramChannel.notify failed for session_id=%s", session_id)
            return False

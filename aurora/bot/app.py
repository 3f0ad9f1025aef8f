"""Telegram application factory."""

from __future__ import annotations

import logging

from telegram.ext import Application, CommandHandler, MessageHandler, filters

from aurora.bot.handlers import (
    handle_clear,
    handle_message,
    handle_start,
    handle_status,
    handle_voice,
)
from aurora.config import settings
from aurora.notifications import LogChannel, NotificationRouter
from aurora.notifications.telegram_channel import TelegramChannel

logger = logging.getLogger(__name__)


def _init_notifications(app: Application) -> None:
    """Register notification channels and set the default."""
    router = NotificationRouter.get()
    router.register_channel(LogChannel())
    router.register_channel(TelegramChannel(app.bot))
    router.set_default_channel(settings.default_notification_channel)
    logger.info(
        "Notifications initialized: channels=%s, default=%s",
        router.list_channels(),
        router.default_channel_name,
    )


def create_app() -> Application:
    """Build and configure the Telegram application."""
    # Updates run concurrently so a new message can supersede a pending model call.
    app = (
        Application.builder()
        .token(settings.telegram_bot_token)
        .concurrent_updates(True)
        .build()
    )

    _init_notifications(app)

    app.add_handler(CommandHandler("start", handle_start))
    app.add_handler(CommandHandler("clear", handle_clear))
    app.add_handler(CommandHandler("status", handle_status))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))
    if settings.voice_input_enabled:
        app.add_handler(MessageHandler(filters.VOICE, handle_voice))
    else:
        logger.info("DEEPGRAM_API_KEY not set; voice messages are ignored")

    return app

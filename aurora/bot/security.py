"""Access gate: which Telegram updates reach a conversation, and under which session."""

from __future__ import annotations

import functools
import logging

from telegram import Update

from aurora.chat.identity import AnonymousAuth, AuthProvider, StaticAuth
from aurora.config import settings

logger = logging.getLogger(__name__)


@functools.cache
def allowed_user_ids() -> frozenset[int]:
    """Allowed Telegram user ids, read from settings on first use."""
    allowed = frozenset(settings.get_allowed_user_ids())
    if allowed:
        logger.info("Allowed user IDs: %s", sorted(allowed))
    else:
        logger.warning("ALLOWED_USER_IDS is empty, every update will be ignored")
    return allowed


@functools.cache
def _anonymous() -> AnonymousAuth:
    return AnonymousAuth()


def authorize(update: Update) -> AuthProvider | None:
    """Resolve the session identity for an update, or None to ignore it.

    Every allowed chat is its own session, keyed by the chat id. An allowed
    update that carries no chat shares one anonymous session for the life
    of the process.
    """
    user = update.effective_user
    if user is None:
        return None
    if user.id not in allowed_user_ids():
        logger.info("Ignoring update from unknown user %s", user.id)
        return None

    chat = update.effective_chat
    if chat is None:
        return _anonymous()
    return StaticAuth(chat.id)

"""Telegram command and message handlers."""

import logging

from telegram import Update
from telegram.constants import ChatAction
from telegram.ext import ContextTypes

from aurora.bot.security import authorize
from aurora.chat.conversation import get_conversation
from aurora.config import settings
from aurora.connectivity import ConnectivityMonitor
from aurora.errors import PersistenceError, SpeechError
from aurora.speech import DeepgramInput, SpeechInput

logger = logging.getLogger(__name__)

VOICE_FAILURE = "Sorry, I couldn't make out that voice message. Please try again or type it."

_speech_input: SpeechInput | None = None


def _get_speech_input() -> SpeechInput:
    """Lazily create the shared speech recognizer."""
    global _speech_input  # noqa: PLW0603
    if _speech_input is None:
        _speech_input = DeepgramInput()
    return _speech_input


async def handle_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start: greet the user."""
    if authorize(update) is None:
        return

    await update.message.reply_text(
        f"Hello! I'm {settings.persona_name}. Ask me about the weather, do a quick "
        "calculation, search the web, or just chat."
    )


async def handle_clear(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /clear: delete history and reset the session."""
    auth = authorize(update)
    if auth is None:
        return

    conversation = get_conversation(auth.session_id())
    try:
        count = await conversation.clear()
    except PersistenceError as exc:
        logger.error("Error clearing chat: %s", exc)
        await update.message.reply_text(f"Failed to clear chat: {exc}")
        return

    if count == 0:
        await update.message.reply_text("Chat is already empty.")
        return
    await update.message.reply_text(f"Chat history cleared ({count} messages).")


async def handle_status(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /status: show session and connectivity info."""
    auth = authorize(update)
    if auth is None:
        return

    conversation = get_conversation(auth.session_id())
    connectivity = await ConnectivityMonitor.get().status()
    history = await conversation.history()
    session = conversation.session

    lines = [
        f"**{settings.persona_name} Status**",
        f"Model: {settings.chat_model}",
        f"Messages stored: {len(history)}",
        f"Session: {session.phase}",
        f"Interests: {', '.join(session.interests) or 'none'}",
        f"Network: {connectivity}",
    ]
    await update.message.reply_text("\n".join(lines), parse_mode="Markdown")


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle incoming text messages."""
    auth = authorize(update)
    if auth is None:
        return

    session_id = auth.session_id()
    user_message = update.message.text
    logger.info("Message from %s: %s", session_id, user_message[:80])

    await context.bot.send_chat_action(
        chat_id=update.effective_chat.id, action=ChatAction.TYPING
    )
    reply = await get_conversation(session_id).submit(user_message)
    if reply is not None:
        await update.message.reply_text(reply.text)


async def handle_voice(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle voice notes: transcribe, then submit unless recognition was unsure."""
    auth = authorize(update)
    if auth is None:
        return

    session_id = auth.session_id()
    voice = update.message.voice
    logger.info("Voice message from %s (%ss)", session_id, voice.duration)

    await context.bot.send_chat_action(
        chat_id=update.effective_chat.id, action=ChatAction.TYPING
    )
    try:
        file = await voice.get_file()
        audio = bytes(await file.download_as_bytearray())
        transcript = await _get_speech_input().transcribe(
            audio, voice.mime_type or "audio/ogg"
        )
    except SpeechError as exc:
        logger.error("Voice transcription failed: %s", exc)
        await update.message.reply_text(VOICE_FAILURE)
        return

    reply = await get_conversation(session_id).submit_transcript(transcript)
    if reply is not None:
        await update.message.reply_text(reply.text)

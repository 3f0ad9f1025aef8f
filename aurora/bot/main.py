"""Aurora bot entry point."""

import logging

from aurora.config import settings
from aurora.logbuffer import LogBuffer

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level),
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Start the bot on Telegram."""
    from aurora.bot.app import create_app

    LogBuffer.install()

    logger.info(
        "Starting %s on Telegram with model %s...", settings.persona_name, settings.chat_model
    )
    app = create_app()
    app.run_polling()


if __name__ == "__main__":
    main()

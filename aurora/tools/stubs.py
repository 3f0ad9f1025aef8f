"""Stand-ins for capabilities that need a backend this assistant doesn't have.

Each one waits a little before answering so the chat shows the same loading
state as a real lookup would.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)

TRANSLATION_DELAY = 1.5
NEWS_DELAY = 2.0
SOCIAL_DELAY = 2.5


async def translate(text: str, target_lang: str) -> str:
    logger.info('Translation request: "%s" to %s', text, target_lang)
    await asyncio.sleep(TRANSLATION_DELAY)
    return (
        f'Real-time translation for "{text}" to {target_lang} requires a backend service '
        "with a translation API. I can't perform that directly."
    )


async def news_headlines(topic: str = "") -> str:
    topic = topic or "general"
    logger.info("News request for topic: %s", topic)
    await asyncio.sleep(NEWS_DELAY)
    return (
        f"To provide real-time news headlines about {topic}, I would need access to a live "
        "news API through a backend service. I cannot fetch that information directly."
    )


async def social_lookup(person_name: str) -> str:
    logger.info('Social media search request for: "%s"', person_name)
    await asyncio.sleep(SOCIAL_DELAY)
    return (
        "Due to privacy restrictions and API limitations, I cannot access real-time personal "
        "profiles on platforms like Instagram, Facebook, or X. Therefore, I cannot search "
        f'for "{person_name}" on social media.'
    )

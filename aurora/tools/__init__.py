"""Tool adapters and the capability set the router calls them with."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from aurora.config import settings
from aurora.tools.base import FactCapability, SearchCapability
from aurora.tools.facts import WolframAlpha, lookup_fact
from aurora.tools.search import DuckDuckGoSearch, GoogleSearch, web_search
from aurora.tools.stubs import news_headlines, social_lookup, translate
from aurora.tools.weather import weather_report

logger = logging.getLogger(__name__)


@dataclass
class Toolkit:
    """The external capabilities available to one router.

    Any capability may be missing: search engines then fall back to their
    mock, and the fact lookup path is skipped entirely.
    """

    search_engines: dict[str, SearchCapability] = field(default_factory=dict)
    facts: FactCapability | None = None

    async def weather(self, location: str) -> str:
        return await weather_report(location)

    async def search(self, query: str, engine: str = "google") -> str:
        return await web_search(query, engine, self.search_engines.get(engine))

    async def lookup_fact(self, query: str) -> str:
        if self.facts is None:
            msg = "No fact capability configured"
            raise RuntimeError(msg)
        return await lookup_fact(query, self.facts, self.search_engines.get("google"))

    async def translate(self, text: str, target_lang: str) -> str:
        return await translate(text, target_lang)

    async def news(self, topic: str = "") -> str:
        return await news_headlines(topic)

    async def social_lookup(self, person_name: str) -> str:
        return await social_lookup(person_name)


def build_toolkit() -> Toolkit:
    """Wire up whichever capabilities are configured in settings."""
    toolkit = Toolkit()

    # Conditionally enable Google when both the key and engine id are configured.
    if settings.google_search_enabled:
        toolkit.search_engines["google"] = GoogleSearch(
            settings.google_search_api_key, settings.google_search_cx
        )

    if settings.duckduckgo_enabled:
        toolkit.search_engines["duckduckgo"] = DuckDuckGoSearch()

    if settings.wolfram_app_id:
        toolkit.facts = WolframAlpha(settings.wolfram_app_id)

    logger.info(
        "Tools initialized: search=%s, facts=%s",
        sorted(toolkit.search_engines) or "mock",
        "wolfram" if toolkit.facts else "off",
    )
    return toolkit


__all__ = ["Toolkit", "build_toolkit"]

"""Web search adapter with Google and DuckDuckGo backends.

Each engine is an optional ``SearchCapability``. When an engine has no
capability configured, a deterministic mock answer is returned instead, always
prefixed with ``(Mock <Engine>)`` so callers can tell it apart from real data.
"""

from __future__ import annotations

import logging

import httpx

from aurora.config import settings
from aurora.errors import ToolError
from aurora.tools.base import SearchCapability, SearchHit, tool_boundary

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
DUCKDUCKGO_URL = "https://api.duckduckgo.com/"
DEFAULT_USER_AGENT = "AuroraAssistant/1.0"

ENGINE_LABELS: dict[str, str] = {"google": "Google", "duckduckgo": "DuckDuckGo"}
MAX_RESULTS = 3


class GoogleSearch:
    """Google Programmable Search (Custom Search JSON API)."""

    def __init__(self, api_key: str, cx: str) -> None:
        self._api_key = api_key
        self._cx = cx

    async def search(self, query: str) -> list[SearchHit]:
        params = {"key": self._api_key, "cx": self._cx, "q": query, "num": MAX_RESULTS}
        try:
            async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
                resp = await client.get(GOOGLE_SEARCH_URL, params=params)
        except httpx.HTTPError as exc:
            raise ToolError(f"Google search request failed: {exc}") from exc

        if resp.status_code != 200:
            raise ToolError(f"Google search returned {resp.status_code}: {resp.text[:200]}")

        return [
            SearchHit(
                title=item.get("title") or "No Title",
                snippet=item.get("snippet") or "No snippet available.",
                url=item.get("link"),
            )
            for item in resp.json().get("items", [])
        ]


class DuckDuckGoSearch:
    """DuckDuckGo Instant Answer API (no key required)."""

    async def search(self, query: str) -> list[SearchHit]:
        params = {"q": query, "format": "json", "no_html": 1, "skip_disambig": 1}
        try:
            async with httpx.AsyncClient(
                timeout=settings.http_timeout_seconds,
                headers={"User-Agent": DEFAULT_USER_AGENT},
            ) as client:
                resp = await client.get(DUCKDUCKGO_URL, params=params)
        except httpx.HTTPError as exc:
            raise ToolError(f"DuckDuckGo request failed: {exc}") from exc

        if resp.status_code != 200:
            raise ToolError(f"DuckDuckGo returned {resp.status_code}")

        data = resp.json()
        hits: list[SearchHit] = []
        if data.get("Abstract"):
            hits.append(
                SearchHit(
                    title=data.get("Heading") or "Instant Answer",
                    snippet=data["Abstract"],
                    url=data.get("AbstractURL") or None,
                )
            )
        for topic in data.get("RelatedTopics", []):
            # Category groups nest their topics one level down
            for entry in topic.get("Topics", [topic]):
                text = entry.get("Text")
                if not text:
                    continue
                title, _, snippet = text.partition(" - ")
                hits.append(
                    SearchHit(title=title, snippet=snippet or text, url=entry.get("FirstURL"))
                )
        return hits


def _mock_answer(query: str, engine: str) -> str:
    label = ENGINE_LABELS[engine]
    if engine == "google" and "capital of france" in query.lower():
        return f"(Mock {label}) Paris is the capital of France."
    return (
        f'(Mock {label}) I found some general information about "{query}". '
        "For example, Wikipedia has an article on it."
    )


def format_results(query: str, engine: str, hits: list[SearchHit]) -> str:
    """Render the first few hits as a numbered list."""
    label = ENGINE_LABELS[engine]
    lines = [f'Here\'s what I found on {label} for "{query}":', ""]
    for index, hit in enumerate(hits[:MAX_RESULTS], start=1):
        lines.append(f"{index}. {hit.title}: {hit.snippet}")
        if hit.url:
            lines.append(f"   [Read more]({hit.url})")
        lines.append("")
    return "\n".join(lines).rstrip()


def _search_apology(
    query: str, engine: str = "google", capability: SearchCapability | None = None
) -> str:
    return (
        f'I encountered an error while trying to search the internet for "{query}" '
        f"using {engine}. Please try again later."
    )


@tool_boundary("web_search", _search_apology)
async def web_search(
    query: str,
    engine: str = "google",
    capability: SearchCapability | None = None,
) -> str:
    """Search ``query`` on ``engine`` and format the top results as chat text."""
    if engine not in ENGINE_LABELS:
        logger.error("Unsupported search engine requested: %s", engine)
        return (
            f'I\'m sorry, I don\'t support searching with "{engine}". '
            "Please try Google or DuckDuckGo."
        )

    logger.info('Internet search request for "%s" using %s', query, engine)
    if capability is None:
        logger.warning("%s search is not configured; using mock", ENGINE_LABELS[engine])
        return _mock_answer(query, engine)

    hits = await capability.search(query)
    if not hits:
        logger.warning('No results on %s for "%s"', ENGINE_LABELS[engine], query)
        return f'I couldn\'t find any specific results on {ENGINE_LABELS[engine]} for "{query}".'
    return format_results(query, engine, hits)

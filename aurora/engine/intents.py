"""Trigger vocabularies and slot extraction for the intent router.

Matching is substring or prefix based on the lower-cased utterance. Slot
values (locations, queries, names) are cut from the original text so their
casing survives.
"""

from __future__ import annotations

import re

FAREWELL_KEYWORDS = ("good-bye", "goodbye", "bye", "see you later", "farewell")
CANCEL_KEYWORD = "cancel"

NAME_QUESTIONS = ("what is your name", "what's your name")
CREATOR_QUESTIONS = ("who created you", "who is your creator", "who made you")
ORIGIN_QUESTIONS = ("where are you from", "where were you created")

EXPLORER_PHRASE = "search on internet explorer"

SECRET_COMMAND = "secret command"
SHOW_LOGS = "show me system logs"
DEBUG_PHRASES = ("debug explanation", "how did you process that")
BOSS_GREETING = "hello boss"

DATE_PHRASES = ("current date", "what date is it", "today's date")
DAY_PHRASES = ("what day is it", "current day")
TIME_PHRASES = ("current time", "what time is it", "time now")
DATETIME_PHRASES = ("date and time", "day date and time")

WEATHER_KEYWORDS = ("weather", "temperature", "forecast", "how hot", "how cold", "climate")

SEARCH_PREFIXES = (
    "search for",
    "look up",
    "find information about",
    "what is",
    "who is",
    "tell me about",
    "current affairs",
    "news about",
    "latest on",
)
SEARCH_PHRASES = (
    "current affairs",
    "news",
    "top stories",
    "search on duckduckgo",
    "search on google",
)
# Stripped from the front of the query, first match wins.
QUERY_PREFIXES = (*SEARCH_PREFIXES, "top stories", "what is the")

SOCIAL_KEYWORDS = (
    "search for",
    "find",
    "look up",
    "on instagram",
    "on facebook",
    "on x",
    "on social media",
)

DRAFT_EMAIL = "draft an email about"
SUMMARIZE = "summarize this"
BRAINSTORM = "brainstorm ideas for"

INTERESTS_PREFIX = "my interests are"
TRENDS_PREFIX = "what are the trends in"
INSIGHTS_PHRASE = "give me insights"

BEHAVIOR_PREFIXES = (
    "predict human behavior based on current news",
    "how will global events affect people",
    "what is the social impact of recent news",
)
PREDICTION_PREFIXES = ("predict the future of", "forecast trends for")

GAUTENG_PHRASES = (
    "top story in gauteng",
    "latest news in gauteng",
    "gauteng news today",
    "what is happening in gauteng",
)
NEWS_KEYWORDS = ("news", "latest headlines", "what's happening", "current events")

DEFAULT_LOCATION = "your current location"

_LOCATION_RE = re.compile(r"\b(?:in|for|at)\s+([A-Za-z\s]+?)(?=\?|$|,|\.)", re.IGNORECASE)
_TRANSLATE_RE = re.compile(r'translate\s+"?(.*?)"?\s+to\s+([a-z]{2})\b', re.IGNORECASE)
_ENGINE_RE = re.compile(r"search on (duckduckgo|google) for", re.IGNORECASE)
_PERSON_RE = re.compile(
    r"(?:search for|find|look up)\s+([a-z\s]+?)"
    r"(?:\s+on\s+instagram|\s+on\s+facebook|\s+on\s+x|\s+on\s+social media|\s+online|\s*)$",
    re.IGNORECASE,
)
_NEWS_TOPIC_RE = re.compile(
    r"(?:news about|headlines on|what's happening in|events in)\s+([A-Za-z\s]+?)(?=\?|$|,|\.)",
    re.IGNORECASE,
)
_PREDICTION_RE = re.compile(r"^(?:predict the future of|forecast trends for)\s+", re.IGNORECASE)


def normalize(text: str) -> str:
    """Trim and unify typographic apostrophes so "what’s" matches "what's"."""
    return text.strip().replace("’", "'")


def contains_any(lowered: str, phrases: tuple[str, ...]) -> bool:
    return any(phrase in lowered for phrase in phrases)


def starts_with_any(lowered: str, prefixes: tuple[str, ...]) -> bool:
    return lowered.startswith(prefixes)


def strip_prefix(utterance: str, prefix: str) -> str:
    return utterance[len(prefix) :].strip()


def extract_location(utterance: str) -> str:
    """Return the words after the last "in/for/at", or a generic default."""
    matches = _LOCATION_RE.findall(utterance)
    location = matches[-1].strip() if matches else ""
    return location or DEFAULT_LOCATION


def extract_translation(utterance: str) -> tuple[str, str] | None:
    """Return ``(text, target_lang)`` or None if the request is incomplete."""
    match = _TRANSLATE_RE.search(utterance)
    if not match or not match.group(1) or not match.group(2):
        return None
    return match.group(1), match.group(2).lower()


def is_search_request(lowered: str) -> bool:
    return starts_with_any(lowered, SEARCH_PREFIXES) or contains_any(lowered, SEARCH_PHRASES)


def extract_search(utterance: str) -> tuple[str, str]:
    """Return ``(query, engine)``. An explicit "search on X for" picks the engine."""
    engine_match = _ENGINE_RE.search(utterance)
    if engine_match:
        engine = engine_match.group(1).lower()
        query = (utterance[: engine_match.start()] + utterance[engine_match.end() :]).strip()
        return query, engine

    lowered = utterance.lower()
    for prefix in QUERY_PREFIXES:
        if lowered.startswith(prefix):
            return strip_prefix(utterance, prefix), "google"
    return utterance, "google"


def extract_person(lowered: str) -> str:
    match = _PERSON_RE.search(lowered)
    return match.group(1).strip() if match else ""


def parse_interests(utterance: str) -> list[str]:
    """Split the text after "my interests are" on commas."""
    raw = strip_prefix(utterance, INTERESTS_PREFIX)
    return list(dict.fromkeys(item.strip() for item in raw.split(",") if item.strip()))


def extract_prediction_topic(utterance: str) -> str:
    return _PREDICTION_RE.sub("", utterance).strip()


def extract_news_topic(utterance: str) -> str:
    match = _NEWS_TOPIC_RE.search(utterance)
    return match.group(1).strip() if match else ""

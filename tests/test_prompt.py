"""Tests for prompt assembly and clock formatting."""

from datetime import datetime

import pytest

from aurora.llm.prompt import (
    build_system_prompt,
    format_date,
    format_day,
    format_time,
    time_of_day_greeting,
)

NOW = datetime(2026, 10, 17, 15, 4, 5)


@pytest.mark.parametrize(
    ("hour", "greeting"),
    [(0, "Good morning."), (11, "Good morning."), (12, "Good afternoon."), (18, "Good evening.")],
)
def test_time_of_day_greeting(hour: int, greeting: str) -> None:
    assert time_of_day_greeting(NOW.replace(hour=hour)) == greeting


def test_clock_formats() -> None:
    assert format_day(NOW) == "Saturday"
    assert format_date(NOW) == "October 17, 2026"
    assert format_time(NOW) == "03:04:05 PM"


def test_prompt_contains_persona_and_clock() -> None:
    text = build_system_prompt(now=NOW)
    assert "named Aurora, created by Calvin" in text
    assert "Your IQ is 245" in text
    assert "Good afternoon." in text
    assert "the date is October 17, 2026" in text
    assert "Internet Explorer is a browser" in text


def test_creator_section_only_in_creator_mode() -> None:
    assert "Creator mode" not in build_system_prompt(now=NOW)
    assert "Creator mode" in build_system_prompt(creator_mode=True, now=NOW)


def test_persona_follows_settings(monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.persona_name", "Nova")
    monkeypatch.setattr("aurora.config.settings.creator_name", "Ada")
    text = build_system_prompt(now=NOW)
    assert "named Nova, created by Ada" in text

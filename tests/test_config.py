"""Tests for Settings configuration model."""

from pathlib import Path

import pytest

from aurora.config import Settings


class TestGetAllowedUserIds:
    def test_parses_comma_separated(self):
        s = Settings(allowed_user_ids="123,456,789")
        assert s.get_allowed_user_ids() == {123, 456, 789}

    def test_handles_spaces(self):
        s = Settings(allowed_user_ids=" 123 , 456 ")
        assert s.get_allowed_user_ids() == {123, 456}

    def test_empty_string_returns_empty_set(self):
        s = Settings(allowed_user_ids="")
        assert s.get_allowed_user_ids() == set()


class TestGoogleSearchEnabled:
    def test_needs_key_and_cx(self):
        assert not Settings(google_search_api_key="k").google_search_enabled
        assert not Settings(google_search_cx="c").google_search_enabled
        assert Settings(google_search_api_key="k", google_search_cx="c").google_search_enabled


class TestDefaults:
    def test_persona(self):
        s = Settings()
        assert s.persona_name == "Aurora"
        assert s.creator_name == "Calvin"
        assert s.creator_phrase == "i am calvin"
        assert s.creator_password == "1945"

    def test_default_database_path(self):
        assert Settings().database_path == Path("data/aurora.db")

    def test_default_timezone(self):
        assert Settings().timezone == "Africa/Johannesburg"

    def test_low_confidence_threshold(self):
        assert Settings().low_confidence_threshold == 0.70

    def test_speech_disabled_by_default(self):
        assert Settings().speech_enabled is False

    def test_default_notification_channel(self):
        assert Settings().default_notification_channel == "telegram"


class TestExtraForbidden:
    def test_unknown_env_var_raises(self):
        with pytest.raises(ValueError, match="extra_forbidden"):
            Settings(**{"nonexistent_field": "value"})

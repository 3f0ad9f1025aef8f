"""Tests for the access gate and session identity resolution."""

from unittest.mock import MagicMock

import pytest

from aurora.bot import security
from aurora.chat.identity import AnonymousAuth, StaticAuth


@pytest.fixture(autouse=True)
def _reset_caches():
    security.allowed_user_ids.cache_clear()
    security._anonymous.cache_clear()
    yield
    security.allowed_user_ids.cache_clear()
    security._anonymous.cache_clear()


def _update(user_id: int | None, chat_id: int | None = 42) -> MagicMock:
    update = MagicMock()
    update.effective_user = None if user_id is None else MagicMock(id=user_id)
    update.effective_chat = None if chat_id is None else MagicMock(id=chat_id)
    return update


def test_allowed_user_gets_chat_session(monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.allowed_user_ids", "111,222")
    auth = security.authorize(_update(222, chat_id=-1001))
    assert isinstance(auth, StaticAuth)
    assert auth.session_id() == "-1001"


def test_unknown_user_rejected(monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.allowed_user_ids", "111")
    assert security.authorize(_update(999)) is None


def test_empty_allowlist_rejects_everyone(monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.allowed_user_ids", "")
    assert security.authorize(_update(111)) is None


def test_missing_user_rejected(monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.allowed_user_ids", "111")
    assert security.authorize(_update(None)) is None


def test_update_without_chat_shares_anonymous_session(monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.allowed_user_ids", "111")
    first = security.authorize(_update(111, chat_id=None))
    second = security.authorize(_update(111, chat_id=None))

    assert isinstance(first, AnonymousAuth)
    assert first.session_id().startswith("anon-")
    assert second.session_id() == first.session_id()


def test_allowlist_is_read_once(monkeypatch) -> None:
    monkeypatch.setattr("aurora.config.settings.allowed_user_ids", "111")
    assert security.authorize(_update(111)) is not None

    monkeypatch.setattr("aurora.config.settings.allowed_user_ids", "222")
    assert security.authorize(_update(111)) is not None
    assert security.allowed_user_ids() == frozenset({111})

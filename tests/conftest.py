"""Shared test fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from aurora.chat import conversation as conversation_module
from aurora.chat.store import ChatStore
from aurora.connectivity import ConnectivityMonitor
from aurora.llm.client import LLMFallback
from aurora.logbuffer import LogBuffer
from aurora.notifications import NotificationRouter
from aurora.tools import Toolkit


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Give every test fresh singletons and an empty conversation registry."""
    NotificationRouter._reset()
    ConnectivityMonitor._reset()
    LogBuffer._reset()
    ChatStore._reset()
    conversation_module._conversations.clear()
    yield
    NotificationRouter._reset()
    ConnectivityMonitor._reset()
    LogBuffer._reset()
    ChatStore._reset()
    conversation_module._conversations.clear()


@pytest.fixture
def store(tmp_path: Path) -> ChatStore:
    """A ChatStore backed by a temp database."""
    return ChatStore(db_path=tmp_path / "chat.db")


@pytest.fixture
def toolkit() -> MagicMock:
    """A Toolkit whose adapters return fixed strings."""
    tk = MagicMock(spec=Toolkit)
    tk.facts = None
    tk.weather = AsyncMock(return_value="weather report")
    tk.search = AsyncMock(return_value="search results")
    tk.lookup_fact = AsyncMock(return_value="fact answer")
    tk.translate = AsyncMock(return_value="translation unavailable")
    tk.news = AsyncMock(return_value="news unavailable")
    tk.social_lookup = AsyncMock(return_value="social unavailable")
    return tk


@pytest.fixture
def llm() -> MagicMock:
    """An LLMFallback double that always answers "model reply"."""
    fake = MagicMock(spec=LLMFallback)
    fake.complete = AsyncMock(return_value="model reply")
    fake.in_flight = False
    fake.cancel.return_value = False
    return fake

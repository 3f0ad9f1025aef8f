"""Base types for the tool adapters."""

from __future__ import annotations

import functools
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, ParamSpec, Protocol, runtime_checkable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

P = ParamSpec("P")

# Returned by a fact capability when it has no specific answer for a query.
NO_SPECIFIC_ANSWER = "NO_SPECIFIC_ANSWER_FOUND"


class SearchHit(BaseModel):
    """One normalized web search result."""

    title: str = "No Title"
    snippet: str = "No snippet available."
    url: str | None = None


@runtime_checkable
class SearchCapability(Protocol):
    """A web search backend for one engine."""

    async def search(self, query: str) -> list[SearchHit]:
        """Return results for ``query``, best first. May raise."""
        ...


@runtime_checkable
class FactCapability(Protocol):
    """A computational fact engine."""

    async def query(self, text: str) -> str:
        """Return a short answer, or ``NO_SPECIFIC_ANSWER``. May raise."""
        ...


def tool_boundary(
    name: str,
    apology: str | Callable[..., str],
) -> Callable[[Callable[P, Awaitable[str]]], Callable[P, Awaitable[str]]]:
    """Catch every failure inside an adapter and turn it into an apology.

    ``apology`` is either a fixed string or a callable receiving the
    adapter's bound arguments as keywords.
    """

    def decorator(fn: Callable[P, Awaitable[str]]) -> Callable[P, Awaitable[str]]:
        if not inspect.iscoroutinefunction(fn):
            msg = f"Tool adapter '{name}' must be an async function"
            raise TypeError(msg)
        signature = inspect.signature(fn)

        @functools.wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> str:
            t0 = time.monotonic()
            try:
                result = await fn(*args, **kwargs)
            except Exception:
                elapsed = time.monotonic() - t0
                logger.exception("Tool '%s' failed in %.2fs", name, elapsed)
                if callable(apology):
                    bound: dict[str, Any] = signature.bind(*args, **kwargs).arguments
                    return apology(**bound)
                return apology
            logger.info("Tool '%s' succeeded in %.2fs", name, time.monotonic() - t0)
            return result

        return wrapper

    return decorator

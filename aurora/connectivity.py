"""Online/offline detection for the router's network-dependent intents."""

from __future__ import annotations

import enum
import logging
import time

import httpx

from aurora.config import settings

logger = logging.getLogger(__name__)


class Connectivity(enum.StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"


class ConnectivityMonitor:
    """Probes a lightweight URL and caches the answer for a short TTL.

    Singleton accessed via ``ConnectivityMonitor.get()``.
    """

    _instance: ConnectivityMonitor | None = None

    def __init__(self, probe_url: str | None = None, ttl: float | None = None) -> None:
        self._probe_url = probe_url or settings.connectivity_probe_url
        self._ttl = settings.connectivity_ttl_seconds if ttl is None else ttl
        self._status: Connectivity | None = None
        self._checked_at = 0.0

    @classmethod
    def get(cls) -> ConnectivityMonitor:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset singleton — for tests only."""
        cls._instance = None

    async def status(self) -> Connectivity:
        """Return the cached status, probing again once the TTL has lapsed."""
        if settings.force_offline:
            return Connectivity.OFFLINE
        now = time.monotonic()
        if self._status is None or now - self._checked_at >= self._ttl:
            self._status = await self._probe()
            self._checked_at = now
        return self._status

    async def _probe(self) -> Connectivity:
        try:
            async with httpx.AsyncClient(timeout=3) as client:
                resp = await client.head(self._probe_url)
        except httpx.HTTPError as exc:
            logger.warning("Network status: offline (%s)", exc)
            return Connectivity.OFFLINE
        if resp.status_code >= 500:
            logger.warning("Network status: offline (probe returned %d)", resp.status_code)
            return Connectivity.OFFLINE
        logger.debug("Network status: online")
        return Connectivity.ONLINE

"""Scan cache interface for reusing full conflict scans."""

from abc import ABC, abstractmethod

from ..value_objects.conflict import Conflict

ALL_CONFLICTS_KEY = "conflicts:all"


class ScanCache(ABC):
    """Cache of full conflict scans keyed by scan name."""

    ttl_seconds: int

    @abstractmethod
    async def get(self, key: str) -> list[Conflict] | None:
        """Return a cached scan, or None when missing or expired."""

    @abstractmethod
    async def set(self, key: str, conflicts: list[Conflict]) -> None:
        """Store a scan for ``ttl_seconds``."""

    @abstractmethod
    async def invalidate(self, key: str | None = None) -> None:
        """Drop one cached scan, or every scan when ``key`` is None."""

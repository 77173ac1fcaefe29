"""
Conflict scan cache.

Full conflict scans are reused until their TTL elapses. The in-memory cache
serves a single process; the Redis cache shares scans between processes.
Reads and writes take no locks: the last write wins.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

import redis.asyncio as redis
from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from crewplan.core.observability import SCAN_CACHE_LOOKUPS, get_logger
from crewplan.domain.scheduling.repositories.scan_cache import ScanCache
from crewplan.domain.scheduling.value_objects.conflict import Conflict
from crewplan.domain.scheduling.value_objects.thresholds import (
    CONFLICT_CACHE_TTL_SECONDS,
)

logger = get_logger(__name__)

_conflict_list = TypeAdapter(list[Conflict])


@dataclass
class _Entry:
    conflicts: list[Conflict]
    stored_at: float


class InMemoryScanCache(ScanCache):
    """Process-local scan cache with an injectable clock."""

    def __init__(
        self,
        ttl_seconds: int = CONFLICT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    async def get(self, key: str) -> list[Conflict] | None:
        entry = self._entries.get(key)
        if entry is None:
            SCAN_CACHE_LOOKUPS.labels(result="miss").inc()
            return None
        if self._clock() - entry.stored_at >= self.ttl_seconds:
            del self._entries[key]
            SCAN_CACHE_LOOKUPS.labels(result="expired").inc()
            return None
        SCAN_CACHE_LOOKUPS.labels(result="hit").inc()
        return list(entry.conflicts)

    async def set(self, key: str, conflicts: list[Conflict]) -> None:
        self._entries[key] = _Entry(conflicts=list(conflicts), stored_at=self._clock())

    async def invalidate(self, key: str | None = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)


class RedisScanCache(ScanCache):
    """
    Redis-backed scan cache.

    Scans are stored as JSON with a Redis expiry. Redis errors and unreadable
    entries are logged and treated as cache misses so a scan can always be
    recomputed.
    """

    def __init__(
        self,
        client: redis.Redis,
        ttl_seconds: int = CONFLICT_CACHE_TTL_SECONDS,
        key_prefix: str = "crewplan:",
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._client = client
        self._key_prefix = key_prefix

    @classmethod
    def from_url(
        cls,
        url: str,
        ttl_seconds: int = CONFLICT_CACHE_TTL_SECONDS,
        key_prefix: str = "crewplan:",
    ) -> "RedisScanCache":
        return cls(
            redis.Redis.from_url(url, decode_responses=True),
            ttl_seconds=ttl_seconds,
            key_prefix=key_prefix,
        )

    def _make_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def get(self, key: str) -> list[Conflict] | None:
        try:
            raw = await self._client.get(self._make_key(key))
        except RedisError as e:
            logger.error("Scan cache read failed", key=key, error=str(e))
            SCAN_CACHE_LOOKUPS.labels(result="error").inc()
            return None

        if raw is None:
            SCAN_CACHE_LOOKUPS.labels(result="miss").inc()
            return None
        try:
            conflicts = _conflict_list.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Discarding unreadable cached scan",
                key=key,
                error_count=e.error_count(),
            )
            SCAN_CACHE_LOOKUPS.labels(result="invalid").inc()
            await self.invalidate(key)
            return None
        SCAN_CACHE_LOOKUPS.labels(result="hit").inc()
        return conflicts

    async def set(self, key: str, conflicts: list[Conflict]) -> None:
        payload = _conflict_list.dump_json(conflicts)
        try:
            await self._client.set(self._make_key(key), payload, ex=self.ttl_seconds)
        except RedisError as e:
            logger.error("Scan cache write failed", key=key, error=str(e))

    async def invalidate(self, key: str | None = None) -> None:
        try:
            if key is not None:
                await self._client.delete(self._make_key(key))
                return
            keys = [
                k async for k in self._client.scan_iter(match=self._make_key("conflicts:*"))
            ]
            if keys:
                await self._client.delete(*keys)
        except RedisError as e:
            logger.error("Scan cache invalidation failed", key=key, error=str(e))

    async def close(self) -> None:
        await self._client.aclose()

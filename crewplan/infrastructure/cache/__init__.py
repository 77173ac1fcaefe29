"""Caches used by the scheduling engine."""

from .scan_cache import InMemoryScanCache, RedisScanCache

__all__ = ["InMemoryScanCache", "RedisScanCache"]

"""
Process-wide cache in front of the store's read paths.

``MemoryCacheClient`` holds serialized values with a per-key expiry and
supports glob invalidation. ``CacheManager`` is what repositories use: it
serializes values, and turns every client failure into a logged miss or
no-op so the store stays the source of truth.
"""

import asyncio
import hashlib
import json
import re
import time
from collections.abc import Callable
from typing import Any, Protocol

from productivity.config import Settings, settings
from productivity.logging import get_logger

logger = get_logger("cache")

ENTITY_PREFIXES = ("todo", "note", "event", "category")


class CacheClient(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl: int) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def invalidate_pattern(self, pattern: str) -> None: ...


class CacheTTL:
    """TTL tiers in seconds."""

    def __init__(self, config: Settings = settings):
        self.SHORT = config.CACHE_TTL_SHORT
        self.MEDIUM = config.CACHE_TTL_MEDIUM
        self.LONG = config.CACHE_TTL_LONG
        self.DAILY = config.CACHE_TTL_DAILY


class CacheKeys:
    """Key-space shared by reads and invalidation."""

    @staticmethod
    def record(prefix: str, record_id: str) -> str:
        return f"{prefix}:{record_id}"

    @staticmethod
    def query(prefix: str, owner_id: str, operation: str, params: Any = None) -> str:
        return f"{prefix}:{owner_id}:{operation}:{params_digest(params)}"

    @staticmethod
    def owner_pattern(prefix: str, owner_id: str) -> str:
        return f"{prefix}:{owner_id}:*"

    @staticmethod
    def stats(owner_id: str, prefix: str | None = None) -> str:
        if prefix is None:
            return f"stats:{owner_id}"
        return f"stats:{owner_id}:{prefix}"


def params_digest(params: Any) -> str:
    """Stable digest of query parameters; equal parameters always give equal keys."""
    if params is None:
        return "default"
    canonical = json.dumps(params, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha1(canonical.encode("utf-8")).hexdigest()


def glob_to_regex(pattern: str) -> re.Pattern:
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")))


class MemoryCacheClient:
    """In-process key/value store with lazy expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[str, float]] = {}

    async def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._entries[key] = (value, self._clock() + ttl)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def invalidate_pattern(self, pattern: str) -> None:
        regex = glob_to_regex(pattern)
        for key in [k for k in self._entries if regex.fullmatch(k)]:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class CacheManager:
    """Error-swallowing front for a cache client; ``client=None`` disables caching."""

    def __init__(self, client: CacheClient | None, ttl: CacheTTL | None = None):
        self.client = client
        self.ttl = ttl or CacheTTL()

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def get(self, key: str) -> Any | None:
        if self.client is None:
            return None
        try:
            cached = await self.client.get(key)
            return json.loads(cached) if cached is not None else None
        except Exception as e:
            logger.warning(f"Cache get error for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        if self.client is None:
            return
        try:
            await self.client.set(key, json.dumps(value, default=str), ttl or self.ttl.MEDIUM)
        except Exception as e:
            logger.warning(f"Cache set error for {key}: {e}")

    async def delete(self, key: str) -> None:
        if self.client is None:
            return
        try:
            await self.client.delete(key)
        except Exception as e:
            logger.warning(f"Cache delete error for {key}: {e}")

    async def invalidate_pattern(self, pattern: str) -> None:
        if self.client is None:
            return
        try:
            await self.client.invalidate_pattern(pattern)
        except Exception as e:
            logger.warning(f"Cache pattern invalidation error for {pattern}: {e}")

    async def invalidate_stats(self, owner_id: str) -> None:
        await asyncio.gather(
            self.delete(CacheKeys.stats(owner_id)),
            self.invalidate_pattern(f"{CacheKeys.stats(owner_id)}:*"),
        )

    async def invalidate_user_cache(self, owner_id: str) -> None:
        """Drop every list, query and stats entry belonging to one owner."""
        await asyncio.gather(
            *(self.invalidate_pattern(CacheKeys.owner_pattern(p, owner_id)) for p in ENTITY_PREFIXES),
            self.invalidate_stats(owner_id),
        )

    async def invalidate_item_cache(self, prefix: str, record_id: str, owner_id: str) -> None:
        """Drop one record, the owner's list caches for its type, and the owner's stats."""
        await asyncio.gather(
            self.delete(CacheKeys.record(prefix, record_id)),
            self.invalidate_pattern(CacheKeys.owner_pattern(prefix, owner_id)),
            self.invalidate_stats(owner_id),
        )

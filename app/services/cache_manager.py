"""Unified cache manager shared by every data-access service.

Entries are ``(data, timestamp)`` pairs. Freshness is decided at read time
from the duration passed by the caller, so one entry can be read with
different windows (including ``NO_EXPIRY`` for stale fallbacks). Caching is
best effort: read failures look like misses and write failures are logged.
"""

import asyncio
import json
import logging
import time
from datetime import timedelta
from typing import Any, Callable, Optional

import httpx
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models import CacheEntry
from app.services.cache_config import (
    CacheStorage,
    CacheTTL,
    get_ttl_timedelta,
    is_cache_valid,
)
from app.services.http import get_json

logger = logging.getLogger(__name__)

# Errors a backend may raise that should never reach the caller
_BACKEND_ERRORS = (SQLAlchemyError, OSError, ValueError, TypeError)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class MemoryCacheBackend:
    """Process-local store holding native Python values."""

    def __init__(self):
        self._entries: dict[str, tuple[Any, int]] = {}

    async def read(self, key: str) -> Optional[tuple[Any, int]]:
        return self._entries.get(key)

    async def write(self, key: str, data: Any, timestamp: int) -> None:
        self._entries[key] = (data, timestamp)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def delete_prefix(self, prefix: str) -> int:
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        return len(keys)

    async def clear(self) -> None:
        self._entries.clear()


class DatabaseCacheBackend:
    """Durable store keeping JSON text in the ``cache_entries`` table.

    Operations are serialized so SQLite only ever sees one writer.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory
        self._lock = asyncio.Lock()

    async def read(self, key: str) -> Optional[tuple[Any, int]]:
        async with self._lock, self._session_factory() as session:
            result = await session.execute(
                select(CacheEntry).where(CacheEntry.key == key)
            )
            entry = result.scalar_one_or_none()

        if entry is None:
            return None
        return json.loads(entry.payload), entry.timestamp

    async def write(self, key: str, data: Any, timestamp: int) -> None:
        payload = json.dumps(data)
        async with self._lock, self._session_factory() as session:
            await session.merge(CacheEntry(key=key, payload=payload, timestamp=timestamp))
            await session.commit()

    async def delete(self, key: str) -> None:
        async with self._lock, self._session_factory() as session:
            await session.execute(delete(CacheEntry).where(CacheEntry.key == key))
            await session.commit()

    async def delete_prefix(self, prefix: str) -> int:
        async with self._lock, self._session_factory() as session:
            result = await session.execute(
                delete(CacheEntry).where(
                    CacheEntry.key.startswith(prefix, autoescape=True)
                )
            )
            await session.commit()
        return result.rowcount or 0

    async def clear(self) -> None:
        async with self._lock, self._session_factory() as session:
            await session.execute(delete(CacheEntry))
            await session.commit()


class CacheManager:
    """Key/value cache with per-call duration and storage selection.

    Build one per application and hand it to each service.
    """

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Optional[Callable[[], int]] = None,
        default_duration: timedelta = get_ttl_timedelta(CacheTTL.DATA),
        default_storage: CacheStorage = CacheStorage.DURABLE,
    ):
        if session_factory is None:
            from app.database import async_session

            session_factory = async_session

        self._backends = {
            CacheStorage.DURABLE: DatabaseCacheBackend(session_factory),
            CacheStorage.MEMORY: MemoryCacheBackend(),
        }
        self.http_client = http_client
        self._clock = clock or _epoch_millis
        self.default_duration = default_duration
        self.default_storage = default_storage

    def now(self) -> int:
        """Current time in epoch milliseconds."""
        return self._clock()

    def _backend(self, storage: Optional[CacheStorage]):
        return self._backends[storage or self.default_storage]

    async def get(
        self,
        key: str,
        duration: Optional[timedelta] = None,
        storage: Optional[CacheStorage] = None,
    ) -> Optional[Any]:
        """Get cached data if present and younger than *duration*.

        Returns None for absent, expired or unreadable entries.
        """
        if duration is None:
            duration = self.default_duration
        try:
            entry = await self._backend(storage).read(key)
        except _BACKEND_ERRORS as e:
            logger.error("Error reading cache for %s: %s", key, e)
            return None

        if entry is None:
            return None

        data, timestamp = entry
        if is_cache_valid(timestamp, duration, self.now()):
            logger.debug("Cache hit for %s", key)
            return data
        return None

    async def set(
        self,
        key: str,
        data: Any,
        duration: Optional[timedelta] = None,
        storage: Optional[CacheStorage] = None,
    ) -> None:
        """Store data, overwriting any existing entry.

        *duration* is accepted for symmetry with ``get``; entries never
        carry their own expiry.
        """
        try:
            await self._backend(storage).write(key, data, self.now())
            logger.debug("Cached %s in %s storage", key, (storage or self.default_storage).value)
        except _BACKEND_ERRORS as e:
            logger.error("Error caching %s: %s", key, e)

    async def remove(self, key: str, storage: Optional[CacheStorage] = None) -> None:
        """Remove a single entry."""
        try:
            await self._backend(storage).delete(key)
        except _BACKEND_ERRORS as e:
            logger.error("Error removing cache entry %s: %s", key, e)

    async def clear_by_prefix(
        self, prefix: str, storage: Optional[CacheStorage] = None
    ) -> None:
        """Remove every entry whose key starts with *prefix*."""
        storage = storage or self.default_storage
        try:
            count = await self._backend(storage).delete_prefix(prefix)
        except _BACKEND_ERRORS as e:
            logger.error("Error clearing cache prefix %s: %s", prefix, e)
            return
        logger.info("Cleared %d %s cache entries with prefix: %s", count, storage.value, prefix)

    async def clear_all(self, storage: Optional[CacheStorage] = None) -> None:
        """Remove every entry in one storage."""
        storage = storage or self.default_storage
        try:
            await self._backend(storage).clear()
        except _BACKEND_ERRORS as e:
            logger.error("Error clearing %s cache: %s", storage.value, e)
            return
        logger.info("Cleared all %s cache", storage.value)

    async def fetch_with_cache(
        self,
        url: str,
        key: str,
        duration: Optional[timedelta] = None,
        storage: Optional[CacheStorage] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Return cached data for *key*, fetching *url* on a miss.

        Concurrent misses on the same key each issue their own request;
        the last write wins.

        Raises:
            FetchFailed: If the upstream answers with a non-2xx status.
            NetworkError: If the request could not be completed.
            ParseError: If the body is not valid JSON.
        """
        cached = await self.get(key, duration=duration, storage=storage)
        if cached is not None:
            return cached

        logger.info("Fetching fresh data for %s", key)
        data = await get_json(url, params=params, client=self.http_client)

        await self.set(key, data, duration=duration, storage=storage)
        return data

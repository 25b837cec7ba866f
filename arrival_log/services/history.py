from typing import List, Optional

import redis.asyncio as redis
from pydantic import TypeAdapter, ValidationError

from arrival_log.errors import ReadError, StorageError
from arrival_log.schemas.arrival_schema import ArrivalEventSchema
from arrival_log.services.invalidation import generation_key, versioned_key
from arrival_log.store.event_store import DEFAULT_LIMIT, EventStore
from arrival_log.utils.logger import get_logger

logger = get_logger(__name__)

_history_adapter = TypeAdapter(List[ArrivalEventSchema])


class HistoryReader:
    """
    Read-only projections over the event store.

    With a redis client the history list is cached under
    ``<cache_key>:<generation>``; EventRecorder's invalidator bumps the
    generation on every write. Cache trouble is logged and the store is
    read directly.
    """

    def __init__(
        self,
        store: EventStore,
        *,
        limit: int = DEFAULT_LIMIT,
        cache: Optional[redis.Redis] = None,
        cache_key: str = "arrivals:history",
        cache_ttl_seconds: int = 60,
    ):
        self._store = store
        self._limit = limit
        self._cache = cache
        self._cache_key = cache_key
        self._cache_ttl = cache_ttl_seconds

    async def get_history(self) -> List[ArrivalEventSchema]:
        """Newest first, at most ``limit`` entries; empty when nothing is stored."""
        generation = await self._read_generation()
        cached = await self._read_cache(generation)
        if cached is not None:
            return cached
        try:
            events = await self._store.list_recent(self._limit)
        except StorageError as e:
            logger.error("Error fetching arrival history.", error=str(e))
            raise ReadError("Failed to fetch arrival history", cause=e) from e
        # Written under the generation seen before the read; a record() in
        # between bumps the generation and orphans this entry.
        await self._write_cache(generation, events)
        return events

    async def get_latest(self) -> Optional[ArrivalEventSchema]:
        try:
            return await self._store.latest()
        except StorageError as e:
            logger.error("Error fetching latest arrival event.", error=str(e))
            raise ReadError("Failed to fetch latest event", cause=e) from e

    async def _read_generation(self) -> Optional[str]:
        if self._cache is None:
            return None
        try:
            generation = await self._cache.get(generation_key(self._cache_key))
        except Exception as e:
            logger.warning("History cache read failed.", cache_key=self._cache_key, error=str(e))
            return None
        return "0" if generation is None else str(generation)

    async def _read_cache(self, generation: Optional[str]) -> Optional[List[ArrivalEventSchema]]:
        if generation is None:
            return None
        key = versioned_key(self._cache_key, generation)
        try:
            raw = await self._cache.get(key)
        except Exception as e:
            logger.warning("History cache read failed.", cache_key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return _history_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding malformed history cache entry.", cache_key=key, error=str(e))
            return None

    async def _write_cache(self, generation: Optional[str], events: List[ArrivalEventSchema]):
        if generation is None:
            return
        key = versioned_key(self._cache_key, generation)
        try:
            await self._cache.set(key, _history_adapter.dump_json(events), ex=self._cache_ttl)
        except Exception as e:
            logger.warning("History cache write failed.", cache_key=key, error=str(e))

"""
Notifications sent after a successful write so cached history views refresh.
"""

import json
from typing import Protocol

import redis.asyncio as redis

from arrival_log.schemas.arrival_schema import ArrivalEventSchema
from arrival_log.utils.logger import get_logger

logger = get_logger(__name__)


class ViewInvalidator(Protocol):
    async def invalidate(self, event: ArrivalEventSchema) -> None:
        ...


class NullInvalidator:
    """Used when no view cache is configured."""

    async def invalidate(self, event: ArrivalEventSchema) -> None:
        return None


def generation_key(cache_key: str) -> str:
    return f"{cache_key}:generation"


def versioned_key(cache_key: str, generation) -> str:
    return f"{cache_key}:{generation}"


class RedisViewInvalidator:
    """
    Bump the history view generation and announce the new event on a channel.

    Cached views are stored per generation, so a list read before the bump
    can never be served after it. Failures are logged only: the write has
    already happened and a stale view expires on its own TTL.
    """

    def __init__(self, redis_client: redis.Redis, cache_key: str, channel: str):
        self._redis = redis_client
        self._cache_key = cache_key
        self._channel = channel

    async def invalidate(self, event: ArrivalEventSchema) -> None:
        try:
            generation = await self._redis.incr(generation_key(self._cache_key))
            await self._redis.delete(versioned_key(self._cache_key, int(generation) - 1))
            await self._redis.publish(
                self._channel,
                json.dumps({"event_id": event.id, "type": event.type.value}),
            )
            logger.debug("Invalidated history view.", event_id=event.id, generation=generation)
        except Exception as e:
            logger.warning("Could not invalidate history view.", event_id=event.id, error=str(e))

"""
Append-only storage for arrival/departure events.
"""

import time
from typing import Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from arrival_log.database.sessions import (
    build_async_engine,
    build_session_factory,
    get_db_info,
    test_connection,
)
from arrival_log.errors import StorageError
from arrival_log.models.base import Base
from arrival_log.models.arrival_events_table import ArrivalEventRow
from arrival_log.schemas.arrival_schema import ArrivalEventSchema, EventType
from arrival_log.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = 10


class EventStore:
    """
    Durable, append-only store of ArrivalEvent records.

    Records are never updated or deleted. ``created_at`` is taken from
    ``clock`` at insertion time and never goes backwards within one store.
    Every failure of the underlying medium surfaces as StorageError.
    """

    def __init__(self, engine: AsyncEngine, clock: Callable[[], float] = time.time):
        self._engine = engine
        self._session_factory = build_session_factory(engine)
        self._clock = clock
        self._last_created_at = 0
        self._closed = False

    @classmethod
    def from_url(cls, database_url: str, *, echo: bool = False,
                 clock: Callable[[], float] = time.time) -> "EventStore":
        return cls(build_async_engine(database_url, echo=echo), clock=clock)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    def _ensure_open(self):
        if self._closed:
            raise StorageError("Event store is closed")

    def _next_created_at(self) -> int:
        created_at = max(int(self._clock()), self._last_created_at)
        self._last_created_at = created_at
        return created_at

    async def create_tables(self):
        """Create the arrival_events table and its index if missing."""
        self._ensure_open()
        try:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            logger.error("Failed to create tables.", error=str(e))
            raise StorageError(f"Could not create tables: {e}") from e

    async def dispose(self):
        """Release pooled connections. The store is unusable afterwards."""
        if self._closed:
            return
        self._closed = True
        await self._engine.dispose()
        logger.info("Event store disposed")

    async def insert(self, timestamp: int, formatted_time: str,
                     type: EventType = EventType.ARRIVAL) -> ArrivalEventSchema:
        """Persist a new record; the store assigns ``id`` and ``created_at``."""
        self._ensure_open()
        row = ArrivalEventRow(
            timestamp=timestamp,
            formatted_time=formatted_time,
            type=EventType(type),
            created_at=self._next_created_at(),
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(row)
                # expire_on_commit=False keeps the generated id readable
                event = ArrivalEventSchema.model_validate(row)
        except (SQLAlchemyError, OSError, OverflowError, ValueError, TypeError) as e:
            # driver-side conversion errors (e.g. a timestamp outside int64) are not wrapped by SQLAlchemy
            logger.error("Error while persisting arrival event.", timestamp=timestamp, error=str(e))
            raise StorageError(f"Could not persist event: {e}") from e

        logger.info("Arrival event persisted.", event_id=event.id, event_type=event.type.value)
        return event

    async def list_recent(self, limit: int = DEFAULT_LIMIT) -> List[ArrivalEventSchema]:
        """Up to ``limit`` records, newest insertion first (ties by id)."""
        if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        self._ensure_open()
        stmt = (
            select(ArrivalEventRow)
            .order_by(ArrivalEventRow.created_at.desc(), ArrivalEventRow.id.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
                return [ArrivalEventSchema.model_validate(r) for r in rows]
        except (SQLAlchemyError, OSError) as e:
            logger.error("Error while listing arrival events.", limit=limit, error=str(e))
            raise StorageError(f"Could not list events: {e}") from e

    async def latest(self) -> Optional[ArrivalEventSchema]:
        """The most recently inserted record, or None when the store is empty."""
        recent = await self.list_recent(1)
        return recent[0] if recent else None

    async def ping(self) -> bool:
        self._ensure_open()
        try:
            return await test_connection(self._engine)
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Database unreachable: {e}") from e

    async def describe(self) -> dict:
        self._ensure_open()
        try:
            return await get_db_info(self._engine)
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Database unreachable: {e}") from e

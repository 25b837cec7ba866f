from typing import Optional, Union

from arrival_log.errors import InvalidEventError, RecordingError, StorageError
from arrival_log.schemas.arrival_schema import (
    TIMESTAMP_MAX,
    TIMESTAMP_MIN,
    ArrivalEventSchema,
    EventType,
)
from arrival_log.services.invalidation import NullInvalidator, ViewInvalidator
from arrival_log.store.event_store import EventStore
from arrival_log.utils.elapsed import ZERO_LABEL, format_elapsed
from arrival_log.utils.logger import get_logger

logger = get_logger(__name__)


class EventRecorder:
    """
    The single write path for arrival/departure events.

    Only argument types and the timestamp column range are checked. Any
    label is accepted and the ARRIVAL/DEPARTURE alternation is not enforced.
    """

    def __init__(self, store: EventStore, invalidator: Optional[ViewInvalidator] = None):
        self._store = store
        self._invalidator = invalidator or NullInvalidator()

    async def record(
        self,
        timestamp: int,
        formatted_time: Optional[str] = None,
        type: Union[EventType, str] = EventType.ARRIVAL,
    ) -> ArrivalEventSchema:
        """
        Store a new event and return it as persisted.

        When ``formatted_time`` is None the label is derived: zero for an
        arrival, time since the open arrival for a departure.

        Raises:
            InvalidEventError: an argument has the wrong type or the timestamp
                does not fit the 64-bit column.
            RecordingError: the store failed; ``cause`` holds the StorageError.
        """
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise InvalidEventError(f"timestamp must be an integer, got {timestamp!r}")
        if not TIMESTAMP_MIN <= timestamp <= TIMESTAMP_MAX:
            raise InvalidEventError(f"timestamp out of 64-bit range: {timestamp!r}")
        if formatted_time is not None and not isinstance(formatted_time, str):
            raise InvalidEventError(f"formatted_time must be a string, got {formatted_time!r}")
        try:
            event_type = EventType(type)
        except ValueError as e:
            raise InvalidEventError(f"type must be ARRIVAL or DEPARTURE, got {type!r}") from e

        try:
            if formatted_time is None:
                formatted_time = await self._derive_label(timestamp, event_type)
            event = await self._store.insert(timestamp, formatted_time, event_type)
        except StorageError as e:
            logger.error("Error recording arrival event.", event_type=event_type.value, error=str(e))
            raise RecordingError(f"Failed to record {event_type.value.lower()}", cause=e) from e

        await self._invalidator.invalidate(event)
        return event

    async def _derive_label(self, timestamp: int, event_type: EventType) -> str:
        if event_type is EventType.ARRIVAL:
            return ZERO_LABEL
        latest = await self._store.latest()
        if latest is None or latest.type is not EventType.ARRIVAL:
            return ZERO_LABEL
        return format_elapsed(timestamp - latest.timestamp)

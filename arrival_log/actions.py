"""
Request/response boundary used by the HTTP layer.

Every method returns a result model; no exception crosses this boundary.
Write failures carry a message for the user, read failures degrade to an
empty list or None.
"""

from typing import Optional, Union

from arrival_log.errors import ArrivalLogError, InvalidEventError, ReadError
from arrival_log.schemas.arrival_schema import (
    EventType,
    HistoryResult,
    LatestResult,
    RecordResult,
)
from arrival_log.services.history import HistoryReader
from arrival_log.services.recorder import EventRecorder
from arrival_log.utils.logger import get_logger

logger = get_logger(__name__)


class ArrivalActions:
    def __init__(self, recorder: EventRecorder, reader: HistoryReader):
        self._recorder = recorder
        self._reader = reader

    async def record(
        self,
        timestamp: int,
        formatted_time: Optional[str] = None,
        type: Union[EventType, str] = EventType.ARRIVAL,
    ) -> RecordResult:
        try:
            event = await self._recorder.record(timestamp, formatted_time, type)
        except InvalidEventError as e:
            logger.warning("Rejected arrival event.", error=str(e))
            return RecordResult(success=False, error=str(e))
        except ArrivalLogError as e:
            logger.exception("Error recording arrival time")
            return RecordResult(success=False, error=str(e) or "Failed to record arrival time")
        return RecordResult(success=True, data=event)

    async def history(self) -> HistoryResult:
        try:
            events = await self._reader.get_history()
        except ReadError as e:
            return HistoryResult(success=False, data=[], error=str(e))
        return HistoryResult(success=True, data=events)

    async def latest(self) -> LatestResult:
        try:
            event = await self._reader.get_latest()
        except ReadError as e:
            return LatestResult(success=False, data=None, error=str(e))
        return LatestResult(success=True, data=event)

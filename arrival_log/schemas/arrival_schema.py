from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

# Range of the 64-bit timestamp column
TIMESTAMP_MIN = -2**63
TIMESTAMP_MAX = 2**63 - 1


class EventType(str, Enum):
    ARRIVAL = "ARRIVAL"
    DEPARTURE = "DEPARTURE"


class SessionState(str, Enum):
    READY = "READY"
    IN_PROGRESS = "IN_PROGRESS"


class ArrivalEventSchema(BaseModel):
    id: int = Field(..., description="Store-assigned, monotonically increasing identifier")
    timestamp: int = Field(..., description="Client-observed moment of the action, ms since epoch")
    type: EventType = Field(EventType.ARRIVAL, description="ARRIVAL or DEPARTURE")
    formatted_time: str = Field(..., description="Elapsed-time label, HH:MM:SS.cc")
    created_at: int = Field(..., description="Insertion time, seconds since epoch")

    class Config:
        from_attributes = True
        frozen = True


class RecordRequest(BaseModel):
    timestamp: int = Field(..., ge=TIMESTAMP_MIN, le=TIMESTAMP_MAX,
                           description="Client-observed moment of the action, ms since epoch")
    formatted_time: Optional[str] = Field(None, description="Elapsed-time label; derived when omitted")
    type: EventType = Field(EventType.ARRIVAL, description="Defaults to ARRIVAL")


class RecordResult(BaseModel):
    success: bool
    data: Optional[ArrivalEventSchema] = None
    error: Optional[str] = None


class HistoryResult(BaseModel):
    success: bool
    data: List[ArrivalEventSchema] = Field(default_factory=list)
    error: Optional[str] = None


class LatestResult(BaseModel):
    success: bool
    data: Optional[ArrivalEventSchema] = None
    error: Optional[str] = None


class StopwatchView(BaseModel):
    state: SessionState
    running: bool
    elapsed_ms: int
    label: str
    latest: Optional[ArrivalEventSchema] = None

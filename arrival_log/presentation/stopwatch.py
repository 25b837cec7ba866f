"""
Stopwatch view derived from the latest recorded event.

READY means nothing is open (no events, or the last one is a DEPARTURE);
IN_PROGRESS means the last event is an ARRIVAL. The alternation is a UI
convention, the store accepts events in any order.
"""

from typing import Optional

from arrival_log.schemas.arrival_schema import (
    ArrivalEventSchema,
    EventType,
    SessionState,
    StopwatchView,
)
from arrival_log.utils.elapsed import ZERO_LABEL, format_elapsed, parse_elapsed


def session_state(latest: Optional[ArrivalEventSchema]) -> SessionState:
    if latest is None or latest.type is EventType.DEPARTURE:
        return SessionState.READY
    return SessionState.IN_PROGRESS


def stopwatch_view(latest: Optional[ArrivalEventSchema], now_ms: int) -> StopwatchView:
    state = session_state(latest)

    if latest is None:
        return StopwatchView(state=state, running=False, elapsed_ms=0, label=ZERO_LABEL)

    if state is SessionState.IN_PROGRESS:
        elapsed = max(0, now_ms - latest.timestamp)
        return StopwatchView(
            state=state, running=True, elapsed_ms=elapsed,
            label=format_elapsed(elapsed), latest=latest,
        )

    # Stopped: show the reading stored with the departure
    try:
        elapsed = parse_elapsed(latest.formatted_time)
    except ValueError:
        elapsed = 0
    return StopwatchView(
        state=state, running=False, elapsed_ms=elapsed,
        label=latest.formatted_time, latest=latest,
    )

import pytest

from arrival_log.presentation.stopwatch import session_state, stopwatch_view
from arrival_log.schemas.arrival_schema import ArrivalEventSchema, EventType, SessionState
from arrival_log.utils.elapsed import format_elapsed, parse_elapsed


def make_event(type_, timestamp=1000, formatted_time="00:00:00.00"):
    return ArrivalEventSchema(id=1, timestamp=timestamp, type=type_,
                              formatted_time=formatted_time, created_at=1)


@pytest.mark.parametrize("ms,label", [
    (0, "00:00:00.00"),
    (4000, "00:00:04.00"),
    (83_456, "00:01:23.45"),
    (3_600_000 * 2 + 61_009, "02:01:01.00"),
    (3_600_000 * 123, "123:00:00.00"),
    (-50, "00:00:00.00"),
])
def test_format_elapsed(ms, label):
    assert format_elapsed(ms) == label


def test_parse_elapsed():
    assert parse_elapsed("00:01:23.45") == 83_450
    assert parse_elapsed("123:00:00.00") == 123 * 3_600_000


@pytest.mark.parametrize("label", ["", "1:00:00.00", "00:60:00.00", "00:00:00", "later"])
def test_parse_elapsed_rejects_malformed(label):
    with pytest.raises(ValueError):
        parse_elapsed(label)


def test_session_state():
    assert session_state(None) is SessionState.READY
    assert session_state(make_event(EventType.ARRIVAL)) is SessionState.IN_PROGRESS
    assert session_state(make_event(EventType.DEPARTURE)) is SessionState.READY


def test_view_with_no_events():
    view = stopwatch_view(None, now_ms=99_999)

    assert view.state is SessionState.READY
    assert view.running is False
    assert view.elapsed_ms == 0
    assert view.label == "00:00:00.00"
    assert view.latest is None


def test_view_runs_after_arrival():
    view = stopwatch_view(make_event(EventType.ARRIVAL, timestamp=1000), now_ms=84_450)

    assert view.state is SessionState.IN_PROGRESS
    assert view.running is True
    assert view.elapsed_ms == 83_450
    assert view.label == "00:01:23.45"


def test_view_frozen_after_departure():
    departure = make_event(EventType.DEPARTURE, timestamp=5000, formatted_time="00:00:04.00")

    view = stopwatch_view(departure, now_ms=1_000_000)

    assert view.running is False
    assert view.elapsed_ms == 4000
    assert view.label == "00:00:04.00"


def test_view_keeps_unparseable_departure_label():
    departure = make_event(EventType.DEPARTURE, formatted_time="whenever")

    view = stopwatch_view(departure, now_ms=1_000_000)

    assert view.elapsed_ms == 0
    assert view.label == "whenever"

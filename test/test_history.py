import json

import pytest

from arrival_log.errors import ReadError, StorageError
from arrival_log.schemas.arrival_schema import EventType
from arrival_log.services.history import HistoryReader, _history_adapter
from arrival_log.services.invalidation import RedisViewInvalidator
from arrival_log.services.recorder import EventRecorder

from conftest import FakeRedis


@pytest.mark.asyncio
async def test_arrival_then_departure(store):
    recorder = EventRecorder(store)
    reader = HistoryReader(store)

    arrival = await recorder.record(1000, "00:00:00.00", EventType.ARRIVAL)
    departure = await recorder.record(5000, "00:00:04.00", EventType.DEPARTURE)

    assert await reader.get_latest() == departure
    assert await reader.get_history() == [departure, arrival]


@pytest.mark.asyncio
async def test_empty_store_reads(store):
    reader = HistoryReader(store)

    assert await reader.get_history() == []
    assert await reader.get_latest() is None


@pytest.mark.asyncio
async def test_history_is_capped(store):
    recorder = EventRecorder(store)
    for i in range(13):
        await recorder.record(i, "00:00:00.00")

    history = await HistoryReader(store).get_history()

    assert len(history) == 10
    assert [e.timestamp for e in history] == list(range(12, 2, -1))


@pytest.mark.asyncio
async def test_repeated_reads_are_identical(store):
    recorder = EventRecorder(store)
    for i in range(3):
        await recorder.record(i, "00:00:00.00")
    reader = HistoryReader(store)

    assert await reader.get_history() == await reader.get_history()


@pytest.mark.asyncio
async def test_storage_failure_becomes_read_error(broken_store):
    reader = HistoryReader(broken_store)

    with pytest.raises(ReadError) as exc_info:
        await reader.get_history()
    assert isinstance(exc_info.value.cause, StorageError)

    with pytest.raises(ReadError):
        await reader.get_latest()


@pytest.mark.asyncio
async def test_cached_history_refreshes_after_record(store, fake_redis):
    invalidator = RedisViewInvalidator(fake_redis, cache_key="arrivals:history", channel="arrivals:invalidate")
    recorder = EventRecorder(store, invalidator)
    reader = HistoryReader(store, cache=fake_redis, cache_key="arrivals:history")

    first = await recorder.record(1000, "00:00:00.00")
    assert await reader.get_history() == [first]
    assert "arrivals:history:1" in fake_redis.data

    second = await recorder.record(2000, "00:00:01.00", EventType.DEPARTURE)

    assert await reader.get_history() == [second, first]


@pytest.mark.asyncio
async def test_cache_hit_skips_store(store, fake_redis):
    event = await EventRecorder(store).record(1000, "00:00:00.00")
    reader = HistoryReader(store, cache=fake_redis, cache_key="arrivals:history")
    await reader.get_history()

    await store.dispose()

    assert await reader.get_history() == [event]


@pytest.mark.asyncio
async def test_broken_cache_falls_back_to_store(store):
    event = await EventRecorder(store).record(1000, "00:00:00.00")
    reader = HistoryReader(store, cache=FakeRedis(fail=True))

    assert await reader.get_history() == [event]


@pytest.mark.asyncio
async def test_malformed_cache_entry_ignored(store, fake_redis):
    event = await EventRecorder(store).record(1000, "00:00:00.00")
    fake_redis.data["arrivals:history:0"] = "not json"
    reader = HistoryReader(store, cache=fake_redis, cache_key="arrivals:history")

    assert await reader.get_history() == [event]


@pytest.mark.asyncio
async def test_record_during_uncached_read_is_not_hidden(store, fake_redis, monkeypatch):
    invalidator = RedisViewInvalidator(fake_redis, cache_key="arrivals:history", channel="arrivals:invalidate")
    recorder = EventRecorder(store, invalidator)
    reader = HistoryReader(store, cache=fake_redis, cache_key="arrivals:history")
    first = await recorder.record(1000, "00:00:00.00")

    list_recent = store.list_recent
    late = []

    async def list_then_record(limit):
        events = await list_recent(limit)
        # a write lands after the store read but before the cache write
        late.append(await recorder.record(2000, "00:00:01.00", EventType.DEPARTURE))
        return events

    monkeypatch.setattr(store, "list_recent", list_then_record)
    assert await reader.get_history() == [first]
    monkeypatch.setattr(store, "list_recent", list_recent)

    assert await reader.get_history() == [late[0], first]


@pytest.mark.asyncio
async def test_cache_entry_round_trips_through_adapter(store, fake_redis):
    event = await EventRecorder(store).record(1000, "00:01:23.45", EventType.DEPARTURE)
    reader = HistoryReader(store, cache=fake_redis, cache_key="arrivals:history")
    await reader.get_history()

    raw = fake_redis.data["arrivals:history:0"]

    assert _history_adapter.validate_json(raw) == [event]
    assert json.loads(raw)[0]["type"] == "DEPARTURE"

import pytest
import pytest_asyncio

from arrival_log.config import Settings
from arrival_log.store.event_store import EventStore


class FakeRedis:
    """In-memory stand-in for the handful of redis calls the service makes."""

    def __init__(self, fail: bool = False):
        self.data = {}
        self.published = []
        self.fail = fail

    def _check(self):
        if self.fail:
            raise ConnectionError("redis down")

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self._check()
        self.data[key] = value
        return True

    async def incr(self, key):
        self._check()
        value = int(self.data.get(key, 0)) + 1
        self.data[key] = str(value)
        return value

    async def delete(self, key):
        self._check()
        return 1 if self.data.pop(key, None) is not None else 0

    async def publish(self, channel, message):
        self._check()
        self.published.append((channel, message))
        return 0


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'arrivals.db'}"


@pytest.fixture
def settings(db_url):
    return Settings(database_url=db_url, log_dir=None, log_format="console")


@pytest_asyncio.fixture
async def store(db_url):
    store = EventStore.from_url(db_url)
    await store.create_tables()
    yield store
    await store.dispose()


@pytest_asyncio.fixture
async def broken_store(tmp_path):
    # Parent directory does not exist, so sqlite cannot open the file
    store = EventStore.from_url(f"sqlite:///{tmp_path / 'missing' / 'arrivals.db'}")
    yield store
    await store.dispose()


@pytest.fixture
def fake_redis():
    return FakeRedis()

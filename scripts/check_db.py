import asyncio
from arrival_log.config import get_settings
from arrival_log.store.event_store import EventStore

async def check():
    store = EventStore.from_url(get_settings().database_url)
    try:
        await store.ping()
        print("DB OK:", await store.describe())
    finally:
        await store.dispose()

asyncio.run(check())

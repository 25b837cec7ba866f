from arrival_log.config import get_settings
from arrival_log.store.event_store import EventStore
import asyncio

async def init():
    settings = get_settings()
    store = EventStore.from_url(settings.database_url)
    try:
        await store.create_tables()
        print("Created arrival_events in", settings.database_url)
    finally:
        await store.dispose()

asyncio.run(init())

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, Response, status

from arrival_log.actions import ArrivalActions
from arrival_log.config import Settings, get_settings
from arrival_log.errors import StorageError
from arrival_log.presentation.stopwatch import stopwatch_view
from arrival_log.schemas.arrival_schema import (
    HistoryResult,
    LatestResult,
    RecordRequest,
    RecordResult,
    StopwatchView,
)
from arrival_log.services.history import HistoryReader
from arrival_log.services.invalidation import NullInvalidator, RedisViewInvalidator
from arrival_log.services.recorder import EventRecorder
from arrival_log.store.event_store import EventStore
from arrival_log.utils.logger import get_logger, setup_logging
from arrival_log.utils.redis_client import create_redis_client

logger = get_logger(__name__)


def _lifespan_for(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = EventStore.from_url(settings.database_url, echo=settings.db_echo)
        await store.create_tables()

        redis_client = None
        invalidator = NullInvalidator()
        if settings.view_cache_enabled:
            redis_client = create_redis_client(settings)
            invalidator = RedisViewInvalidator(
                redis_client,
                cache_key=settings.view_cache_key,
                channel=settings.view_invalidation_channel,
            )

        reader = HistoryReader(
            store,
            limit=settings.history_limit,
            cache=redis_client,
            cache_key=settings.view_cache_key,
            cache_ttl_seconds=settings.view_cache_ttl_seconds,
        )
        app.state.store = store
        app.state.actions = ArrivalActions(EventRecorder(store, invalidator), reader)
        logger.info("Arrival log started", database=store.engine.dialect.name,
                    view_cache=settings.view_cache_enabled)
        try:
            yield
        finally:
            if redis_client is not None:
                await redis_client.aclose()
            await store.dispose()
            logger.info("Arrival log stopped")

    return lifespan


def get_actions(request: Request) -> ArrivalActions:
    return request.app.state.actions


def get_store(request: Request) -> EventStore:
    return request.app.state.store


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=_lifespan_for(settings),
    )

    @app.post("/api/arrivals", response_model=RecordResult)
    async def record_event(body: RecordRequest, response: Response,
                           actions: ArrivalActions = Depends(get_actions)):
        result = await actions.record(body.timestamp, body.formatted_time, body.type)
        if not result.success:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return result

    @app.get("/api/arrivals", response_model=HistoryResult)
    async def history(actions: ArrivalActions = Depends(get_actions)):
        return await actions.history()

    @app.get("/api/arrivals/latest", response_model=LatestResult)
    async def latest(actions: ArrivalActions = Depends(get_actions)):
        return await actions.latest()

    @app.get("/api/stopwatch", response_model=StopwatchView)
    async def stopwatch(actions: ArrivalActions = Depends(get_actions)):
        result = await actions.latest()
        return stopwatch_view(result.data, int(time.time() * 1000))

    @app.get("/health")
    async def health(response: Response, store: EventStore = Depends(get_store)):
        try:
            await store.ping()
        except StorageError as e:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            return {"status": "unavailable", "error": str(e)}
        return {"status": "ok"}

    return app


app = create_app()

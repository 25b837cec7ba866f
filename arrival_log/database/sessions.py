"""
Database engine and session management for SQLAlchemy with async support.

Nothing here is module-global: the event store builds its own engine at
startup and disposes of it at shutdown.
"""

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from arrival_log.utils.logger import get_logger

logger = get_logger(__name__)

# Convert sync URL to async URL if needed
def get_async_database_url(sync_url: str) -> str:
    if sync_url.startswith('sqlite:'):
        return sync_url.replace('sqlite:', 'sqlite+aiosqlite:', 1)
    elif sync_url.startswith('postgresql:'):
        return sync_url.replace('postgresql:', 'postgresql+asyncpg:', 1)
    else:
        return sync_url


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith('sqlite') and (url.endswith('://') or ':memory:' in url)


def build_async_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``database_url`` with per-dialect pooling."""
    url = get_async_database_url(database_url)

    engine_kwargs = {
        "echo": echo,
    }

    if _is_memory_sqlite(url):
        # One shared connection, otherwise every checkout sees an empty database
        engine_kwargs.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })
    elif url.startswith('sqlite'):
        pass
    else:
        # Default QueuePool mode: Connection pooling with parameters
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 3600,
            "max_overflow": 20,
            "pool_size": 10,
        })

    engine = create_async_engine(url, **engine_kwargs)

    if url.startswith('sqlite'):
        event.listen(engine.sync_engine, "connect", set_sqlite_pragma)

    logger.info("Async database engine created", dialect=engine.dialect.name)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def set_sqlite_pragma(dbapi_connection, connection_record):
    """Set SQLite pragmas for async connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()
    logger.debug("Set SQLite pragmas for async connection")


async def test_connection(engine: AsyncEngine) -> bool:
    """
    Test database connection asynchronously.

    Returns:
        bool: True if connection successful
    """
    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
            logger.info("Database connection test successful")
            return True
    except Exception as e:
        logger.error(f"Database connection test failed: {str(e)}")
        raise


async def get_db_info(engine: AsyncEngine) -> dict:
    """
    Get database information asynchronously.

    Returns:
        dict: Database information
    """
    db_url = engine.url.render_as_string(hide_password=True)
    async with engine.connect() as connection:
        if engine.dialect.name == "postgresql":
            result = await connection.execute(text("SELECT version()"))
            version = result.scalar()

            size_result = await connection.execute(
                text("SELECT pg_size_pretty(pg_database_size(current_database()))")
            )
            db_size = size_result.scalar()

            return {
                "engine": "PostgreSQL",
                "version": version,
                "database_name": engine.url.database,
                "database_size": db_size,
            }
        elif engine.dialect.name == "sqlite":
            result = await connection.execute(text("SELECT sqlite_version()"))
            version = result.scalar()

            return {
                "engine": "SQLite",
                "version": version,
                "database_url": db_url,
            }
        else:
            return {
                "engine": "Unknown",
                "database_url": db_url,
            }

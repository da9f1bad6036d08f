"""
Coffee Catalog Backend: Database Session Management
=====================================================

What:  Async SQLAlchemy engine, session factory, declarative base, the
       per-request session dependency and startup helpers.
How:   One engine (connection pool) per process. Each request receives its own
       AsyncSession which commits when the handler returns and rolls back when
       it raises.
Who:   Route dependencies (`get_db_session`), the lifespan handler
       (`wait_for_database`, `create_schema`, `dispose_engine`) and Alembic
       (`Base.metadata`).

Connection Pooling:
    pool_size / max_overflow come from settings; pool_pre_ping validates
    connections before use and pool_recycle drops them after an hour.
    SQLite URLs (used by the test suite) get the driver's default pool.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from catalog.config import settings
from catalog.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> Dict[str, Any]:
    """Pool options for the configured backend."""
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if url.startswith("sqlite"):
        return options
    options.update(
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
    )
    return options


# ── Engine ────────────────────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options(settings.database_url))

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: response serialization reads attributes after the
# commit in get_db_session, outside of any lazy-load context.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Shares a single metadata object, which Alembic reads for autogenerate and
    `create_schema()` uses for `create_all`.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides one database session per request.

    1. Creates a session from the factory
    2. Yields it to the request's dependencies and handler
    3. Commits if the handler returned normally
    4. Rolls back if anything raised, then re-raises for the error handlers
    5. Always closes the session, returning the connection to the pool

    Example:
        @router.get("/coffees")
        async def list_coffees(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
@retry(
    retry=retry_if_exception_type((OSError, SQLAlchemyError)),
    stop=stop_after_attempt(settings.db_connect_max_attempts),
    wait=wait_exponential_jitter(
        initial=settings.db_connect_min_wait,
        max=settings.db_connect_max_wait,
    ),
    before_sleep=before_sleep_log(logger, logging.WARNING),
)
async def _ping_database() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def wait_for_database() -> None:
    """
    Block startup until the database answers `SELECT 1`.

    Retries with exponential backoff and jitter (containers often start
    before PostgreSQL accepts connections).

    Raises:
        DatabaseError: the database stayed unreachable for every attempt.
    """
    try:
        await _ping_database()
    except RetryError as e:
        last = e.last_attempt.exception()
        logger.error(
            "Database unreachable after %d attempts: %s",
            settings.db_connect_max_attempts,
            last,
        )
        raise DatabaseError(
            message="Database is unreachable.",
            context={
                "attempts": settings.db_connect_max_attempts,
                "error_type": type(last).__name__,
            },
        ) from last
    logger.info("Database connection verified")


async def create_schema() -> None:
    """Create all tables known to `Base.metadata` that do not exist yet."""
    # Model modules register their tables on import
    import catalog.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured (%d tables)", len(Base.metadata.tables))


async def dispose_engine() -> None:
    """Close every pooled connection. Called on application shutdown."""
    await engine.dispose()

"""
SimpleBlog Backend — Database Engine & Session Management
===========================================================

What:  Async SQLAlchemy engine factory, session factory, connectivity probe,
       and the per-request session dependency.
How:   The application factory builds one engine per app and stores it (and
       its session factory) on `app.state`. Route dependencies open one
       session per request from that factory; the lifespan disposes the
       engine at shutdown.
Who:   main.py (lifecycle), dependencies.py (per request), the CLI and tests.

Connection Pooling:
    PostgreSQL (asyncpg): pool_size / max_overflow / pool_pre_ping from
    settings, pool_recycle=3600, connect timeout passed to asyncpg.
    SQLite (aiosqlite, tests and local runs): SQLAlchemy's default pool for
    the dialect; pool sizing arguments are not applicable.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from starlette.requests import Request
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from simpleblog.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object with Alembic's env.py so migrations
    and the ORM describe the same schema.
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def create_engine(settings: Settings) -> AsyncEngine:
    """
    Build the async engine for the configured store.

    Pool sizing and the connect timeout only apply to server databases;
    the sqlite dialect rejects them.
    """
    kwargs = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
            connect_args={"timeout": settings.db_connect_timeout},
        )
    return create_async_engine(settings.database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False keeps returned Post objects readable after the
    store commits, so templates can render them without a new query.
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


def describe_url(database_url: str) -> str:
    """Connection URL with the password masked, for log lines."""
    return make_url(database_url).render_as_string(hide_password=True)


# ── Connectivity ──────────────────────────────────────────────────────────
async def ping(engine: AsyncEngine) -> None:
    """Run a trivial statement; raises whatever the driver raises."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def ping_with_retry(engine: AsyncEngine, settings: Settings) -> bool:
    """
    Probe the store at startup with exponential backoff.

    Returns True once a ping succeeds, False after the final attempt fails.
    A False result is logged by the caller; the app keeps running and the
    driver reconnects on the next request.
    """
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(settings.store_ping_attempts),
        wait=wait_exponential(
            multiplier=settings.store_ping_min_wait,
            max=settings.store_ping_max_wait,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    try:
        async for attempt in retrying:
            with attempt:
                await ping(engine)
    except Exception as e:
        logger.error(
            "Store unreachable at %s: %s",
            describe_url(str(engine.url)),
            str(e),
        )
        return False
    return True


async def create_tables(engine: AsyncEngine) -> None:
    """
    Create all tables known to Base.metadata.

    Used by tests and the `init-db` CLI command for sqlite. Server
    databases are migrated with Alembic instead.
    """
    # Register models with Base.metadata
    from simpleblog.models import post  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency providing one database session per request.

    PostStore commits each write itself; this dependency only guarantees
    that a failed request leaves no open transaction behind and that the
    connection returns to the pool.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine(engine: AsyncEngine) -> None:
    """Close all pooled connections. Called last during shutdown."""
    await engine.dispose()
    logger.info("Store disconnected")

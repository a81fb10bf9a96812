"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

The engine is built from Settings by the app factory and kept on the
AppContext; get_db() pulls the session factory from there instead of
importing a global.
"""

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from marketplace.config import Settings
from marketplace.db.models import Base


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the engine for settings.database_url.

    SQLite gets a single shared connection when in-memory (otherwise every
    connection would see its own empty database). Server databases get a
    connection pool: min 5, max 20 connections.
    """
    url = make_url(settings.database_url)
    if url.get_backend_name() == "sqlite":
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs = {"pool_size": 5, "max_overflow": 15}
    return create_async_engine(settings.database_url, echo=settings.debug, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Session factory — each request gets its own session.
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    """Create any missing tables (no migrations — dev and tests)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db(request: Request) -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    factory = request.app.state.ctx.session_factory
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()

"""Async database engine and session management.

SQLite (aiosqlite) is the default for local work and tests. Any other
async URL, e.g. ``postgresql+asyncpg://``, gets a small connection pool.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from rigfinder.app.config import get_settings


class Base(DeclarativeBase):
    """Declarative base for the marketplace tables."""
    pass


settings = get_settings()

_is_sqlite = settings.database_url.startswith("sqlite")


def _engine_options(is_sqlite: bool) -> dict:
    if is_sqlite:
        # Contact-event bursts queue on the single writer instead of failing fast
        return {"connect_args": {"check_same_thread": False, "timeout": 30}}
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


engine = create_async_engine(settings.database_url, echo=False, **_engine_options(_is_sqlite))

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency: one session per request."""
    async with async_session() as session:
        yield session


async def init_db():
    """Create missing tables. Existing tables are left untouched."""
    import rigfinder.domain.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if _is_sqlite:
        # WAL lets search reads proceed while the ledger is being written
        async with engine.begin() as conn:
            await conn.execute(text("PRAGMA journal_mode=WAL"))
            await conn.execute(text("PRAGMA busy_timeout=30000"))

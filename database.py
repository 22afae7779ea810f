from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import Pool, StaticPool

from config import settings


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str, poolclass: Optional[type[Pool]] = None) -> AsyncEngine:
    """
    Async engine for the application store. SQLite defaults to a StaticPool
    so the file-less ``:memory:`` case keeps one shared connection; pass a
    poolclass to override (tests use NullPool).
    """
    kwargs = {"echo": settings.debug}
    if database_url.split(":")[0].lower().startswith("sqlite"):
        kwargs["poolclass"] = poolclass or StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    elif poolclass is not None:
        kwargs["poolclass"] = poolclass
    return create_async_engine(database_url, **kwargs)


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: the store commits per mutation and callers keep using the row
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@asynccontextmanager
async def session_scope(factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Yield one session; commit when the consumer finishes, roll back if it raised."""
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


engine = build_engine(settings.database_url)
AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with session_scope(AsyncSessionLocal) as session:
        yield session


async def init_db() -> None:
    import models  # noqa: F401  (registers loan_applications on Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

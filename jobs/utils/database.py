"""Shared database setup for tasks."""
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.config.database import create_engine
from app.config.settings import settings


def create_task_engine(database_url: str | None = None) -> AsyncEngine:
    """Create an engine for use inside a task's own event loop."""
    url = database_url or settings.database_url
    if url.startswith("sqlite") and (url.endswith("://") or ":memory:" in url):
        return create_engine(url, echo=False)
    return create_async_engine(url, echo=False, poolclass=NullPool)


def create_task_session_maker(engine: AsyncEngine | None = None) -> async_sessionmaker[AsyncSession]:
    """Create a session maker for tasks."""
    if engine is None:
        engine = create_task_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

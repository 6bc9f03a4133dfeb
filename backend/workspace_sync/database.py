"""Async SQLite engine shared by the record store and the HTTP layer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from workspace_sync.config import settings
from workspace_sync.models.base import Base

logger = logging.getLogger(__name__)


def _apply_pragmas(dbapi_conn, _connection_record):
    """Per-connection SQLite setup; foreign keys drive the workspace cascades."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


db_path = Path(settings.database_path)
db_path.parent.mkdir(parents=True, exist_ok=True)

engine = create_async_engine(
    f"sqlite+aiosqlite:///{db_path}",
    echo=settings.debug and settings.log_level == "DEBUG",
)
event.listen(engine.sync_engine, "connect", _apply_pragmas)

# Sync tasks are read back after commit, so keep loaded state
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request."""
    async with async_session() as session:
        yield session


async def init_db() -> None:
    """Create missing tables for workspaces, file records and sync tasks."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema ready in %s", db_path)

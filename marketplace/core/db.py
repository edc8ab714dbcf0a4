from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence

from fastapi import Request
from sqlalchemy import Table
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from marketplace.models.base import Base


log = logging.getLogger(__name__)


def sqlite_url(db_path: str) -> str:
    return f"sqlite+aiosqlite:///{db_path}"


class Storage:
    """
    Long-lived storage handle owned by one service.

    Opened in the app lifespan (or explicitly by tests) and disposed at
    shutdown. Only the tables passed in are created, each service keeps its
    own database file.
    """

    def __init__(self, db_path: str, tables: Sequence[Table]):
        self.db_path = db_path
        self._tables = list(tables)
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("storage is not open")
        return self._engine

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        if self._engine is not None:
            return

        engine = create_async_engine(sqlite_url(self.db_path), future=True)
        try:
            # No migrations: create the table if it does not exist yet
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all, tables=self._tables)
        except Exception:
            await engine.dispose()
            raise

        self._engine = engine
        self._sessionmaker = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
        log.info("storage: opened %s", self.db_path)

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        log.info("storage: closed %s", self.db_path)

    def session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise RuntimeError("storage is not open")
        return self._sessionmaker()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    storage: Storage = request.app.state.storage
    async with storage.session() as session:
        yield session

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine

from .base import Base
from .config import Settings

log = logging.getLogger("db")


class Database:
    """Process-wide engine + session factory, created once at startup and disposed at shutdown."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: AsyncEngine | None = None
        self.sessionmaker: async_sessionmaker[AsyncSession] | None = None

    async def connect(self, url: str | URL) -> None:
        if self.engine is not None:
            return
        is_sqlite = str(url).startswith("sqlite")
        kwargs: dict = {"pool_pre_ping": not is_sqlite}
        if not is_sqlite:
            kwargs["pool_size"] = self.settings.DB_POOL_SIZE
            kwargs["pool_recycle"] = 1800
            kwargs["connect_args"] = {"timeout": self.settings.DB_CONNECT_TIMEOUT_SECONDS}
        self.engine = create_async_engine(url, **kwargs)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)
        log.info("Database engine initialised (dialect=%s)", self.engine.dialect.name)

    async def create_all(self) -> None:
        # dev/test only; deployed databases are created from the SQL schema
        from media_platform.modules.users.models import User  # noqa: F401
        from media_platform.modules.media.models import Media  # noqa: F401
        from media_platform.modules.shares.models import SharedMedia  # noqa: F401

        async with self._engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        async with self._engine().connect() as conn:
            await conn.execute(text("SELECT 1"))

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self.sessionmaker is None:
            raise RuntimeError("Database not initialised. Call connect() first.")
        async with self.sessionmaker() as session:
            yield session

    async def dispose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            self.sessionmaker = None
            log.info("Database engine disposed")

    def _engine(self) -> AsyncEngine:
        if self.engine is None:
            raise RuntimeError("Database not initialised. Call connect() first.")
        return self.engine

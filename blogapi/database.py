import logging
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from .config import normalize_database_url
from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the async engine and session factory for one process."""

    def __init__(self, url: str, **engine_kwargs):
        self.url = normalize_database_url(url)
        engine_kwargs.setdefault('echo', False)
        self.engine = create_async_engine(self.url, **engine_kwargs)
        self.sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @asynccontextmanager
    async def session(self):
        async with self.sessionmaker() as session:
            yield session

    async def create_all(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self):
        await self.engine.dispose()
        logger.info('Database engine disposed')

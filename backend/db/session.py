import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.config import database_url, service_database_url
from db.models import Base

logger = logging.getLogger(__name__)


class Database:
    """One engine plus its session factory.

    The app talks to the store through two of these: ``user_db`` for
    request-scoped reads and writes, and ``service_db`` with elevated
    credentials for analysis write-back.
    """

    def __init__(self, url_getter):
        self._url_getter = url_getter
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self.configure(self._url_getter())
        return self._engine

    def configure(self, url: str) -> None:
        self._engine = create_async_engine(url, echo=False)
        self._sessionmaker = async_sessionmaker(self._engine, class_=AsyncSession, expire_on_commit=False)

    def session(self) -> AsyncSession:
        if self._sessionmaker is None:
            self.configure(self._url_getter())
        return self._sessionmaker()

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None


user_db = Database(database_url)
service_db = Database(service_database_url)


async def init_db():
    async with user_db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready")


async def close_db():
    await user_db.dispose()
    await service_db.dispose()


async def get_db():
    async with user_db.session() as session:
        yield session

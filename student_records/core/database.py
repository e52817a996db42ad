from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncAttrs
from sqlalchemy.orm import DeclarativeBase

from student_records.core.config import settings
from student_records.core.logger import logger


class Base(AsyncAttrs, DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with FK enforcement off; ON DELETE CASCADE depends on it.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Клиент хранилища: владеет движком и фабрикой сессий.

    Создаётся явно при старте приложения и передаётся обработчикам
    через зависимость get_db, поэтому в тестах его можно подменить.
    """

    def __init__(self, url: str = None, echo: bool = None):
        self.url = url or settings.DATABASE_URL
        engine_kwargs = {"echo": settings.DB_ECHO if echo is None else echo}
        if not self.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
            )

        self.engine = create_async_engine(url=self.url, **engine_kwargs)
        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession | Any, Any]:
    database: Database = request.app.state.db
    async with database.session_factory() as session:
        logger.debug("Database session opened")
        try:
            yield session
        finally:
            logger.debug("Database session closed")

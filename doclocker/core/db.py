from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from doclocker.core.config import Settings

# Базовый класс для моделей
Base = declarative_base()


class Database:
    """Асинхронный движок и фабрика сессий, создаются при старте приложения"""

    def __init__(self, settings: Settings, engine: AsyncEngine = None):
        self.engine = engine or create_async_engine(settings.database_url, future=True, echo=settings.db_echo)
        self.session_factory = async_sessionmaker(bind=self.engine, class_=AsyncSession, expire_on_commit=False)

    async def create_all(self) -> None:
        """Создание таблиц для всех зарегистрированных моделей"""
        import doclocker.db.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


# Функция для dependency injection в FastAPI
async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        yield session

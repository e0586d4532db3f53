from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from .settings import DatabaseSettings

Base = declarative_base()


def build_engine(settings: DatabaseSettings) -> AsyncEngine:
    return create_async_engine(settings.database_url, echo=settings.echo)


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_tables(engine: AsyncEngine) -> None:
    # IMPORTANT: import models so they register with Base
    from services.order_service import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

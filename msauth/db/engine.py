"""Async SQLAlchemy engine, declarative base and schema creation."""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class StoreBase(DeclarativeBase):
    """Tables holding the authority's persisted state."""


def build_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(database_url)


async def create_schema(engine: AsyncEngine) -> None:
    """Create any missing msauth tables."""
    async with engine.begin() as conn:
        await conn.run_sync(StoreBase.metadata.create_all)

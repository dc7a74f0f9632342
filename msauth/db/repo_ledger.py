"""Database operations for the revocation ledger and client registry."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from msauth.db.models_ledger import RegisteredClientEntity, RevokedTokenEntity


async def get_revocations(session: AsyncSession) -> list[RevokedTokenEntity]:
    """Return ledger entries in insertion order."""
    stmt = select(RevokedTokenEntity).order_by(RevokedTokenEntity.id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def replace_revocations(
    session: AsyncSession, entities: list[RevokedTokenEntity]
) -> None:
    await session.execute(delete(RevokedTokenEntity))
    session.add_all(entities)
    await session.flush()


async def get_clients(session: AsyncSession) -> list[RegisteredClientEntity]:
    stmt = select(RegisteredClientEntity).order_by(RegisteredClientEntity.name)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def replace_clients(
    session: AsyncSession, entities: list[RegisteredClientEntity]
) -> None:
    await session.execute(delete(RegisteredClientEntity))
    session.add_all(entities)
    await session.flush()

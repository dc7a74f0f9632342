"""Database operations for signing key management."""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from msauth.db.models_keys import SigningKeyEntity


async def get_all_keys(session: AsyncSession) -> list[SigningKeyEntity]:
    """Return every stored key, oldest first."""
    stmt = select(SigningKeyEntity).order_by(SigningKeyEntity.position)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def replace_keys(
    session: AsyncSession, entities: list[SigningKeyEntity]
) -> None:
    """Swap the stored ring for ``entities``."""
    await session.execute(delete(SigningKeyEntity))
    session.add_all(entities)
    await session.flush()

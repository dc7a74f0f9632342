"""Relational storage over async SQLAlchemy."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from cryptography.fernet import InvalidToken
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from msauth.authority.types import ClientMap, ClientRecord, RevocationEntry
from msauth.core.errors import StorageError
from msauth.crypto.keys import decrypt_private_key, encrypt_private_key
from msauth.crypto.types import KeySet, SigningKey
from msauth.db.engine import create_schema
from msauth.db.models_keys import SigningKeyEntity
from msauth.db.models_ledger import RegisteredClientEntity, RevokedTokenEntity
from msauth.db.repo_keys import get_all_keys, replace_keys
from msauth.db.repo_ledger import (
    get_clients,
    get_revocations,
    replace_clients,
    replace_revocations,
)
from msauth.storage.interface import Storage


class SqlStorage(Storage):
    """Stores each collection in its own table; saves replace the table."""

    def __init__(
        self,
        engine: AsyncEngine,
        encryption_key: str = "",
    ) -> None:
        self._engine = engine
        self._factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )
        self._encryption_key = encryption_key
        self._schema_ready = False

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            if not self._schema_ready:
                await create_schema(self._engine)
                self._schema_ready = True
            async with self._factory() as session:
                try:
                    yield session
                    await session.commit()
                except Exception:
                    await session.rollback()
                    raise
        except SQLAlchemyError as exc:
            raise StorageError(f"database error: {exc}") from exc

    def _to_entity(self, key: SigningKey, position: int) -> SigningKeyEntity:
        private_pem = key.private_key_pem
        if private_pem is not None and self._encryption_key:
            private_pem = encrypt_private_key(private_pem, self._encryption_key)
        return SigningKeyEntity(
            kid=key.kid,
            position=position,
            algorithm=key.algorithm,
            crv_or_size=str(key.crv_or_size),
            alg=key.alg,
            private_key_pem=private_pem,
            public_key_pem=key.public_key_pem,
            created_at=key.created_at,
        )

    def _from_entity(self, entity: SigningKeyEntity) -> SigningKey:
        private_pem = entity.private_key_pem
        if private_pem is not None and self._encryption_key:
            try:
                private_pem = decrypt_private_key(private_pem, self._encryption_key)
            except InvalidToken as exc:
                raise StorageError(f"cannot decrypt key {entity.kid}") from exc
        size = entity.crv_or_size
        return SigningKey(
            kid=entity.kid,
            algorithm=entity.algorithm,
            crv_or_size=int(size) if size.isdigit() else size,
            alg=entity.alg,
            private_key_pem=private_pem,
            public_key_pem=entity.public_key_pem,
            created_at=entity.created_at,
        )

    async def load_keys(self) -> KeySet | None:
        async with self._session() as session:
            entities = await get_all_keys(session)
        if not entities:
            return None
        return KeySet(keys=[self._from_entity(e) for e in entities])

    async def save_keys(self, keys: KeySet) -> None:
        entities = [self._to_entity(k, i) for i, k in enumerate(keys.keys)]
        async with self._session() as session:
            await replace_keys(session, entities)

    async def load_revocation_list(self) -> list[RevocationEntry] | None:
        async with self._session() as session:
            entities = await get_revocations(session)
        if not entities:
            return None
        return [RevocationEntry(jti=e.jti, exp=e.exp, **e.extra) for e in entities]

    async def save_revocation_list(self, entries: list[RevocationEntry]) -> None:
        entities = [
            RevokedTokenEntity(jti=e.jti, exp=e.exp, extra=dict(e.model_extra or {}))
            for e in entries
        ]
        async with self._session() as session:
            await replace_revocations(session, entities)

    async def load_clients(self) -> ClientMap | None:
        async with self._session() as session:
            entities = await get_clients(session)
        if not entities:
            return None
        return {e.name: ClientRecord(name=e.name, url=e.url) for e in entities}

    async def save_clients(self, clients: ClientMap) -> None:
        entities = [
            RegisteredClientEntity(name=rec.name, url=rec.url)
            for rec in clients.values()
        ]
        async with self._session() as session:
            await replace_clients(session, entities)

    async def dispose(self) -> None:
        await self._engine.dispose()

"""The authority: owns the key ring, ledger and registry of one process."""

import asyncio
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from msauth.authority.key_ring import KeyGenerator, KeyRing
from msauth.authority.registry import (
    ClientRegistry,
    FailureCollector,
    FailureHandler,
    SyncReport,
)
from msauth.authority.revocation import RevocationLedger
from msauth.authority.scheduler import RotationScheduler
from msauth.authority.token_service import TokenService
from msauth.authority.types import (
    ClientMap,
    RevocationEntry,
    RevocationExtractor,
    SignOverrides,
    Snapshot,
    TokenType,
    VerifyOverrides,
)
from msauth.core.errors import StorageError
from msauth.core.logging import get_logger
from msauth.core.settings import AuthoritySettings
from msauth.crypto.keys import generate_signing_key
from msauth.crypto.types import JWKSResponse, TokenPayload
from msauth.storage.interface import Storage
from msauth.sync.transport import SyncTransport

P = TypeVar("P", bound=TokenPayload)

logger = get_logger("msauth.authority")


class Authority:
    """Issues, verifies, revokes and rotates service credentials.

    All state lives on the instance. Collections handed out by getters are
    copies. ``init`` loads persisted state and starts the rotation
    scheduler; ``shutdown`` stops it.
    """

    def __init__(
        self,
        settings: AuthoritySettings | None = None,
        storage: Storage | None = None,
        transport: SyncTransport | None = None,
        generator: KeyGenerator = generate_signing_key,
    ) -> None:
        self.settings = settings or AuthoritySettings()
        self._storage = storage
        self._owns_transport = transport is None
        self._transport = transport or SyncTransport(
            timeout=self.settings.sync_timeout
        )
        self._ring = KeyRing(
            algorithm=self.settings.algorithm,
            crv_or_size=self.settings.key_size,
            amount=self.settings.amount,
            sign_skip=self.settings.sign_skip,
            generator=generator,
        )
        self._ledger = RevocationLedger(leeway=self.settings.leeway)
        self._registry = ClientRegistry()
        self._tokens = TokenService(self._ring, self._ledger, self.settings)
        self._scheduler = RotationScheduler(self.rotate, self.settings.rotation_cron)
        self._rotation_lock = asyncio.Lock()
        self._ledger_save_lock = asyncio.Lock()
        self._clients_save_lock = asyncio.Lock()

    @property
    def ring(self) -> KeyRing:
        return self._ring

    @property
    def scheduler(self) -> RotationScheduler:
        return self._scheduler

    # lifecycle

    async def init(self, start_scheduler: bool = True) -> None:
        """Load persisted state, fill the ring and start rotating."""
        await self._load_from_storage()
        self._ring.fill()
        await self._save_keys()
        if start_scheduler:
            self._scheduler.start()

    async def shutdown(self) -> None:
        self._scheduler.shutdown()
        if self._owns_transport:
            await self._transport.aclose()

    async def _load_from_storage(self) -> None:
        if self._storage is None:
            return
        storage = self._storage
        try:
            keyset = await storage.load_keys()
        except StorageError as exc:
            logger.warning("loading keys failed, starting empty", error=str(exc))
            keyset = None
        if keyset is not None:
            self._ring.replace(keyset)
        try:
            entries = await storage.load_revocation_list()
        except StorageError as exc:
            logger.warning("loading revocation list failed", error=str(exc))
            entries = None
        self._ledger.replace(entries or [])
        try:
            clients = await storage.load_clients()
        except StorageError as exc:
            logger.warning("loading clients failed", error=str(exc))
            clients = None
        self._registry.replace(clients or {})

    async def _save_keys(self) -> None:
        if self._storage is not None:
            await self._storage.save_keys(self._ring.to_keyset())

    async def _save_revocation_list(self) -> None:
        if self._storage is None:
            return
        # each save writes the ledger as of the moment it holds the lock
        async with self._ledger_save_lock:
            self._ledger.prune()
            await self._storage.save_revocation_list(self._ledger.entries())

    async def _save_clients(self) -> None:
        if self._storage is None:
            return
        async with self._clients_save_lock:
            await self._storage.save_clients(self._registry.clients())

    # read-only views

    def jwks(self) -> JWKSResponse:
        """Current public key set."""
        return self._ring.to_jwks()

    def revocation_list(self) -> list[RevocationEntry]:
        return self._ledger.entries()

    def clients(self) -> ClientMap:
        return self._registry.clients()

    def snapshot(self) -> Snapshot:
        """Public keys plus revocation list, as sent to clients."""
        return Snapshot(
            keys=self.jwks().keys, revocation_list=self.revocation_list()
        )

    # administrative operations

    async def register_client(self, name: str, url: str) -> Snapshot:
        """Register a consumer and hand back its bootstrap snapshot."""
        self._registry.register(name, url)
        await self._save_clients()
        return self.snapshot()

    async def sync(self, failure_handler: FailureHandler) -> SyncReport:
        """Push the current snapshot to every registered client."""
        return await self._registry.sync(
            self.snapshot(), self._transport, failure_handler
        )

    async def rotate(
        self, failure_handler: FailureHandler | None = None
    ) -> JWKSResponse:
        """Rotate one key in, persist, and push the new key set to clients.

        With no handler, any client failure raises ``SyncError`` once every
        client has been tried. The rotation itself is kept either way.
        """
        async with self._rotation_lock:
            self._ring.rotate()
            save_error: StorageError | None = None
            try:
                await self._save_keys()
            except StorageError as exc:
                save_error = exc
            collector = FailureCollector()
            await self.sync(failure_handler or collector)
            if save_error is not None:
                raise save_error
            if failure_handler is None:
                collector.raise_if_failed()
            return self.jwks()

    async def revoke_key(self, kid: str) -> None:
        """Retire one key; tokens signed with it stop verifying."""
        async with self._rotation_lock:
            self._ring.retire(kid)
            await self._save_keys()

    async def reset(self) -> None:
        """Replace every key; all issued tokens stop verifying."""
        async with self._rotation_lock:
            self._ring.reset()
            await self._save_keys()

    async def revoke_token(
        self, token: str, extractor: RevocationExtractor | None = None
    ) -> RevocationEntry:
        entry = self._tokens.revoke(token, extractor)
        await self._save_revocation_list()
        return entry

    # token operations

    def issue(
        self,
        token_type: TokenType,
        payload: Mapping[str, Any] | BaseModel,
        overrides: SignOverrides | None = None,
    ) -> str:
        return self._tokens.issue(token_type, payload, overrides)

    def verify(
        self,
        token_type: TokenType,
        token: str,
        overrides: VerifyOverrides | None = None,
        model: type[P] = TokenPayload,  # type: ignore[assignment]
    ) -> P:
        return self._tokens.verify(token_type, token, overrides, model)

"""Persistence contract for keys, revocations and registered clients."""

from abc import ABC, abstractmethod

from msauth.authority.types import ClientMap, RevocationEntry
from msauth.crypto.types import KeySet


class Storage(ABC):
    """Durable load/save of the authority's state.

    Loads return ``None`` when nothing has been stored yet. Backends wrap
    their own failures in ``StorageError``.
    """

    @abstractmethod
    async def load_keys(self) -> KeySet | None: ...

    @abstractmethod
    async def save_keys(self, keys: KeySet) -> None: ...

    @abstractmethod
    async def load_revocation_list(self) -> list[RevocationEntry] | None: ...

    @abstractmethod
    async def save_revocation_list(self, entries: list[RevocationEntry]) -> None: ...

    @abstractmethod
    async def load_clients(self) -> ClientMap | None: ...

    @abstractmethod
    async def save_clients(self, clients: ClientMap) -> None: ...

"""In-process storage for tests and single-instance deployments."""

from msauth.authority.types import ClientMap, RevocationEntry
from msauth.crypto.types import KeySet
from msauth.storage.interface import Storage


class MemoryStorage(Storage):
    """Keeps deep copies of whatever was last saved."""

    def __init__(self) -> None:
        self.keys: KeySet | None = None
        self.revocation_list: list[RevocationEntry] | None = None
        self.clients: ClientMap | None = None

    async def load_keys(self) -> KeySet | None:
        return self.keys.model_copy(deep=True) if self.keys else None

    async def save_keys(self, keys: KeySet) -> None:
        self.keys = keys.model_copy(deep=True)

    async def load_revocation_list(self) -> list[RevocationEntry] | None:
        if self.revocation_list is None:
            return None
        return [entry.model_copy() for entry in self.revocation_list]

    async def save_revocation_list(self, entries: list[RevocationEntry]) -> None:
        self.revocation_list = [entry.model_copy() for entry in entries]

    async def load_clients(self) -> ClientMap | None:
        if self.clients is None:
            return None
        return {name: rec.model_copy() for name, rec in self.clients.items()}

    async def save_clients(self, clients: ClientMap) -> None:
        self.clients = {name: rec.model_copy() for name, rec in clients.items()}

"""JSON file storage in a local directory."""

import json
from typing import Any

import anyio
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from msauth.authority.types import ClientMap, RevocationEntry
from msauth.core.errors import StorageError
from msauth.core.logging import get_logger
from msauth.core.settings import StorageSettings
from msauth.crypto.types import KeySet
from msauth.storage.interface import Storage

_revocations = TypeAdapter(list[RevocationEntry])
_clients = TypeAdapter(ClientMap)

logger = get_logger("msauth.storage.file")


class FileStorage(Storage):
    """One JSON file each for keys, revocation list and clients."""

    def __init__(self, settings: StorageSettings | None = None) -> None:
        settings = settings or StorageSettings()
        self._dir = anyio.Path(settings.disk_path)
        self.keys_path = self._dir / settings.keys_filename
        self.revocation_path = self._dir / settings.revocation_filename
        self.clients_path = self._dir / settings.clients_filename

    async def _load(self, path: anyio.Path) -> Any | None:
        logger.debug("loading from file", path=str(path))
        try:
            if not await path.exists():
                return None
            text = await path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"cannot read {path}: {exc}") from exc
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise StorageError(f"{path} is not valid JSON") from exc

    async def _save(self, path: anyio.Path, data: bytes) -> None:
        logger.debug("saving to file", path=str(path))
        try:
            await self._dir.mkdir(parents=True, exist_ok=True)
            await path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"cannot write {path}: {exc}") from exc

    async def load_keys(self) -> KeySet | None:
        raw = await self._load(self.keys_path)
        if raw is None:
            return None
        try:
            return KeySet.model_validate(raw)
        except PydanticValidationError as exc:
            raise StorageError(f"{self.keys_path} holds no key set") from exc

    async def save_keys(self, keys: KeySet) -> None:
        await self._save(self.keys_path, keys.model_dump_json().encode())

    async def load_revocation_list(self) -> list[RevocationEntry] | None:
        raw = await self._load(self.revocation_path)
        if raw is None:
            return None
        try:
            return _revocations.validate_python(raw)
        except PydanticValidationError as exc:
            raise StorageError(f"{self.revocation_path} is malformed") from exc

    async def save_revocation_list(self, entries: list[RevocationEntry]) -> None:
        await self._save(self.revocation_path, _revocations.dump_json(entries))

    async def load_clients(self) -> ClientMap | None:
        raw = await self._load(self.clients_path)
        if raw is None:
            return None
        try:
            return _clients.validate_python(raw)
        except PydanticValidationError as exc:
            raise StorageError(f"{self.clients_path} is malformed") from exc

    async def save_clients(self, clients: ClientMap) -> None:
        await self._save(self.clients_path, _clients.dump_json(clients))

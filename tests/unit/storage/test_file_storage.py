"""Tests for the JSON file storage backend."""

import json
from pathlib import Path

import pytest

from msauth.authority.types import ClientRecord, RevocationEntry
from msauth.core.errors import StorageError
from msauth.core.settings import StorageSettings
from msauth.crypto.keys import generate_signing_key
from msauth.crypto.types import KeySet
from msauth.storage.file import FileStorage


@pytest.fixture
def file_storage(tmp_path: Path) -> FileStorage:
    return FileStorage(StorageSettings(disk_path=str(tmp_path / "authcerts")))


class TestFileStorage:
    """Tests for FileStorage."""

    async def test_missing_files_load_none(self, file_storage: FileStorage) -> None:
        assert await file_storage.load_keys() is None
        assert await file_storage.load_revocation_list() is None
        assert await file_storage.load_clients() is None

    async def test_default_file_names(self, tmp_path: Path) -> None:
        storage = FileStorage(StorageSettings(disk_path=str(tmp_path)))
        await storage.save_clients({"svc1": ClientRecord(name="svc1", url="http://x")})
        names = sorted(p.name for p in tmp_path.iterdir())
        assert names == [".clients.json"]
        assert str(storage.keys_path).endswith(".keys.json")
        assert str(storage.revocation_path).endswith(".revocList.json")

    async def test_keys_survive_restart(
        self, file_storage: FileStorage, tmp_path: Path
    ) -> None:
        keys = [generate_signing_key("EC", "P-256") for _ in range(3)]
        await file_storage.save_keys(KeySet(keys=keys))

        reopened = FileStorage(StorageSettings(disk_path=str(tmp_path / "authcerts")))
        loaded = await reopened.load_keys()
        assert loaded is not None
        assert [k.kid for k in loaded.keys] == [k.kid for k in keys]
        assert loaded.keys[0].private_key_pem == keys[0].private_key_pem

    async def test_revocations_keep_extra_fields(
        self, file_storage: FileStorage
    ) -> None:
        entry = RevocationEntry(jti="a", exp=10, sub="user-1")
        await file_storage.save_revocation_list([entry])
        loaded = await file_storage.load_revocation_list()
        assert loaded is not None
        assert loaded[0].jti == "a"
        assert loaded[0].model_extra == {"sub": "user-1"}

    async def test_clients_written_as_object(self, file_storage: FileStorage) -> None:
        await file_storage.save_clients(
            {"svc1": ClientRecord(name="svc1", url="http://svc1")}
        )
        raw = json.loads(Path(str(file_storage.clients_path)).read_text())
        assert raw == {"svc1": {"name": "svc1", "url": "http://svc1"}}

    async def test_empty_file_loads_none(self, file_storage: FileStorage) -> None:
        path = Path(str(file_storage.keys_path))
        path.parent.mkdir(parents=True)
        path.write_text("")
        assert await file_storage.load_keys() is None

    async def test_malformed_json(self, file_storage: FileStorage) -> None:
        path = Path(str(file_storage.revocation_path))
        path.parent.mkdir(parents=True)
        path.write_text("{not json")
        with pytest.raises(StorageError):
            await file_storage.load_revocation_list()

    async def test_wrong_shape(self, file_storage: FileStorage) -> None:
        path = Path(str(file_storage.keys_path))
        path.parent.mkdir(parents=True)
        path.write_text('{"keys": [{"kid": 1}]}')
        with pytest.raises(StorageError):
            await file_storage.load_keys()

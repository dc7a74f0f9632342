"""Select a storage backend from settings."""

from msauth.core.errors import ConfigError
from msauth.core.settings import StorageSettings
from msauth.db.engine import build_engine
from msauth.storage.file import FileStorage
from msauth.storage.interface import Storage
from msauth.storage.memory import MemoryStorage
from msauth.storage.sql import SqlStorage


def build_storage(settings: StorageSettings) -> Storage | None:
    """Return the configured backend, or ``None`` for purely in-memory state."""
    backend = settings.backend.lower()
    if backend == "none":
        return None
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        return FileStorage(settings)
    if backend == "sql":
        return SqlStorage(
            build_engine(settings.database_url),
            encryption_key=settings.encryption_key,
        )
    raise ConfigError(f"unknown storage backend {settings.backend!r}")

"""Signing-key authority for service-to-service authentication."""

from msauth.authority.service import Authority
from msauth.authority.types import (
    ClientRecord,
    RevocationEntry,
    SignOverrides,
    Snapshot,
    TokenType,
    VerifyOverrides,
)
from msauth.client.verifier import SnapshotVerifier
from msauth.core.errors import (
    AuthError,
    ConfigError,
    KeyNotFound,
    NoSigningKeyAvailable,
    RevokedError,
    StorageError,
    SyncError,
    ValidationError,
)
from msauth.crypto.types import TokenPayload

__version__ = "0.1.0"

__all__ = [
    "Authority",
    "AuthError",
    "ClientRecord",
    "ConfigError",
    "KeyNotFound",
    "NoSigningKeyAvailable",
    "RevocationEntry",
    "RevokedError",
    "SignOverrides",
    "Snapshot",
    "SnapshotVerifier",
    "StorageError",
    "SyncError",
    "TokenPayload",
    "TokenType",
    "ValidationError",
    "VerifyOverrides",
]

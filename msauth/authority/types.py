"""Type definitions for the authority's ledger, registry and token policy."""

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from msauth.crypto.types import DecodedJWT, JWKEntry


def _to_camel(name: str) -> str:
    """Convert snake_case to camelCase for JSON serialization."""
    parts = name.split("_")
    return parts[0] + "".join(p.capitalize() for p in parts[1:])


class TokenType(StrEnum):
    """Token kinds with their own lifetime policy."""

    ACCESS = "access"
    REFRESH = "refresh"
    OTHER = "other"


class RevocationEntry(BaseModel):
    """A revoked token id, meaningful until the token's own expiry."""

    model_config = ConfigDict(extra="allow")

    jti: str
    exp: int

    def expired(self, now: float, leeway: float = 0) -> bool:
        """True once a token with this expiry can no longer verify."""
        return now > self.exp + leeway


RevocationExtractor = Callable[[DecodedJWT], RevocationEntry]


class ClientRecord(BaseModel):
    """A registered downstream consumer."""

    name: str
    url: str


ClientMap = dict[str, ClientRecord]


class Snapshot(BaseModel):
    """Public keys plus revocation list, as pushed to registered clients."""

    model_config = ConfigDict(alias_generator=_to_camel, populate_by_name=True)

    keys: list[JWKEntry] = Field(default_factory=list)
    revocation_list: list[RevocationEntry] = Field(default_factory=list)


class SignOverrides(BaseModel):
    """Per-call adjustments to the configured signing policy."""

    kid: str | None = None
    jti: str | None = None
    expires_in: int | None = None
    audience: str | None = None
    issuer: str | None = None
    subject: str | None = None
    not_before: int | None = None
    headers: dict[str, Any] = Field(default_factory=dict)


class VerifyOverrides(BaseModel):
    """Per-call adjustments to the configured verification policy."""

    audience: str | None = None
    issuer: str | None = None
    subject: str | None = None
    leeway: int | None = None

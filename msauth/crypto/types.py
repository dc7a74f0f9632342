"""Type definitions for signing keys, JWKS, and JWT operations."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SigningKey(BaseModel):
    """An asymmetric keypair held in the key ring."""

    model_config = ConfigDict(frozen=True)

    kid: str
    algorithm: str
    crv_or_size: str | int
    alg: str
    public_key_pem: str
    private_key_pem: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class KeySet(BaseModel):
    """Ordered set of signing keys, oldest first."""

    keys: list[SigningKey] = Field(default_factory=list)


class JWKEntry(BaseModel):
    """Single public JWK entry in a JWKS response."""

    kty: str
    use: str = "sig"
    alg: str
    kid: str
    n: str | None = None
    e: str | None = None
    crv: str | None = None
    x: str | None = None
    y: str | None = None


class JWKSResponse(BaseModel):
    """JSON Web Key Set response."""

    keys: list[JWKEntry]


class DecodedJWT(BaseModel):
    """Header and payload of a token decoded without verification."""

    header: dict[str, Any]
    payload: dict[str, Any]


class TokenPayload(BaseModel):
    """Verified JWT claims; unknown claims are kept as extras."""

    model_config = ConfigDict(extra="allow")

    jti: str | None = None
    exp: int | None = None
    iat: int | None = None
    nbf: int | None = None
    iss: str | None = None
    aud: str | list[str] | None = None
    sub: str | None = None

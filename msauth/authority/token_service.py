"""Token issuance, verification and revocation over the key ring and ledger."""

import base64
import hashlib
import secrets
import time
from collections.abc import Mapping
from typing import Any, TypeVar

import jwt
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from msauth.authority.key_ring import KeyRing
from msauth.authority.revocation import RevocationLedger
from msauth.authority.types import (
    RevocationEntry,
    RevocationExtractor,
    SignOverrides,
    TokenType,
    VerifyOverrides,
)
from msauth.core.errors import KeyNotFound, RevokedError, ValidationError
from msauth.core.settings import AuthoritySettings
from msauth.crypto.jwt_manager import JWTManager
from msauth.crypto.types import DecodedJWT, TokenPayload

P = TypeVar("P", bound=TokenPayload)


def generate_jti() -> str:
    """Hash the clock and a random component into a compact token id."""
    seed = f"{time.time_ns():x}".encode() + secrets.token_bytes(16)
    digest = hashlib.sha256(seed).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode()


def token_typ(token_type: TokenType) -> str:
    """Header 'typ' value that binds a token to its type."""
    return f"{token_type.value}+jwt"


def default_revocation_extractor(decoded: DecodedJWT) -> RevocationEntry:
    """Record a token by its jti and expiry."""
    payload = decoded.payload
    return RevocationEntry(jti=payload.get("jti"), exp=payload.get("exp"))


class TokenService:
    """Applies per-type policy when issuing and verifying tokens."""

    def __init__(
        self,
        ring: KeyRing,
        ledger: RevocationLedger,
        settings: AuthoritySettings,
        jwt_mgr: JWTManager | None = None,
    ) -> None:
        self._ring = ring
        self._ledger = ledger
        self._settings = settings
        self._jwt = jwt_mgr or JWTManager()

    def lifetime(self, token_type: TokenType) -> int:
        """Default lifetime in seconds for a token type."""
        if token_type == TokenType.ACCESS:
            return self._settings.access_token_ttl
        if token_type == TokenType.REFRESH:
            return self._settings.refresh_token_ttl
        return self._settings.other_token_ttl

    def issue(
        self,
        token_type: TokenType,
        payload: Mapping[str, Any] | BaseModel,
        overrides: SignOverrides | None = None,
    ) -> str:
        """Sign a payload with a key chosen from the ring."""
        opts = overrides or SignOverrides()
        claims = (
            payload.model_dump(exclude_none=True)
            if isinstance(payload, BaseModel)
            else dict(payload)
        )
        settings = self._settings

        # access tokens always use the configured lifetime
        ttl = self.lifetime(token_type)
        if token_type != TokenType.ACCESS and opts.expires_in is not None:
            ttl = opts.expires_in

        now = int(time.time())
        claims["iat"] = now
        claims["exp"] = now + ttl
        claims["jti"] = opts.jti or claims.get("jti") or generate_jti()
        if opts.not_before is not None:
            claims["nbf"] = opts.not_before
        for claim, value in (
            ("iss", opts.issuer or settings.issuer),
            ("aud", opts.audience or settings.audience),
            ("sub", opts.subject or settings.subject),
        ):
            if value is not None:
                claims[claim] = value

        key = (
            self._ring.lookup(opts.kid)
            if opts.kid is not None
            else self._ring.select_for_signing()
        )
        headers = {**opts.headers, "typ": token_typ(token_type)}
        return self._jwt.sign(claims, key, headers=headers)

    def verify(
        self,
        token_type: TokenType,
        token: str,
        overrides: VerifyOverrides | None = None,
        model: type[P] = TokenPayload,  # type: ignore[assignment]
    ) -> P:
        """Verify signature, claims and revocation state of a token.

        The ledger is pruned on every call, including calls that fail
        before the ledger is consulted.
        """
        opts = overrides or VerifyOverrides()
        settings = self._settings
        leeway = settings.leeway if opts.leeway is None else opts.leeway
        try:
            header = jwt.get_unverified_header(token)
            if header.get("typ") != token_typ(token_type):
                raise jwt.InvalidTokenError("Token type mismatch")
            key = self._ring.lookup(header.get("kid"))
            claims = self._jwt.verify(
                token,
                key,
                algorithms=[key.alg],
                audience=opts.audience or settings.audience,
                issuer=opts.issuer or settings.issuer,
                subject=opts.subject or settings.subject,
                leeway=leeway,
            )
        except (KeyNotFound, jwt.InvalidTokenError):
            self._ledger.prune(leeway=leeway)
            raise
        if self._ledger.check_and_prune(claims.get("jti"), leeway=leeway):
            raise RevokedError()
        return model.model_validate(claims)

    def decode(self, token: str) -> DecodedJWT:
        """Decode a token without verifying it."""
        return self._jwt.decode_unverified(token)

    def revoke(
        self, token: str, extractor: RevocationExtractor | None = None
    ) -> RevocationEntry:
        """Add a token to the ledger without checking its signature."""
        try:
            decoded = self.decode(token)
        except jwt.DecodeError as exc:
            raise ValidationError(f"cannot decode token: {exc}") from exc
        try:
            entry = (extractor or default_revocation_extractor)(decoded)
        except PydanticValidationError as exc:
            raise ValidationError("token carries no jti/exp to revoke by") from exc
        self._ledger.revoke(entry)
        return entry

"""JWT signing, verification and unverified decoding."""

from collections.abc import Mapping, Sequence
from typing import Any

import jwt
from jwt.types import Options

from msauth.crypto.types import DecodedJWT, SigningKey

REQUIRED_CLAIMS = ["exp"]


class JWTManager:
    """Signs and verifies JWTs with keys handed in by the key ring."""

    def sign(
        self,
        payload: Mapping[str, Any],
        key: SigningKey,
        headers: Mapping[str, Any] | None = None,
    ) -> str:
        """Sign a payload with a key's private half; the header carries its kid."""
        if key.private_key_pem is None:
            raise ValueError(f"key {key.kid} has no private material")
        return jwt.encode(
            dict(payload),
            key.private_key_pem,
            algorithm=key.alg,
            headers={**(headers or {}), "kid": key.kid},
        )

    def verify(
        self,
        token: str,
        key: SigningKey,
        *,
        algorithms: Sequence[str],
        audience: str | None = None,
        issuer: str | None = None,
        subject: str | None = None,
        leeway: int = 0,
    ) -> dict[str, Any]:
        """Verify a token's signature and standard claims."""
        opts: Options = {"require": REQUIRED_CLAIMS}
        if audience is None:
            opts["verify_aud"] = False
        claims: dict[str, Any] = jwt.decode(
            token,
            key.public_key_pem,
            algorithms=list(algorithms),
            audience=audience,
            issuer=issuer,
            leeway=leeway,
            options=opts,
        )
        if subject is not None and claims.get("sub") != subject:
            raise jwt.InvalidTokenError("Invalid subject")
        return claims

    def decode_unverified(self, token: str) -> DecodedJWT:
        """Decode header and payload without checking the signature."""
        header = jwt.get_unverified_header(token)
        payload = jwt.decode(
            token,
            options={"verify_signature": False},
            algorithms=None,
        )
        return DecodedJWT(header=header, payload=payload)

"""Client-side verification against snapshots pushed by the authority."""

import threading
import time
from typing import Any

import jwt

from msauth.authority.types import Snapshot
from msauth.core.errors import KeyNotFound, RevokedError
from msauth.core.logging import get_logger
from msauth.crypto.types import JWKEntry

logger = get_logger("msauth.client")


class SnapshotVerifier:
    """Verifies tokens with the last snapshot received from the authority.

    The verifier keeps its own copy of the snapshot; callers that hold the
    snapshot object they passed to ``apply`` cannot change its state.
    """

    def __init__(self, snapshot: Snapshot | None = None) -> None:
        self._lock = threading.Lock()
        self._snapshot = Snapshot()
        self._keys: dict[str, tuple[JWKEntry, Any]] = {}
        if snapshot is not None:
            self.apply(snapshot)

    def apply(self, snapshot: Snapshot) -> None:
        """Replace the key set and revocation list."""
        copy = snapshot.model_copy(deep=True)
        keys = {
            entry.kid: (entry, jwt.PyJWK(entry.model_dump(exclude_none=True)).key)
            for entry in copy.keys
        }
        with self._lock:
            self._snapshot = copy
            self._keys = keys
        logger.info(
            "snapshot applied",
            keys=len(keys),
            revoked=len(copy.revocation_list),
        )

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot.model_copy(deep=True)

    def _resolve(self, kid: str | None) -> tuple[JWKEntry, Any]:
        keys = self._keys
        if kid is None:
            if not keys:
                raise KeyNotFound()
            return list(keys.values())[-1]
        if kid not in keys:
            raise KeyNotFound(kid)
        return keys[kid]

    def verify(
        self,
        token: str,
        audience: str | None = None,
        issuer: str | None = None,
        leeway: int = 0,
    ) -> dict[str, Any]:
        """Verify a token's signature, claims and revocation state."""
        header = jwt.get_unverified_header(token)
        entry, key = self._resolve(header.get("kid"))
        options: dict[str, Any] = {"require": ["exp"]}
        if audience is None:
            options["verify_aud"] = False
        claims: dict[str, Any] = jwt.decode(
            token,
            key,
            algorithms=[entry.alg],
            audience=audience,
            issuer=issuer,
            leeway=leeway,
            options=options,
        )
        now = time.time()
        jti = claims.get("jti")
        for revoked in self._snapshot.revocation_list:
            if revoked.jti == jti and not revoked.expired(now, leeway):
                raise RevokedError()
        return claims

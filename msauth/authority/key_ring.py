"""Ordered, size-bounded ring of signing keys with rotation and retirement.

Keys are kept oldest first. The ring is refilled to ``amount`` keys after any
removal and grows by one key per rotation before the oldest key is dropped.
Signing draws at random from every key except the oldest ``sign_skip`` keys,
which remain valid for verification until they rotate out.

Mutations run under a single re-entrant lock and publish a fresh tuple of
keys, so readers never observe a partially rotated ring.
"""

import random
import threading
from collections.abc import Callable

from msauth.core.errors import ConfigError, KeyNotFound, NoSigningKeyAvailable
from msauth.core.logging import get_logger
from msauth.crypto.keys import generate_signing_key, jws_algorithm, signing_key_to_jwk
from msauth.crypto.types import JWKSResponse, KeySet, SigningKey

MINIMUM_KEYS = 3

KeyGenerator = Callable[[str, str | int], SigningKey]

logger = get_logger("msauth.key_ring")


def check_ring_config(amount: int, sign_skip: int) -> int:
    """Clamp ``amount`` to the minimum and validate ``sign_skip`` against it."""
    amount = max(amount, MINIMUM_KEYS)
    if sign_skip < 0:
        raise ConfigError("sign_skip must not be negative")
    if sign_skip >= amount:
        raise ConfigError(
            "number of keys skipped for signing must be smaller than "
            "the total number of keys"
        )
    return amount


class KeyRing:
    """Owns the signing keys of one authority."""

    def __init__(
        self,
        algorithm: str = "EC",
        crv_or_size: str | int = "P-256",
        amount: int = MINIMUM_KEYS,
        sign_skip: int = 1,
        generator: KeyGenerator = generate_signing_key,
    ) -> None:
        self.amount = check_ring_config(amount, sign_skip)
        self.sign_skip = sign_skip
        self.algorithm = algorithm
        self.crv_or_size = crv_or_size
        self.alg = jws_algorithm(algorithm, crv_or_size)
        self._generate = generator
        self._lock = threading.RLock()
        self._keys: tuple[SigningKey, ...] = ()

    @property
    def size(self) -> int:
        return len(self._keys)

    @property
    def kids(self) -> list[str]:
        """Key ids, oldest first."""
        return [key.kid for key in self._keys]

    def _new_key(self, taken: set[str]) -> SigningKey:
        key = self._generate(self.algorithm, self.crv_or_size)
        while key.kid in taken:
            key = self._generate(self.algorithm, self.crv_or_size)
        return key

    def fill(self) -> list[SigningKey]:
        """Generate keys until the ring holds ``amount`` keys."""
        with self._lock:
            keys = list(self._keys)
            added: list[SigningKey] = []
            while len(keys) < self.amount:
                key = self._new_key({k.kid for k in keys})
                keys.append(key)
                added.append(key)
            self._keys = tuple(keys)
        if added:
            logger.debug("key ring filled", added=[k.kid for k in added])
        return added

    def rotate(self) -> SigningKey:
        """Append a new key, then drop the oldest keys beyond ``amount``."""
        with self._lock:
            keys = list(self._keys)
            key = self._new_key({k.kid for k in keys})
            keys.append(key)
            removed: list[str] = []
            while len(keys) > self.amount:
                removed.append(keys.pop(0).kid)
            self._keys = tuple(keys)
        logger.info("keys rotated", new_kid=key.kid, removed=removed)
        return key

    def retire(self, kid: str) -> None:
        """Remove one key and refill the ring.

        Tokens signed with the retired key no longer verify.
        """
        with self._lock:
            remaining = tuple(k for k in self._keys if k.kid != kid)
            if len(remaining) == len(self._keys):
                raise KeyNotFound(kid)
            self._keys = remaining
            logger.info("key retired", kid=kid)
            self.fill()

    def reset(self) -> None:
        """Discard every key and refill from empty.

        Every previously issued token becomes unverifiable.
        """
        with self._lock:
            self._keys = ()
            logger.warning("key ring reset")
            self.fill()

    def replace(self, keyset: KeySet) -> None:
        """Install keys loaded from storage and top the ring up."""
        with self._lock:
            seen: set[str] = set()
            keys: list[SigningKey] = []
            for key in keyset.keys:
                if key.kid in seen:
                    continue
                seen.add(key.kid)
                keys.append(key)
            # more keys than configured: keep the newest
            self._keys = tuple(keys[-self.amount :]) if keys else ()
            self.fill()

    def select_for_signing(self) -> SigningKey:
        """Pick a random key outside the oldest ``sign_skip`` keys."""
        keys = self._keys
        if self.sign_skip >= len(keys):
            raise NoSigningKeyAvailable()
        return keys[random.randrange(self.sign_skip, len(keys))]

    def lookup(self, kid: str | None = None) -> SigningKey:
        """Resolve a key by id, or return the newest key when no id is given."""
        keys = self._keys
        if kid is None:
            if not keys:
                raise KeyNotFound()
            return keys[-1]
        for key in keys:
            if key.kid == kid:
                return key
        raise KeyNotFound(kid)

    def to_keyset(self) -> KeySet:
        """Full key material for persistence."""
        return KeySet(keys=list(self._keys))

    def to_jwks(self) -> JWKSResponse:
        """Public keys for verifiers."""
        return JWKSResponse(keys=[signing_key_to_jwk(k) for k in self._keys])

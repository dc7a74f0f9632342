"""Error taxonomy for the msauth authority."""


class AuthError(Exception):
    """Base class for every error raised by msauth."""

    code = "ERR_MSAUTH"
    default_message = "authority error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ConfigError(AuthError):
    """Invalid construction options."""

    code = "ERR_CONFIG"
    default_message = "invalid configuration"


class KeyNotFound(AuthError):
    """A key id did not resolve to a key in the ring."""

    code = "ERR_KEY_NOT_FOUND"
    default_message = "key not found"

    def __init__(self, kid: str | None = None) -> None:
        super().__init__(f"key {kid!r} not found" if kid else None)
        self.kid = kid


class NoSigningKeyAvailable(AuthError):
    """The ring holds no key outside the sign-skip window."""

    code = "ERR_NO_SIGNING_KEY"
    default_message = "no key available for signing"


class RevokedError(AuthError):
    """The token is present in the revocation ledger."""

    code = "ERR_JWT_REVOKED"
    default_message = "token has been revoked"


class ValidationError(AuthError):
    """Malformed input to a registration or revocation call."""

    code = "ERR_VALIDATION"
    default_message = "invalid input"


class SyncError(AuthError):
    """One or more registered clients did not receive a snapshot."""

    code = "ERR_SYNC"

    def __init__(self, failures: dict[str, Exception]) -> None:
        names = ", ".join(sorted(failures))
        super().__init__(f"sync failed for clients: {names}")
        self.failures = failures


class StorageError(AuthError):
    """A persistence backend failed to load or save."""

    code = "ERR_STORAGE"
    default_message = "storage operation failed"

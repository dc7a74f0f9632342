"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

KEY_AMOUNT_DEFAULT = 3
SIGN_SKIP_DEFAULT = 1
ROTATION_CRON_DEFAULT = "0 */4 * * *"
ACCESS_TOKEN_TTL_DEFAULT = 600
REFRESH_TOKEN_TTL_DEFAULT = 604_800
OTHER_TOKEN_TTL_DEFAULT = 600
SYNC_TIMEOUT_DEFAULT = 5.0
JWKS_MAX_AGE_DEFAULT = 300


class AuthoritySettings(BaseSettings):
    """Key ring, token policy and admin settings."""

    model_config = SettingsConfigDict(env_prefix="MSAUTH_")

    algorithm: str = "EC"
    crv_or_size: str = "P-256"
    amount: int = KEY_AMOUNT_DEFAULT
    sign_skip: int = SIGN_SKIP_DEFAULT
    rotation_cron: str = ROTATION_CRON_DEFAULT
    access_token_ttl: int = ACCESS_TOKEN_TTL_DEFAULT
    refresh_token_ttl: int = REFRESH_TOKEN_TTL_DEFAULT
    other_token_ttl: int = OTHER_TOKEN_TTL_DEFAULT
    issuer: str | None = None
    audience: str | None = None
    subject: str | None = None
    leeway: int = 0
    sync_timeout: float = SYNC_TIMEOUT_DEFAULT
    jwks_max_age: int = JWKS_MAX_AGE_DEFAULT
    admin_token: str = ""
    log_level: str = "info"
    json_logs: bool = True

    @property
    def key_size(self) -> str | int:
        """Curve name for EC keys, modulus bits for RSA keys."""
        if self.crv_or_size.isdigit():
            return int(self.crv_or_size)
        return self.crv_or_size


class StorageSettings(BaseSettings):
    """Persistence backend selection."""

    model_config = SettingsConfigDict(env_prefix="MSAUTH_STORAGE_")

    backend: str = "memory"
    disk_path: str = "./authcerts"
    keys_filename: str = ".keys.json"
    revocation_filename: str = ".revocList.json"
    clients_filename: str = ".clients.json"
    database_url: str = "sqlite+aiosqlite:///./msauth.db"
    encryption_key: str = ""

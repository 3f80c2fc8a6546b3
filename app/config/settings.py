from typing import ClassVar

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DEVELOPMENT_ENVS: ClassVar[frozenset[str]] = frozenset(
        {"dev", "development", "local", "test"}
    )

    app_env: str = "production"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "privacy_core"
    db_username: str = "privacy_core"
    db_password: str = "secret"
    db_pool_timeout_seconds: float = 30.0

    encryption_secret: SecretStr = SecretStr("")
    kdf_scrypt_n: int = 2**14
    kdf_scrypt_r: int = 8
    kdf_scrypt_p: int = 1

    storage_root: str = "/app/storage"
    max_upload_bytes: int = 50 * 1024 * 1024
    reencode_quality: int = 95

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() in self.DEVELOPMENT_ENVS

    @model_validator(mode="after")
    def _require_secret_outside_development(self) -> "Settings":
        if not self.is_development and not self.encryption_secret.get_secret_value():
            raise ValueError(
                f"ENCRYPTION_SECRET must be set when APP_ENV is '{self.app_env}'"
            )
        return self

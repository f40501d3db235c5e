"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded in callers)
    - get_settings() is cached (lru_cache) — single instance per process
    - Token lifetimes are duration strings ("<N><unit>") parsed by core/expiry.py

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Separate access/refresh secrets: a leaked access secret cannot mint refresh tokens
    - No default signing keys: development gets random per-process keys, any
      other environment refuses to start without JWT_ACCESS_SECRET / JWT_REFRESH_SECRET
"""

import logging
import secrets
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://propertyhub:propertyhub@db:5432/propertyhub"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Tokens
    # Empty outside development fails startup (see ensure_signing_secrets)
    jwt_access_secret: str = ""
    jwt_refresh_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expiry: str = "15m"
    refresh_token_expiry: str = "7d"

    # Auth flows
    # TODO: replace the static code with SMS OTP verification once the provider is wired
    login_otp_code: str = "1111"
    super_admin_creation_secret: str = ""

    # Assignment
    sales_role_name: str = "Sales"

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"
    environment: str = "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()


def ensure_signing_secrets(settings: Settings) -> None:
    """Fail fast when token signing keys are missing.

    In development a missing key is replaced by a random one for this process;
    tokens then stop verifying after a restart.
    """
    missing = [
        name for name in ("jwt_access_secret", "jwt_refresh_secret")
        if not getattr(settings, name)
    ]
    if not missing:
        return
    if settings.environment != "development":
        raise RuntimeError(
            f"Missing token signing secrets: {', '.join(n.upper() for n in missing)}",
        )
    for name in missing:
        setattr(settings, name, secrets.token_urlsafe(32))
    logger.warning(
        f"Using ephemeral development secrets for {', '.join(missing)}",
    )

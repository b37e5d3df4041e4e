"""Application settings loaded from environment variables.

Environment Configuration:
    APP_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: Database connection string (required)
    ALLOWED_ORIGINS: Comma-separated list of CORS origins
    MAX_BODY_BYTES: Largest accepted request body (default 10 MiB)
    LOG_JSON: Emit JSON logs (true) or console-friendly logs (false)

Auth Configuration:
    JWT_SECRET: HS256 signing secret (required in staging/prod, >= 32 chars)
    JWT_EXPIRES_IN: Token lifetime, seconds or "<n>s|m|h|d" (default "7d")
    BCRYPT_ROUNDS: bcrypt cost factor (10..16, default 10)

Note: local and test environments fall back to a fixed development secret
when JWT_SECRET is unset. Tokens signed with it must never reach production.
"""

import re
from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

DEV_JWT_SECRET = "chatjournal-dev-secret-change-me-in-production"
MIN_JWT_SECRET_LENGTH = 32

MIN_BCRYPT_ROUNDS = 10
MAX_BCRYPT_ROUNDS = 16

DEFAULT_MAX_BODY_BYTES = 10 * 1024 * 1024

_DURATION_PATTERN = re.compile(r"^(\d+)\s*([smhd]?)$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


def parse_duration(value: str) -> int:
    """Parse a duration like "7d", "12h", "30m", "45s" or "3600" into seconds.

    Raises:
        ValueError: If the value is not a positive duration.
    """
    match = _DURATION_PATTERN.match(value.strip().lower())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    seconds = int(match.group(1)) * _DURATION_UNITS[match.group(2)]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - DATABASE_URL is always required
    - JWT_SECRET is required in staging and prod, and must be >= 32 chars when set
    - JWT_EXPIRES_IN must parse as a positive duration
    - BCRYPT_ROUNDS must be within [10, 16]
    """

    app_env: Environment = Field(default=Environment.LOCAL, alias="APP_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Auth settings
    jwt_secret: str | None = Field(default=None, alias="JWT_SECRET")
    jwt_expires_in: str = Field(default="7d", alias="JWT_EXPIRES_IN")
    bcrypt_rounds: int = Field(default=MIN_BCRYPT_ROUNDS, alias="BCRYPT_ROUNDS")

    # HTTP settings
    allowed_origins: str = Field(default="http://localhost:5173", alias="ALLOWED_ORIGINS")
    max_body_bytes: int = Field(default=DEFAULT_MAX_BODY_BYTES, gt=0, alias="MAX_BODY_BYTES")

    log_json: bool = Field(default=True, alias="LOG_JSON")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure auth settings are usable for the selected environment."""
        if self.app_env in (Environment.STAGING, Environment.PROD) and not self.jwt_secret:
            raise ValueError(f"JWT_SECRET is required for APP_ENV={self.app_env.value}")

        if self.jwt_secret is not None and len(self.jwt_secret) < MIN_JWT_SECRET_LENGTH:
            raise ValueError(
                f"JWT_SECRET must be at least {MIN_JWT_SECRET_LENGTH} characters, "
                f"got {len(self.jwt_secret)}"
            )

        try:
            parse_duration(self.jwt_expires_in)
        except ValueError as e:
            raise ValueError(f"JWT_EXPIRES_IN: {e}") from e

        if not MIN_BCRYPT_ROUNDS <= self.bcrypt_rounds <= MAX_BCRYPT_ROUNDS:
            raise ValueError(
                f"BCRYPT_ROUNDS must be between {MIN_BCRYPT_ROUNDS} and {MAX_BCRYPT_ROUNDS}"
            )

        return self

    @property
    def uses_dev_jwt_secret(self) -> bool:
        """Whether the development fallback secret is in effect."""
        return self.jwt_secret is None

    @property
    def effective_jwt_secret(self) -> str:
        """Signing secret, falling back to the development secret in local/test."""
        return self.jwt_secret or DEV_JWT_SECRET

    @property
    def jwt_ttl_seconds(self) -> int:
        """Token lifetime in seconds."""
        return parse_duration(self.jwt_expires_in)

    @property
    def allowed_origin_list(self) -> list[str]:
        """Parse ALLOWED_ORIGINS into a list, dropping blanks."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()  # type: ignore[call-arg]


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()

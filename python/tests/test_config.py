"""Tests for application configuration."""

import pytest
from pydantic import ValidationError

from chatjournal.config import (
    DEV_JWT_SECRET,
    Environment,
    Settings,
    clear_settings_cache,
    get_settings,
    parse_duration,
)

VALID_SECRET = "x" * 32


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep auth settings under each test's control."""
    for name in ("JWT_SECRET", "JWT_EXPIRES_IN", "BCRYPT_ROUNDS", "ALLOWED_ORIGINS", "LOG_JSON", "MAX_BODY_BYTES"):
        monkeypatch.delenv(name, raising=False)


def _make_settings(**overrides) -> Settings:
    """Build a Settings instance with test defaults + overrides."""
    defaults = {
        "DATABASE_URL": "postgresql+psycopg://localhost/test",
        "APP_ENV": "test",
    }
    defaults.update(overrides)
    return Settings(**defaults)


class TestDefaults:
    def test_defaults(self):
        s = _make_settings()
        assert s.app_env == Environment.TEST
        assert s.jwt_expires_in == "7d"
        assert s.jwt_ttl_seconds == 7 * 24 * 60 * 60
        assert s.bcrypt_rounds == 10
        assert s.allowed_origin_list == ["http://localhost:5173"]
        assert s.log_json is True
        assert s.max_body_bytes == 10 * 1024 * 1024

    def test_dev_secret_fallback_outside_production(self):
        s = _make_settings(APP_ENV="local")
        assert s.uses_dev_jwt_secret
        assert s.effective_jwt_secret == DEV_JWT_SECRET

    def test_explicit_secret_wins(self):
        s = _make_settings(JWT_SECRET=VALID_SECRET)
        assert not s.uses_dev_jwt_secret
        assert s.effective_jwt_secret == VALID_SECRET

    def test_allowed_origins_parsed(self):
        s = _make_settings(ALLOWED_ORIGINS=" https://a.example.com, ,https://b.example.com ")
        assert s.allowed_origin_list == ["https://a.example.com", "https://b.example.com"]


class TestValidation:
    def test_database_url_required(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(ValidationError):
            Settings(APP_ENV="test")

    @pytest.mark.parametrize("env", ["staging", "prod"])
    def test_secret_required_in_deployed_envs(self, env):
        with pytest.raises(ValidationError, match="JWT_SECRET is required"):
            _make_settings(APP_ENV=env)

    def test_prod_with_secret_ok(self):
        s = _make_settings(APP_ENV="prod", JWT_SECRET=VALID_SECRET)
        assert s.app_env == Environment.PROD

    def test_short_secret_rejected(self):
        with pytest.raises(ValidationError, match="at least 32 characters"):
            _make_settings(JWT_SECRET="too-short")

    def test_invalid_duration_rejected(self):
        with pytest.raises(ValidationError, match="JWT_EXPIRES_IN"):
            _make_settings(JWT_EXPIRES_IN="forever")

    @pytest.mark.parametrize("rounds", [9, 17])
    def test_bcrypt_rounds_out_of_range(self, rounds):
        with pytest.raises(ValidationError, match="BCRYPT_ROUNDS"):
            _make_settings(BCRYPT_ROUNDS=rounds)

    @pytest.mark.parametrize("size", [0, -1])
    def test_max_body_bytes_must_be_positive(self, size):
        with pytest.raises(ValidationError, match="MAX_BODY_BYTES"):
            _make_settings(MAX_BODY_BYTES=size)

    def test_unknown_env_rejected(self):
        with pytest.raises(ValidationError):
            _make_settings(APP_ENV="moon")


class TestParseDuration:
    @pytest.mark.parametrize(
        "value,seconds",
        [("45s", 45), ("30m", 1800), ("12h", 43200), ("7d", 604800), ("3600", 3600), ("2D", 172800)],
    )
    def test_valid(self, value, seconds):
        assert parse_duration(value) == seconds

    @pytest.mark.parametrize("value", ["", "0", "0d", "-1h", "1w", "abc"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestGetSettings:
    def test_cached_until_cleared(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite://")
        monkeypatch.setenv("APP_ENV", "test")

        first = get_settings()
        assert get_settings() is first

        clear_settings_cache()
        monkeypatch.setenv("BCRYPT_ROUNDS", "12")
        assert get_settings().bcrypt_rounds == 12

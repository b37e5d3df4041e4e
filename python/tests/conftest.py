"""Pytest configuration and fixtures for chatjournal tests.

Test isolation strategy:
- Each test gets its own SQLite database file under tmp_path
- The schema is created from the ORM metadata (no migrations needed)
- The app is built with an injected session factory and token service,
  so nothing reads DATABASE_URL or JWT_SECRET from the environment
"""

import os
from collections.abc import Generator

# Fallbacks for any code path that still calls get_settings()
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from chatjournal.app import add_request_id_middleware, create_app
from chatjournal.auth.tokens import TokenService
from chatjournal.config import Settings, clear_settings_cache
from chatjournal.db.engine import create_db_engine
from chatjournal.db.models import Base
from chatjournal.db.session import create_session_factory
from tests.helpers import TEST_JWT_SECRET


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    """Create an engine bound to a fresh SQLite database with the full schema."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'chatjournal_test.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Provide a database session for service-level tests."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings() -> Settings:
    """Settings for the test app (never read from the environment)."""
    return Settings(
        APP_ENV="test",
        DATABASE_URL="sqlite://",
        JWT_SECRET=TEST_JWT_SECRET,
        BCRYPT_ROUNDS=10,
    )


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(secret=TEST_JWT_SECRET)


@pytest.fixture
def app(
    settings: Settings,
    session_factory: sessionmaker[Session],
    token_service: TokenService,
) -> FastAPI:
    """Provide a fully wired app: auth, CORS and request-id middleware."""
    app = create_app(
        settings=settings,
        session_factory=session_factory,
        token_service=token_service,
    )
    add_request_id_middleware(app)
    return app


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Provide a FastAPI test client for the wired app."""
    with TestClient(app) as client:
        yield client


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()

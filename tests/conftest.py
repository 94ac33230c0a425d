"""
Shared test fixtures.

This module provides database setup, configuration resets and service
wiring used across the unit tests.
"""

import os
from unittest.mock import patch

import pytest
from sqlalchemy.orm import Session

from access_token_core.config import SecurityConfig, reset_config
from access_token_core.db import DatabaseConfig, DatabaseManager, import_all_models
from access_token_core.db.db_config import Base, initialize_db
from access_token_core.repositories.access_token_repository import AccessTokenRepository
from access_token_core.services.access_token_service import AccessTokenService
from access_token_core.utils.logger import reset_logging


@pytest.fixture(autouse=True)
def isolated_config():
    """Give every test fresh global config and logger, with queue logging off."""
    with patch.dict(os.environ, {"AzureWebJobsStorage": "", "ENABLE_LOGS_QUEUE": "false"}):
        reset_config()
        reset_logging()
        yield
        reset_config()
        reset_logging()


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """Create SQLite in-memory database configuration for testing."""
    return DatabaseConfig(url="sqlite:///:memory:", echo=False, development_mode=True)


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    import_all_models()
    return initialize_db(db_config)


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created before and dropped after every test so each test
    starts from an empty store.
    """
    Base.metadata.create_all(db_manager.engine)
    session = db_manager.get_session()

    yield session

    session.rollback()
    db_manager.close_session()
    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture
def security_config() -> SecurityConfig:
    """Lowest allowed iteration count keeps hashing fast in tests."""
    return SecurityConfig(hash_iterations=1000, max_salt_id_attempts=5)


@pytest.fixture
def token_repository(db_session) -> AccessTokenRepository:
    return AccessTokenRepository(session=db_session)


@pytest.fixture
def token_service(token_repository, security_config) -> AccessTokenService:
    return AccessTokenService(token_repository=token_repository, security_config=security_config)


@pytest.fixture
def auth_config_id() -> str:
    return "auth-config-1"

"""
Tests for database configuration and the global manager.
"""

import pytest
from sqlalchemy import select

from access_token_core.config import AppConfig, set_config
from access_token_core.db import (
    AccessToken,
    DatabaseConfig,
    DatabaseManager,
    get_db_manager,
    get_development_config,
    get_production_config,
    set_db_manager,
)
from access_token_core.exceptions import ErrorCode, ServiceError, ValidationError
from tests.fixtures.factories import AccessTokenFactory


class TestDatabaseConfig:
    """Test URL parsing and normalization."""

    def test_sqlite_url(self):
        config = DatabaseConfig(url="sqlite:///:memory:")
        assert config.get_url().drivername == "sqlite"
        assert config.is_sqlite is True

    def test_postgres_gets_psycopg_driver(self):
        config = DatabaseConfig(url="postgresql://app:pw@db:5432/tokens")

        url = config.get_url()

        assert url.drivername == "postgresql+psycopg"
        assert url.database == "tokens"
        assert config.is_sqlite is False

    def test_explicit_driver_is_kept(self):
        config = DatabaseConfig(url="postgresql+psycopg2://app:pw@db/tokens")
        assert config.get_url().drivername == "postgresql+psycopg2"

    def test_postgres_without_database(self):
        with pytest.raises(ValidationError) as exc_info:
            DatabaseConfig(url="postgresql://app:pw@db").get_url()
        assert exc_info.value.error_code == ErrorCode.MISSING_REQUIRED

    def test_unsupported_backend(self):
        with pytest.raises(ValidationError) as exc_info:
            DatabaseConfig(url="oracle://app:pw@db/tokens").get_url()
        assert exc_info.value.error_code == ErrorCode.INVALID_FORMAT

    def test_unparseable_url(self):
        with pytest.raises(ValidationError) as exc_info:
            DatabaseConfig(url="not a url").get_url()
        assert exc_info.value.context["field"] == "url"

    def test_repr_masks_password(self):
        config = DatabaseConfig(url="postgresql://app:s3cret@db/tokens")
        assert "s3cret" not in repr(config)
        assert "***" in repr(config)

    def test_from_app_config(self):
        app_config = AppConfig(environment="production")
        app_config.database.connection_string = "postgresql://app:pw@db/tokens"
        app_config.database.pool_size = 12

        config = DatabaseConfig.from_app_config(app_config)

        assert config.url == "postgresql://app:pw@db/tokens"
        assert config.pool_size == 12
        assert config.development_mode is False

    def test_production_config_reads_global_config(self):
        app_config = AppConfig(environment="production")
        app_config.database.connection_string = "sqlite:///:memory:"
        set_config(app_config)

        config = get_production_config()

        assert config.url == "sqlite:///:memory:"
        assert config.development_mode is False

    def test_development_config(self):
        config = get_development_config()
        assert config.is_sqlite is True
        assert config.development_mode is True


class TestDatabaseManager:
    """Test DatabaseManager behavior."""

    def test_drop_tables_refused_outside_development(self):
        manager = DatabaseManager(DatabaseConfig(url="sqlite:///:memory:"))
        try:
            with pytest.raises(ServiceError) as exc_info:
                manager.drop_tables()
            assert exc_info.value.error_code == ErrorCode.CONFIGURATION_ERROR
        finally:
            manager.close()

    def test_session_scope_commits(self, db_manager, db_session):
        token = AccessTokenFactory()

        with db_manager.session_scope() as session:
            stored = session.get(AccessToken, token.id)
            stored.description = "renamed"

        db_session.expire_all()
        assert db_session.get(AccessToken, token.id).description == "renamed"

    def test_session_scope_rolls_back(self, db_manager, db_session):
        token = AccessTokenFactory(description="original")

        with pytest.raises(RuntimeError):
            with db_manager.session_scope() as session:
                session.get(AccessToken, token.id).description = "changed"
                session.flush()
                raise RuntimeError("abort")

        db_session.expire_all()
        descriptions = db_session.scalars(select(AccessToken.description)).all()
        assert descriptions == ["original"]

    def test_global_manager_required(self, db_manager):
        set_db_manager(None)
        try:
            with pytest.raises(ServiceError):
                get_db_manager()
        finally:
            set_db_manager(db_manager)

    def test_global_manager_is_initialized(self, db_manager):
        assert get_db_manager() is db_manager

"""
Engine and session management for the token store.

One process-wide DatabaseManager is installed with ``initialize_db`` and
handed out by ``get_db_manager``. Repositories receive a Session from it;
they never reach for the global themselves.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.orm import Session, declarative_base, scoped_session, sessionmaker

from ..config import AppConfig, get_config
from ..exceptions import ErrorCode, ServiceError, ValidationError
from ..utils.logger import get_logger

# Base class for all SQLAlchemy models
Base: Any = declarative_base()

# Plain "postgresql" URLs get the psycopg 3 driver
_DEFAULT_DRIVERS = {"postgresql": "postgresql+psycopg"}
_SUPPORTED_BACKENDS = ("sqlite", "postgresql")


class DatabaseConfig(BaseModel):
    """Engine settings for the token store."""

    model_config = ConfigDict(frozen=True)

    url: str
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    echo: bool = False
    development_mode: bool = False

    @classmethod
    def from_app_config(cls, app_config: AppConfig) -> "DatabaseConfig":
        database = app_config.database
        return cls(
            url=database.connection_string,
            pool_size=database.pool_size,
            max_overflow=database.max_overflow,
            pool_timeout=database.pool_timeout,
            echo=database.echo,
            development_mode=app_config.environment == "development",
        )

    def get_url(self) -> URL:
        """
        Parse and normalize the configured URL.

        Raises:
            ValidationError: If the URL cannot be parsed or names an unsupported backend
        """
        try:
            url = make_url(self.url)
        except ArgumentError as e:
            raise ValidationError(
                "Database URL could not be parsed",
                field="url",
                error_code=ErrorCode.INVALID_FORMAT,
                cause=e,
            ) from e

        backend = url.get_backend_name()
        if backend not in _SUPPORTED_BACKENDS:
            raise ValidationError(
                f"Unsupported database backend: {backend}",
                field="url",
                error_code=ErrorCode.INVALID_FORMAT,
                backend=backend,
            )
        if backend == "postgresql" and not url.database:
            raise ValidationError(
                "Postgres URL must name a database",
                field="url",
                error_code=ErrorCode.MISSING_REQUIRED,
            )

        drivername = _DEFAULT_DRIVERS.get(url.drivername, url.drivername)
        return url.set(drivername=drivername)

    @property
    def is_sqlite(self) -> bool:
        return self.get_url().get_backend_name() == "sqlite"

    def __repr__(self) -> str:
        try:
            shown = self.get_url().render_as_string(hide_password=True)
        except ValidationError:
            shown = "<invalid>"
        return f"DatabaseConfig(url='{shown}', development_mode={self.development_mode})"


class DatabaseManager:
    """Owns the engine and a thread-scoped session registry."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine = self._create_engine()
        self.session_factory = sessionmaker(bind=self.engine)
        self.scoped_session = scoped_session(self.session_factory)

    def _create_engine(self):
        url = self.config.get_url()
        if self.config.is_sqlite:
            return create_engine(
                url, echo=self.config.echo, connect_args={"check_same_thread": False}
            )
        return create_engine(
            url,
            echo=self.config.echo,
            pool_size=self.config.pool_size,
            max_overflow=self.config.max_overflow,
            pool_timeout=self.config.pool_timeout,
            pool_pre_ping=True,
        )

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        if not self.config.development_mode:
            raise ServiceError(
                "Refusing to drop tables outside development mode",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="drop_tables",
            )
        Base.metadata.drop_all(self.engine)

    def get_session(self) -> Session:
        return self.scoped_session()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Yield a fresh session that is committed on success and rolled back on error.

        Use this for one request-handling unit; the session is closed on exit.
        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close_session(self, session: Optional[Session] = None) -> None:
        if session:
            session.close()
        else:
            self.scoped_session.remove()

    def close(self) -> None:
        self.scoped_session.remove()
        self.engine.dispose()


def get_development_config() -> DatabaseConfig:
    """In-memory SQLite with table drops allowed."""
    return DatabaseConfig(url="sqlite:///:memory:", development_mode=True)


def get_production_config() -> DatabaseConfig:
    """Build the engine config from the application config (``DATABASE_URL`` and pool settings)."""
    return DatabaseConfig.from_app_config(get_config())


def import_all_models():
    """Import all models to ensure they're registered with SQLAlchemy metadata."""
    from sqlalchemy.orm import configure_mappers

    from .db_access_token_models import AccessToken  # noqa

    configure_mappers()


# Global database manager instance
_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """
    Get the global database manager instance.

    Raises:
        ServiceError: If no database manager has been initialized
    """
    if _db_manager is None:
        raise ServiceError(
            "Database manager not initialized. Call initialize_db() first.",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="get_db_manager",
        )
    return _db_manager


def set_db_manager(manager: Optional[DatabaseManager]) -> None:
    global _db_manager
    _db_manager = manager


def initialize_db(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """
    Install the global manager and create missing tables.

    Args:
        config: Engine settings (default: built from the application config)
    """
    global _db_manager

    config = config or get_production_config()
    _db_manager = DatabaseManager(config)

    get_logger().info("Initializing DB", extra={"database": repr(config)})
    import_all_models()
    _db_manager.create_tables()

    return _db_manager


def close_db() -> None:
    """Dispose of the global manager's engine, if any."""
    global _db_manager
    if _db_manager:
        _db_manager.close()
        _db_manager = None

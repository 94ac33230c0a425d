"""
SQLAlchemy models and database plumbing.

This module provides a common entry point for the models.
"""

from .db_access_token_models import AccessToken
from .db_base import UTCDateTime, utc_now
from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    close_db,
    get_db_manager,
    get_development_config,
    get_production_config,
    import_all_models,
    initialize_db,
    set_db_manager,
)

__all__ = [
    # Base definitions
    "Base",
    "UTCDateTime",
    "utc_now",
    # Configuration
    "DatabaseConfig",
    "DatabaseManager",
    "close_db",
    "get_db_manager",
    "get_development_config",
    "get_production_config",
    "import_all_models",
    "initialize_db",
    "set_db_manager",
    # Models
    "AccessToken",
]

"""
Base column types shared by the models.

Keeps datetimes timezone-aware across SQLite (tests) and PostgreSQL.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator


def utc_now():
    """Return current UTC time with timezone info attached."""
    return datetime.now(UTC)


class UTCDateTime(TypeDecorator):
    """
    Datetime column that always hands back aware UTC datetimes.

    Values are normalized to UTC and stored naive; SQLite drops tzinfo anyway
    and PostgreSQL ``timestamp without time zone`` behaves the same way.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

"""
Tests for the AccessToken model and the UTC datetime column type.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from access_token_core.db import AccessToken, UTCDateTime
from tests.fixtures.factories import AccessTokenFactory


def _token(**overrides) -> AccessToken:
    values = {
        "description": "CI token",
        "username": "bob",
        "auth_config_id": "auth-config-1",
        "salt_id": "0a1b2c3d",
        "salt_value": "salt",
        "value_hash": "hash",
        "created_at": datetime.now(timezone.utc),
    }
    values.update(overrides)
    return AccessToken(**values)


class TestAccessTokenModel:
    """Test AccessToken persistence."""

    def test_defaults_on_insert(self, db_session):
        token = _token()
        db_session.add(token)
        db_session.commit()

        assert token.id is not None
        assert token.revoked is False
        assert token.last_used_at is None
        assert token.revoked_at is None
        assert token.revoke_cause is None

    def test_salt_id_is_unique(self, db_session):
        db_session.add(_token(salt_id="deadbeef"))
        db_session.commit()

        db_session.add(_token(salt_id="deadbeef"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_repr_hides_secrets(self, db_session):
        token = AccessTokenFactory(username="alice")
        text = repr(token)

        assert "alice" in text
        assert token.value_hash not in text
        assert token.salt_value not in text

    def test_created_at_round_trips_as_aware_utc(self, db_session):
        created_at = datetime(2026, 3, 4, 5, 6, 7, 891011, tzinfo=timezone.utc)
        token = AccessTokenFactory(created_at=created_at)
        token_id = token.id
        db_session.expire_all()

        reloaded = db_session.get(AccessToken, token_id)

        assert reloaded.created_at == created_at
        assert reloaded.created_at.tzinfo is not None


class TestUTCDateTime:
    """Test UTCDateTime bind/result processing."""

    def test_bind_converts_to_naive_utc(self):
        value = datetime(2026, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        bound = UTCDateTime().process_bind_param(value, None)
        assert bound == datetime(2026, 1, 1, 10, 0)
        assert bound.tzinfo is None

    def test_bind_keeps_naive_values(self):
        value = datetime(2026, 1, 1, 12, 0)
        assert UTCDateTime().process_bind_param(value, None) == value

    def test_result_attaches_utc(self):
        result = UTCDateTime().process_result_value(datetime(2026, 1, 1, 12, 0), None)
        assert result == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_none_passes_through(self):
        assert UTCDateTime().process_bind_param(None, None) is None
        assert UTCDateTime().process_result_value(None, None) is None

"""
Factory Boy factories for generating consistent test data.

Tokens built here are real: pass ``secret=...`` and the stored hash will
verify against ``salt_id + secret``.
"""

import factory

from access_token_core.db import AccessToken, get_db_manager
from access_token_core.db.db_base import utc_now
from access_token_core.utils.token_codec import generate_secret
from access_token_core.utils.token_hasher import generate_salt, hash_secret

# Matches the security_config fixture
TEST_HASH_ITERATIONS = 1000


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base factory with common patterns."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = lambda: get_db_manager().get_session()
        sqlalchemy_session_persistence = "commit"


class AccessTokenFactory(BaseFactory):
    """Factory for stored access tokens."""

    class Meta:
        model = AccessToken

    class Params:
        secret = factory.LazyFunction(generate_secret)

    description = factory.Faker("sentence", nb_words=4)
    username = factory.Sequence(lambda n: f"user{n}")
    auth_config_id = "auth-config-1"
    salt_id = factory.Sequence(lambda n: f"{n:08x}")
    salt_value = factory.LazyFunction(generate_salt)
    value_hash = factory.LazyAttribute(
        lambda o: hash_secret(o.secret, o.salt_value, TEST_HASH_ITERATIONS)
    )
    created_at = factory.LazyFunction(utc_now)
    last_used_at = None
    revoked = False


class RevokedAccessTokenFactory(AccessTokenFactory):
    """Factory for tokens that have already been revoked."""

    revoked = True
    revoked_at = factory.LazyFunction(utc_now)
    revoke_cause = "rotated"
    revoked_by = factory.SelfAttribute("username")

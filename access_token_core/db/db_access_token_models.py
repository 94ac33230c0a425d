"""
Personal access token model.

Just the data structure: generation, hashing and state rules live in the
codec, hasher and service.
"""

from sqlalchemy import Boolean, Column, Index, Integer, String, Text, UniqueConstraint, false

from ..constants import DESCRIPTION_MAX_LENGTH, SALT_ID_LENGTH
from .db_base import UTCDateTime, utc_now
from .db_config import Base


class AccessToken(Base):
    """Stored access token; the secret itself is never persisted."""

    __tablename__ = "access_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(String(DESCRIPTION_MAX_LENGTH), nullable=False, default="")

    # Lookup key and verifier
    salt_id = Column(String(SALT_ID_LENGTH), nullable=False)
    salt_value = Column(String(128), nullable=False)
    value_hash = Column(String(128), nullable=False)

    # Ownership
    username = Column(String(255), nullable=False)
    auth_config_id = Column(String(255), nullable=False)

    # Lifecycle
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    last_used_at = Column(UTCDateTime, nullable=True)
    revoked = Column(Boolean, nullable=False, default=False, server_default=false())
    revoked_at = Column(UTCDateTime, nullable=True)
    revoke_cause = Column(Text, nullable=True)
    revoked_by = Column(String(255), nullable=True)

    __table_args__ = (
        UniqueConstraint("salt_id", name="uq_access_token_salt_id"),
        Index("ix_access_token_username", "username"),
        Index("ix_access_token_revoked", "revoked"),
    )

    def __repr__(self) -> str:
        return (
            f"AccessToken(id={self.id!r}, username={self.username!r}, "
            f"revoked={self.revoked!r})"
        )

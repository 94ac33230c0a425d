"""
Personal access token service.

Issues, validates and revokes bearer tokens. A token is ACTIVE when created
and can move to REVOKED exactly once. Presented tokens that are malformed,
unknown or fail hash verification are all rejected with the same
InvalidAccessTokenError so the error cannot be used as an oracle.
"""

from datetime import datetime
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import SecurityConfig, get_config
from ..constants import DISPLAY_VALUE_LENGTH
from ..db.db_access_token_models import AccessToken
from ..db.db_base import utc_now
from ..enums import AccessTokenFilter
from ..exceptions import (
    ConflictError,
    DuplicateSaltIdError,
    InvalidAccessTokenError,
    InvalidFormatError,
    RecordNotFoundError,
    RevokedAccessTokenError,
    TokenGenerationError,
    validation_failed,
)
from ..repositories.access_token_repository import AccessTokenRepository
from ..schemas.access_token_schema import (
    AccessTokenCreate,
    AccessTokenRead,
    AccessTokenWithDisplayValue,
)
from ..utils.logger import get_logger
from ..utils.token_codec import (
    decode_display_value,
    encode_display_value,
    generate_salt_id,
    generate_secret,
)
from ..utils.token_hasher import generate_salt, hash_secret, verify_secret

# Stand-in verifier for unknown salt ids; a miss does the same hashing work as a mismatch
_MISS_SALT = generate_salt()
_MISS_HASH = "0" * 64


def _same_user(owner: str, username: Optional[str]) -> bool:
    return username is not None and owner.lower() == username.lower()


class AccessTokenService:
    """
    Service for the personal access token lifecycle.

    The repository is injected; the service keeps no mutable state of its
    own, so one instance per request-handling unit (one session) is safe.
    """

    def __init__(
        self,
        token_repository: AccessTokenRepository,
        security_config: Optional[SecurityConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize service with repository and optional tuning.

        Args:
            token_repository: Store for token records
            security_config: Hashing/generation settings (default: global config)
            clock: Source of "now" (default: aware UTC now)
        """
        self.token_repository = token_repository
        self.security_config = security_config or get_config().security
        self.clock = clock or utc_now
        self.logger = get_logger()

    def create(
        self, description: Optional[str], username: str, auth_config_id: str
    ) -> AccessTokenWithDisplayValue:
        """
        Issue a new token.

        Args:
            description: Free-form text shown to the owner
            username: Owner of the token
            auth_config_id: Authentication source the owner logged in through

        Returns:
            The stored record plus the display value, which is never retrievable again

        Raises:
            ValidationError: If the input is invalid
            TokenGenerationError: If no unique salt id was found within the attempt budget
            RepositoryError: If persistence fails
        """
        try:
            request = AccessTokenCreate(
                description=description, username=username, auth_config_id=auth_config_id
            )
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "access_token"
            raise validation_failed(field, first.get("input"), first["msg"], cause=e) from e

        max_attempts = self.security_config.max_salt_id_attempts
        last_error: Optional[Exception] = None

        for attempt in range(1, max_attempts + 1):
            salt_id = generate_salt_id()
            if self.token_repository.find_by_salt_id(salt_id) is not None:
                self.logger.debug("Salt id already taken, regenerating", extra={"attempt": attempt})
                continue

            secret = generate_secret()
            salt = generate_salt()
            record = AccessToken(
                description=request.description,
                username=request.username,
                auth_config_id=request.auth_config_id,
                salt_id=salt_id,
                salt_value=salt,
                value_hash=hash_secret(secret, salt, self.security_config.hash_iterations),
                created_at=self.clock(),
                last_used_at=None,
                revoked=False,
            )

            try:
                stored = self.token_repository.insert(record)
            except DuplicateSaltIdError as e:
                last_error = e
                continue

            self.logger.info(
                "Access token created",
                extra={
                    "token_id": stored.id,
                    "username": stored.username,
                    "auth_config_id": stored.auth_config_id,
                    "attempt": attempt,
                },
            )
            return AccessTokenWithDisplayValue(
                access_token=AccessTokenRead.model_validate(stored),
                display_value=encode_display_value(salt_id, secret),
            )

        raise TokenGenerationError(max_attempts, cause=last_error)

    def find(self, token_id: int, username: str) -> AccessTokenRead:
        """
        Fetch a token owned by ``username``.

        Raises:
            RecordNotFoundError: If the token does not exist or belongs to someone else
        """
        return AccessTokenRead.model_validate(self._load_owned(token_id, username))

    def find_by_access_token(self, display_value: str) -> AccessTokenRead:
        """
        Resolve a presented display value to its token.

        Raises:
            InvalidAccessTokenError: Bad length, unknown salt id or hash mismatch
            RevokedAccessTokenError: The token is authentic but was revoked
        """
        record = self._authenticate_record(display_value)
        return AccessTokenRead.model_validate(record)

    def authenticate(self, display_value: str) -> AccessTokenRead:
        """
        Validate a presented token and stamp its last-used time.

        Raises:
            InvalidAccessTokenError: Bad length, unknown salt id or hash mismatch
            RevokedAccessTokenError: The token is authentic but was revoked
        """
        record = self._authenticate_record(display_value)
        token_id = record.id
        self.token_repository.update_last_used({token_id: self.clock()})
        return AccessTokenRead.model_validate(self.token_repository.find_by_id(token_id))

    def revoke_access_token(
        self, token_id: int, username: str, cause: Optional[str] = None
    ) -> AccessTokenRead:
        """
        Revoke a token on behalf of its owner.

        Raises:
            RecordNotFoundError: If the token does not exist or belongs to someone else
            ConflictError: If the token is already revoked
        """
        record = self._load_owned(token_id, username)
        return self._revoke(record, revoked_by=username, cause=cause)

    def revoke_access_token_by_admin(
        self, token_id: int, revoked_by: str, cause: Optional[str] = None
    ) -> AccessTokenRead:
        """
        Revoke any user's token; ``revoked_by`` records the administrator.

        Raises:
            RecordNotFoundError: If the token does not exist
            ConflictError: If the token is already revoked
        """
        record = self.token_repository.find_by_id(token_id)
        if record is None:
            raise RecordNotFoundError(token_id)
        return self._revoke(record, revoked_by=revoked_by, cause=cause)

    def update_last_used(self, last_used: Dict[int, datetime]) -> int:
        """Flush buffered last-used timestamps; returns the number of tokens updated."""
        updated = self.token_repository.update_last_used(last_used)
        self.logger.debug(
            "Updated token last-used times",
            extra={"requested": len(last_used), "updated": updated},
        )
        return updated

    def find_all_tokens_for_user(
        self, username: str, token_filter: AccessTokenFilter = AccessTokenFilter.ALL
    ) -> List[AccessTokenRead]:
        records = self.token_repository.list_for_user(username, token_filter)
        return [AccessTokenRead.model_validate(record) for record in records]

    def find_all_tokens_for_all_users(
        self, token_filter: AccessTokenFilter = AccessTokenFilter.ALL
    ) -> List[AccessTokenRead]:
        records = self.token_repository.list_all(token_filter)
        return [AccessTokenRead.model_validate(record) for record in records]

    def _load_owned(self, token_id: int, username: str) -> AccessToken:
        record = self.token_repository.find_by_id(token_id)
        if record is None or not _same_user(record.username, username):
            raise RecordNotFoundError(token_id)
        return record

    def _authenticate_record(self, display_value: str) -> AccessToken:
        if not isinstance(display_value, str) or len(display_value) != DISPLAY_VALUE_LENGTH:
            raise InvalidAccessTokenError()

        try:
            salt_id, secret = decode_display_value(display_value)
        except InvalidFormatError:
            raise InvalidAccessTokenError() from None

        record = self.token_repository.find_by_salt_id(salt_id)
        if record is None:
            verify_secret(secret, _MISS_SALT, _MISS_HASH, self.security_config.hash_iterations)
            raise InvalidAccessTokenError()

        if not verify_secret(
            secret, record.salt_value, record.value_hash, self.security_config.hash_iterations
        ):
            raise InvalidAccessTokenError()

        if record.revoked:
            raise RevokedAccessTokenError(record.revoked_at, token_id=record.id)

        return record

    def _revoke(self, record: AccessToken, revoked_by: str, cause: Optional[str]) -> AccessTokenRead:
        token_id = record.id
        if record.revoked:
            raise ConflictError(token_id=token_id)

        revoked = self.token_repository.update_revocation(
            token_id,
            revoked_at=self.clock(),
            cause=cause or "",
            revoked_by=revoked_by,
        )
        if not revoked:
            # Lost the compare-and-set to a concurrent revoke or delete
            if self.token_repository.find_by_id(token_id) is None:
                raise RecordNotFoundError(token_id)
            raise ConflictError(token_id=token_id)

        self.logger.info(
            "Access token revoked",
            extra={"token_id": token_id, "revoked_by": revoked_by},
        )
        return AccessTokenRead.model_validate(self.token_repository.find_by_id(token_id))

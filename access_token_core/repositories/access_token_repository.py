"""
Persistence for personal access tokens.

Every mutating method is its own unit of work: it commits on success and
rolls back before raising. Database errors surface as RepositoryError with
the SQLAlchemy exception attached as the cause.
"""

from datetime import datetime
from typing import Any, Dict, List, NoReturn, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.db_access_token_models import AccessToken
from ..enums import AccessTokenFilter
from ..exceptions import DuplicateSaltIdError, ErrorCode, RepositoryError
from ..utils.logger import get_logger


class AccessTokenRepository:
    """SQLAlchemy-backed store for AccessToken records."""

    def __init__(self, session: Session, logger=None):
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy session for database operations
            logger: Optional logger instance
        """
        self.session = session
        self.logger = logger or get_logger()

    def _handle_db_error(
        self,
        e: Exception,
        operation_name: str,
        token_id: Optional[int] = None,
        **context: Any,
    ) -> NoReturn:
        """
        Roll back and translate a database error.

        Raises:
            DuplicateSaltIdError: On a salt id unique constraint violation
            RepositoryError: For every other database failure
        """
        self.session.rollback()

        if isinstance(e, RepositoryError):
            raise e

        error_context = {"operation_name": operation_name, "entity_type": "AccessToken", **context}
        if token_id is not None:
            error_context["token_id"] = token_id

        if isinstance(e, IntegrityError):
            error_message = str(e.orig).lower() if getattr(e, "orig", None) else str(e).lower()

            if "salt_id" in error_message:
                self.logger.warning(
                    f"Salt id collision in {operation_name}", extra=error_context
                )
                raise DuplicateSaltIdError(cause=e, **error_context)

            self.logger.error(
                f"Integrity constraint violation in {operation_name}: {str(e)}",
                extra=error_context,
            )
            raise RepositoryError(
                f"Database constraint violation for AccessToken: {str(e)}",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                cause=e,
                **error_context,
            )

        if isinstance(e, SQLAlchemyError):
            self.logger.error(f"Database error in {operation_name}: {str(e)}", extra=error_context)
            raise RepositoryError(
                f"Database error for AccessToken: {str(e)}",
                error_code=ErrorCode.DATABASE_ERROR,
                cause=e,
                **error_context,
            )

        raise e

    @staticmethod
    def _apply_filter(stmt, token_filter: AccessTokenFilter):
        if token_filter == AccessTokenFilter.ACTIVE:
            return stmt.where(AccessToken.revoked.is_(False))
        if token_filter == AccessTokenFilter.REVOKED:
            return stmt.where(AccessToken.revoked.is_(True))
        return stmt

    def insert(self, record: AccessToken) -> AccessToken:
        """Persist a new token and return it with its id assigned."""
        try:
            self.session.add(record)
            self.session.flush()
            self.session.commit()
            self.session.refresh(record)
        except Exception as e:
            self._handle_db_error(e, "insert", username=record.username)

        self.logger.debug("Inserted access token", extra={"token_id": record.id})
        return record

    def find_by_id(self, token_id: int) -> Optional[AccessToken]:
        try:
            return self.session.get(AccessToken, token_id)
        except Exception as e:
            self._handle_db_error(e, "find_by_id", token_id=token_id)

    def find_by_salt_id(self, salt_id: str) -> Optional[AccessToken]:
        try:
            stmt = select(AccessToken).where(AccessToken.salt_id == salt_id)
            return self.session.scalars(stmt).first()
        except Exception as e:
            self._handle_db_error(e, "find_by_salt_id")

    def update_revocation(
        self,
        token_id: int,
        revoked_at: datetime,
        cause: str,
        revoked_by: Optional[str] = None,
    ) -> bool:
        """
        Compare-and-set revocation.

        Only flips a row whose ``revoked`` is still false, so of two racing
        callers exactly one gets True.

        Returns:
            True if this call revoked the token, False if it was already revoked or missing
        """
        try:
            stmt = (
                update(AccessToken)
                .where(AccessToken.id == token_id, AccessToken.revoked.is_(False))
                .values(
                    revoked=True,
                    revoked_at=revoked_at,
                    revoke_cause=cause,
                    revoked_by=revoked_by,
                )
                .execution_options(synchronize_session=False)
            )
            result = self.session.execute(stmt)
            if result.rowcount != 1:
                self.session.rollback()
                return False
            self.session.commit()
            return True
        except Exception as e:
            self._handle_db_error(e, "update_revocation", token_id=token_id)

    def update_last_used(self, last_used: Dict[int, datetime]) -> int:
        """
        Record last-used timestamps for a batch of tokens.

        Returns:
            Number of rows updated
        """
        if not last_used:
            return 0

        updated = 0
        try:
            for token_id, used_at in last_used.items():
                stmt = (
                    update(AccessToken)
                    .where(AccessToken.id == token_id)
                    .values(last_used_at=used_at)
                    .execution_options(synchronize_session=False)
                )
                updated += self.session.execute(stmt).rowcount
            self.session.commit()
        except Exception as e:
            self._handle_db_error(e, "update_last_used", token_count=len(last_used))

        return updated

    def list_for_user(
        self, username: str, token_filter: AccessTokenFilter = AccessTokenFilter.ALL
    ) -> List[AccessToken]:
        try:
            stmt = select(AccessToken).where(
                func.lower(AccessToken.username) == username.lower()
            )
            stmt = self._apply_filter(stmt, token_filter).order_by(AccessToken.id)
            return list(self.session.scalars(stmt).all())
        except Exception as e:
            self._handle_db_error(e, "list_for_user", username=username)

    def list_all(self, token_filter: AccessTokenFilter = AccessTokenFilter.ALL) -> List[AccessToken]:
        try:
            stmt = self._apply_filter(select(AccessToken), token_filter).order_by(AccessToken.id)
            return list(self.session.scalars(stmt).all())
        except Exception as e:
            self._handle_db_error(e, "list_all")

    def delete_all(self) -> int:
        """Administrative/test helper: remove every token."""
        try:
            result = self.session.execute(delete(AccessToken))
            self.session.commit()
        except Exception as e:
            self._handle_db_error(e, "delete_all")

        self.logger.warning("Deleted all access tokens", extra={"deleted_count": result.rowcount})
        return result.rowcount

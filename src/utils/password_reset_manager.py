"""Password reset flow.

A reset moves an account from no pending reset, to a pending reset with a
token and expiry, to either consumed (password replaced, fields cleared) or
expired. Only the SHA-256 digest of a token is stored.
"""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytz
from sqlalchemy.orm import Session

from config import PASSWORD_RESET_TOKEN_BYTES, PASSWORD_RESET_TTL_HOURS
from core.exceptions import InvalidOrExpiredTokenError
from schemas.user import User
from utils.session_manager import SessionManager
from utils.user_manager import UserManager, check_password_strength

logger = logging.getLogger(__name__)


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def _utcnow() -> datetime:
    return datetime.now(pytz.utc)


class PasswordResetManager:
    """Issues, validates and consumes password reset tokens."""

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = _utcnow,
        ttl_hours: int = PASSWORD_RESET_TTL_HOURS,
    ):
        """Initialize PasswordResetManager.

        Args:
            db: SQLAlchemy Session.
            clock: Returns the current aware UTC time.
            ttl_hours: How long a token stays valid.
        """
        self.db = db
        self.clock = clock
        self.ttl = timedelta(hours=ttl_hours)
        self.users = UserManager(db)

    def request_reset(self, email: str) -> Optional[str]:
        """Issue a reset token if the email belongs to an account.

        The caller must respond identically whether or not a token was
        issued.

        Args:
            email: Email of the account to reset.

        Returns:
            The raw token to deliver, or None if no account matched.
        """
        user = self.users.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return None

        token = secrets.token_hex(PASSWORD_RESET_TOKEN_BYTES)
        expires_at = self.clock() + self.ttl
        self.users.set_reset_token(user.user_id, hash_token(token), expires_at.isoformat())
        logger.info("Issued password reset token for user %s", user.user_id)
        return token

    def _find_pending(self, token: str) -> Optional[User]:
        if not token:
            return None
        user = self.users.get_by_reset_token(hash_token(token))
        if user is None or not user.password_reset_expires:
            return None
        if self.clock() >= datetime.fromisoformat(user.password_reset_expires):
            return None
        return user

    def validate_token(self, token: str) -> bool:
        """Return True iff the token is pending and not yet expired."""
        return self._find_pending(token) is not None

    def consume_token(self, token: str, new_password: str) -> User:
        """Reset the password with a valid token.

        On success the token and expiry are cleared together with the new
        hash, and every session of the account is ended.

        Args:
            token: Raw reset token.
            new_password: New plain text password.

        Returns:
            The updated account.

        Raises:
            InvalidOrExpiredTokenError: If the token is unknown, already
                used, or expired.
            WeakPasswordError: If the new password is too short. Nothing is
                modified in that case.
        """
        user = self._find_pending(token)
        if user is None:
            raise InvalidOrExpiredTokenError()
        check_password_strength(new_password)

        if not self.users.complete_password_reset(user.user_id, hash_token(token), new_password):
            # Another request consumed the token first
            raise InvalidOrExpiredTokenError()

        SessionManager(self.db).destroy_all_for_user(user.user_id)
        logger.info("Password reset completed for user %s", user.user_id)
        return self.users.get_by_id(user.user_id)

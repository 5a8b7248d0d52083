"""Login session management.

Sessions are server-side rows keyed by an opaque id that travels in a
cookie. Resolving a session is read-only. Expired rows are removed by
``purge_expired``, which runs whenever a session starts and at app startup.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytz
from sqlalchemy.orm import Session as DBSession

from config import SESSION_TTL_HOURS
from core.database import commit
from core.exceptions import UnauthenticatedError
from models.auth_session import AuthSessionModel
from schemas.user import User
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(pytz.utc)


def _iso(moment: datetime) -> str:
    # Fixed-width UTC strings, so string order matches time order in SQL
    return moment.astimezone(pytz.utc).isoformat(timespec="microseconds")


class SessionManager:
    """Creates, resolves and destroys login sessions using SQLAlchemy."""

    def __init__(
        self,
        db: DBSession,
        clock: Callable[[], datetime] = _utcnow,
        ttl_hours: int = SESSION_TTL_HOURS,
    ):
        """Initialize SessionManager.

        Args:
            db: SQLAlchemy Session.
            clock: Returns the current aware UTC time.
            ttl_hours: Lifetime of a new session.
        """
        self.db = db
        self.clock = clock
        self.ttl = timedelta(hours=ttl_hours)
        self.users = UserManager(db)

    def create_session(self, user_id: str) -> str:
        """Start a session for an account.

        Args:
            user_id: Account the session belongs to.

        Returns:
            The new session id.
        """
        self.purge_expired()
        now = self.clock()
        session_id = secrets.token_urlsafe(32)
        self.db.add(
            AuthSessionModel(
                session_id=session_id,
                user_id=user_id,
                created_at=_iso(now),
                expires_at=_iso(now + self.ttl),
            )
        )
        commit(self.db)
        logger.info("Started session for user %s", user_id)
        return session_id

    def resolve(self, session_id: Optional[str]) -> User:
        """Resolve a session id to the acting account.

        Args:
            session_id: Value of the session cookie, possibly missing.

        Returns:
            The account bound to the session.

        Raises:
            UnauthenticatedError: If there is no session, it expired, or its
                account no longer exists. All cases look the same.
        """
        if not session_id:
            raise UnauthenticatedError()

        model = (
            self.db.query(AuthSessionModel)
            .filter(AuthSessionModel.session_id == session_id)
            .first()
        )
        if model is None:
            raise UnauthenticatedError()
        if datetime.fromisoformat(model.expires_at) <= self.clock():
            raise UnauthenticatedError()

        user = self.users.get_by_id(model.user_id)
        if user is None:
            logger.warning("Session %s... points at a deleted account", session_id[:8])
            raise UnauthenticatedError()
        return user

    def destroy(self, session_id: Optional[str]) -> bool:
        """End a session.

        Returns:
            True if a session row was removed.
        """
        if not session_id:
            return False
        deleted = (
            self.db.query(AuthSessionModel)
            .filter(AuthSessionModel.session_id == session_id)
            .delete()
        )
        commit(self.db)
        return deleted > 0

    def destroy_all_for_user(self, user_id: str) -> int:
        """End every session of an account.

        Returns:
            Number of sessions removed.
        """
        deleted = (
            self.db.query(AuthSessionModel)
            .filter(AuthSessionModel.user_id == user_id)
            .delete()
        )
        commit(self.db)
        if deleted:
            logger.info("Ended %d session(s) for user %s", deleted, user_id)
        return deleted

    def purge_expired(self) -> int:
        """Delete sessions whose expiry has passed.

        Returns:
            Number of sessions removed.
        """
        deleted = (
            self.db.query(AuthSessionModel)
            .filter(AuthSessionModel.expires_at <= _iso(self.clock()))
            .delete(synchronize_session=False)
        )
        commit(self.db)
        if deleted:
            logger.info("Purged %d expired session(s)", deleted)
        return deleted

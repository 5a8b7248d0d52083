"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes:
request-scoped managers, the authenticated account, and role gates.
"""

import hmac
from typing import Annotated, Callable, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from config import ADMIN_TOKEN, SESSION_COOKIE_NAME
from core.database import get_db
from core.exceptions import ForbiddenError, UnauthenticatedError
from schemas.user import User
from utils import achievement_manager
from utils import assignment_manager
from utils import class_manager
from utils import parent_link_manager
from utils import password_reset_manager
from utils import reading_progress_manager
from utils import session_manager
from utils import user_manager
from utils.authorization import require_role


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_session_manager(db: Session = Depends(get_db)) -> session_manager.SessionManager:
    """Get SessionManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        SessionManager instance.
    """
    return session_manager.SessionManager(db)


def get_password_reset_manager(
    db: Session = Depends(get_db),
) -> password_reset_manager.PasswordResetManager:
    """Get PasswordResetManager instance with request-scoped DB session."""
    return password_reset_manager.PasswordResetManager(db)


def get_class_manager(db: Session = Depends(get_db)) -> class_manager.ClassManager:
    """Get ClassManager instance with request-scoped DB session."""
    return class_manager.ClassManager(db)


def get_assignment_manager(
    db: Session = Depends(get_db),
) -> assignment_manager.AssignmentManager:
    """Get AssignmentManager instance with request-scoped DB session."""
    return assignment_manager.AssignmentManager(db)


def get_parent_link_manager(
    db: Session = Depends(get_db),
) -> parent_link_manager.ParentLinkManager:
    """Get ParentLinkManager instance with request-scoped DB session."""
    return parent_link_manager.ParentLinkManager(db)


def get_reading_progress_manager(
    db: Session = Depends(get_db),
) -> reading_progress_manager.ReadingProgressManager:
    """Get ReadingProgressManager instance with request-scoped DB session."""
    return reading_progress_manager.ReadingProgressManager(db)


def get_achievement_manager(
    db: Session = Depends(get_db),
) -> achievement_manager.AchievementManager:
    """Get AchievementManager instance with request-scoped DB session."""
    return achievement_manager.AchievementManager(db)


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
SessionManagerDep = Annotated[
    session_manager.SessionManager, Depends(get_session_manager)
]
PasswordResetManagerDep = Annotated[
    password_reset_manager.PasswordResetManager,
    Depends(get_password_reset_manager),
]
ClassManagerDep = Annotated[
    class_manager.ClassManager, Depends(get_class_manager)
]
AssignmentManagerDep = Annotated[
    assignment_manager.AssignmentManager, Depends(get_assignment_manager)
]
ParentLinkManagerDep = Annotated[
    parent_link_manager.ParentLinkManager, Depends(get_parent_link_manager)
]
ReadingProgressManagerDep = Annotated[
    reading_progress_manager.ReadingProgressManager,
    Depends(get_reading_progress_manager),
]
AchievementManagerDep = Annotated[
    achievement_manager.AchievementManager, Depends(get_achievement_manager)
]


def get_session_id(request: Request) -> Optional[str]:
    return request.cookies.get(SESSION_COOKIE_NAME)


def get_current_user(
    request: Request,
    sessions: SessionManagerDep,
) -> User:
    """Get the account bound to the session cookie.

    Args:
        request: Incoming request carrying the session cookie.
        sessions: Injected SessionManager instance.

    Returns:
        Current User object.

    Raises:
        HTTPException: 401 if there is no valid session.
    """
    try:
        return sessions.resolve(get_session_id(request))
    except UnauthenticatedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
        )


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_roles(*roles: str) -> Callable[..., User]:
    """Build a dependency that admits only accounts with one of ``roles``.

    The session is resolved first, so an anonymous request gets 401 and an
    authenticated request with the wrong role gets 403.
    """

    def dependency(current_user: CurrentUserDep) -> User:
        try:
            require_role(current_user, roles)
        except ForbiddenError as e:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=str(e),
            )
        return current_user

    return dependency


StudentDep = Annotated[User, Depends(require_roles("student"))]
TeacherDep = Annotated[User, Depends(require_roles("teacher"))]
ParentDep = Annotated[User, Depends(require_roles("parent"))]


def require_admin(x_admin_token: Optional[str] = Header(default=None)) -> None:
    """Check the ``X-Admin-Token`` header against ``ADMIN_TOKEN``.

    Raises:
        HTTPException: 403 if the header is missing or wrong, or no admin
            token is configured.
    """
    if not ADMIN_TOKEN or not x_admin_token or not hmac.compare_digest(
        x_admin_token, ADMIN_TOKEN
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin token",
        )

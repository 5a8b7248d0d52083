"""Role checks applied before any role-scoped operation."""

from typing import Iterable

from core.exceptions import ForbiddenError
from schemas.user import User

STUDENT = "student"
TEACHER = "teacher"
PARENT = "parent"
ROLES = (STUDENT, TEACHER, PARENT)


def require_role(account: User, allowed_roles: Iterable[str]) -> None:
    """Raise ``ForbiddenError`` unless the account has one of the roles.

    Args:
        account: The acting account.
        allowed_roles: Roles permitted for the operation.

    Raises:
        ForbiddenError: If the account's role is not allowed.
    """
    allowed = set(allowed_roles)
    if account.role not in allowed:
        names = " or ".join(sorted(allowed))
        raise ForbiddenError(f"Only {names} accounts can perform this action")

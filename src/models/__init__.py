"""Database models.

Importing this package registers every model with ``Base.metadata``.
"""

from .base import Base
from .user import UserModel
from .auth_session import AuthSessionModel
from .class_model import ClassModel
from .class_enrollment import ClassEnrollmentModel
from .assignment import AssignmentModel
from .submission import SubmissionModel
from .parent_child_link import ParentChildLinkModel
from .book import BookModel
from .reading_progress import ReadingProgressModel
from .achievement import AchievementModel, UserAchievementModel

__all__ = [
    "Base",
    "UserModel",
    "AuthSessionModel",
    "ClassModel",
    "ClassEnrollmentModel",
    "AssignmentModel",
    "SubmissionModel",
    "ParentChildLinkModel",
    "BookModel",
    "ReadingProgressModel",
    "AchievementModel",
    "UserAchievementModel",
]

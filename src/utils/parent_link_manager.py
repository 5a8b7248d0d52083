"""Parent-child linking.

A student owns a linking code; a parent who knows the code links to that
student's account.
"""

import logging
from datetime import datetime
from typing import List, Tuple

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import commit
from core.exceptions import NotFoundError
from models.parent_child_link import ParentChildLinkModel
from models.user import UserModel
from schemas.user import User
from utils.authorization import STUDENT
from utils.converters import model_to_user
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


class ParentLinkManager:
    """Manages links between parent and student accounts."""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserManager(db)

    def _get_link(self, parent_id: str, child_id: str):
        return (
            self.db.query(ParentChildLinkModel)
            .filter(
                ParentChildLinkModel.parent_id == parent_id,
                ParentChildLinkModel.child_id == child_id,
            )
            .first()
        )

    def link_with_child_code(
        self, parent_id: str, child_code: str
    ) -> Tuple[User, ParentChildLinkModel]:
        """Link a parent to the student owning ``child_code``.

        Linking twice returns the existing link.

        Args:
            parent_id: The parent's user ID.
            child_code: The student's linking code.

        Returns:
            The child account and the link.

        Raises:
            NotFoundError: If no student has this code.
        """
        child = self.users.get_by_linking_code(child_code)
        if child is None or child.role != STUDENT:
            raise NotFoundError("Child not found with the provided code")

        link = self._get_link(parent_id, child.user_id)
        if link is not None:
            return child, link

        link = ParentChildLinkModel(
            parent_id=parent_id,
            child_id=child.user_id,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(link)
        try:
            commit(self.db)
        except IntegrityError:
            # Concurrent request created the same link
            self.db.rollback()
            return child, self._get_link(parent_id, child.user_id)
        self.db.refresh(link)
        logger.info("Parent %s linked to student %s", parent_id, child.user_id)
        return child, link

    def unlink(self, parent_id: str, child_id: str) -> bool:
        """Remove a link.

        Returns:
            True if a link existed and was removed.
        """
        link = self._get_link(parent_id, child_id)
        if link is None:
            return False
        self.db.delete(link)
        commit(self.db)
        logger.info("Parent %s unlinked student %s", parent_id, child_id)
        return True

    def list_children(self, parent_id: str) -> List[Tuple[User, ParentChildLinkModel]]:
        rows = (
            self.db.query(ParentChildLinkModel, UserModel)
            .join(UserModel, UserModel.user_id == ParentChildLinkModel.child_id)
            .filter(ParentChildLinkModel.parent_id == parent_id)
            .order_by(ParentChildLinkModel.created_at)
            .all()
        )
        return [(model_to_user(user), link) for link, user in rows]

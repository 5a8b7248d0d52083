"""Achievement catalogue and awards."""

import logging
import uuid
from datetime import datetime
from typing import List

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import commit
from core.exceptions import NotFoundError
from models.achievement import AchievementModel, UserAchievementModel
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


class AchievementManager:
    """Manages achievements and which accounts have earned them."""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserManager(db)

    def create_achievement(
        self, name: str, description: str, icon: str, rarity: str = "common"
    ) -> AchievementModel:
        achievement = AchievementModel(
            achievement_id=str(uuid.uuid4()),
            name=name,
            description=description,
            icon=icon,
            rarity=rarity,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(achievement)
        commit(self.db)
        self.db.refresh(achievement)
        return achievement

    def list_achievements(self) -> List[AchievementModel]:
        return self.db.query(AchievementModel).order_by(AchievementModel.name).all()

    def _get_award(self, user_id: str, achievement_id: str):
        return (
            self.db.query(UserAchievementModel)
            .filter(
                UserAchievementModel.user_id == user_id,
                UserAchievementModel.achievement_id == achievement_id,
            )
            .first()
        )

    def award(self, user_id: str, achievement_id: str) -> UserAchievementModel:
        """Award an achievement to an account.

        An account earns each achievement once; awarding it again returns
        the existing award.

        Raises:
            NotFoundError: If the account or the achievement does not exist.
        """
        if self.users.get_by_id(user_id) is None:
            raise NotFoundError(f"User '{user_id}' not found")
        achievement = (
            self.db.query(AchievementModel)
            .filter(AchievementModel.achievement_id == achievement_id)
            .first()
        )
        if achievement is None:
            raise NotFoundError(f"Achievement '{achievement_id}' not found")

        existing = self._get_award(user_id, achievement_id)
        if existing is not None:
            return existing

        award = UserAchievementModel(
            user_id=user_id,
            achievement_id=achievement_id,
            earned_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(award)
        try:
            commit(self.db)
        except IntegrityError:
            self.db.rollback()
            return self._get_award(user_id, achievement_id)
        self.db.refresh(award)
        logger.info("User %s earned achievement %s", user_id, achievement.name)
        return award

    def list_for_user(self, user_id: str) -> List[UserAchievementModel]:
        return (
            self.db.query(UserAchievementModel)
            .filter(UserAchievementModel.user_id == user_id)
            .order_by(UserAchievementModel.earned_at.desc())
            .all()
        )

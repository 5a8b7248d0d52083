from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base


class AchievementModel(Base):
    __tablename__ = "achievements"

    achievement_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False)
    icon = Column(String, nullable=False)
    rarity = Column(String, nullable=False, default="common", index=True)
    created_at = Column(String, nullable=False)


class UserAchievementModel(Base):
    __tablename__ = "user_achievements"
    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    achievement_id = Column(
        String, ForeignKey("achievements.achievement_id", ondelete="CASCADE"), index=True, nullable=False
    )
    earned_at = Column(String, nullable=False)

    achievement = relationship("AchievementModel")

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from .base import Base


class AssignmentModel(Base):
    __tablename__ = "assignments"

    assignment_id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    instructions = Column(Text, nullable=True)
    class_id = Column(String, ForeignKey("classes.class_id", ondelete="CASCADE"), index=True, nullable=False)
    teacher_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    due_date = Column(String, index=True, nullable=False)  # ISO format string
    max_score = Column(Integer, nullable=False, default=100)
    topic = Column(String, nullable=True)
    youtube_link = Column(String, nullable=True)
    drive_link = Column(String, nullable=True)
    created_at = Column(String, nullable=False)

    class_ = relationship("ClassModel", back_populates="assignments")
    submissions = relationship(
        "SubmissionModel",
        back_populates="assignment",
        cascade="all, delete-orphan",
    )

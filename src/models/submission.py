from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base


class SubmissionModel(Base):
    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    submission_id = Column(String, primary_key=True, index=True)
    assignment_id = Column(String, ForeignKey("assignments.assignment_id", ondelete="CASCADE"), index=True)
    student_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True)
    content = Column(Text, nullable=True)
    # 'not-started', 'in-progress', 'submitted', or 'graded'
    status = Column(String, nullable=False, default="not-started")
    score = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)
    submitted_at = Column(String, nullable=True)
    graded_at = Column(String, nullable=True)
    created_at = Column(String, nullable=False)

    assignment = relationship("AssignmentModel", back_populates="submissions")

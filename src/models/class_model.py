from sqlalchemy import Column, ForeignKey, String
from sqlalchemy.orm import relationship
from .base import Base


class ClassModel(Base):
    __tablename__ = "classes"

    class_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    code = Column(String, unique=True, index=True, nullable=False)
    teacher_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    enrollments = relationship(
        "ClassEnrollmentModel",
        back_populates="class_",
        cascade="all, delete-orphan",
    )
    assignments = relationship(
        "AssignmentModel",
        back_populates="class_",
        cascade="all, delete-orphan",
    )

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base


class ClassEnrollmentModel(Base):
    __tablename__ = "class_enrollments"
    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_enrollment_class_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    class_id = Column(String, ForeignKey("classes.class_id", ondelete="CASCADE"), index=True)
    student_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True)
    status = Column(String, nullable=False, default="active")
    enrolled_at = Column(String, nullable=False)

    class_ = relationship("ClassModel", back_populates="enrollments")

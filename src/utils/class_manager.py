"""Class management utilities."""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import CODE_INSERT_ATTEMPTS
from core.database import commit
from core.exceptions import AlreadyEnrolledError, ForbiddenError, LitPlatformError, NotFoundError
from models.class_enrollment import ClassEnrollmentModel
from models.class_model import ClassModel
from utils.code_generator import generate_unique_code

logger = logging.getLogger(__name__)


class ClassManager:
    """Manages classes, join codes, and enrollments."""

    def __init__(self, db: Session):
        self.db = db

    def _code_exists(self, code: str) -> bool:
        return (
            self.db.query(ClassModel.class_id).filter(ClassModel.code == code).first()
            is not None
        )

    def create_class(self, name: str, teacher_id: str) -> ClassModel:
        """Create a new class with a unique join code.

        A unique-index violation on insert means another class took the code
        between the check and the insert; a fresh code is drawn.
        """
        for _ in range(CODE_INSERT_ATTEMPTS):
            now = datetime.now(pytz.utc).isoformat()
            class_model = ClassModel(
                class_id=uuid.uuid4().hex,
                name=name,
                code=generate_unique_code(self._code_exists),
                teacher_id=teacher_id,
                created_at=now,
                updated_at=now,
            )
            self.db.add(class_model)
            try:
                commit(self.db)
            except IntegrityError:
                self.db.rollback()
                logger.warning("Class code collided on insert, drawing a new one")
                continue
            self.db.refresh(class_model)
            logger.info("Teacher %s created class %s", teacher_id, class_model.class_id)
            return class_model

        raise LitPlatformError("Could not allocate a unique class code")

    def get_class(self, class_id: str) -> ClassModel:
        model = (
            self.db.query(ClassModel)
            .filter(ClassModel.class_id == class_id)
            .first()
        )
        if not model:
            raise NotFoundError(f"Class '{class_id}' not found")
        return model

    def get_class_by_code(self, code: str) -> Optional[ClassModel]:
        return self.db.query(ClassModel).filter(ClassModel.code == code).first()

    def list_classes_for_teacher(self, teacher_id: str) -> List[ClassModel]:
        return (
            self.db.query(ClassModel)
            .filter(ClassModel.teacher_id == teacher_id)
            .order_by(ClassModel.created_at.desc())
            .all()
        )

    def list_classes_for_student(self, student_id: str) -> List[ClassModel]:
        return (
            self.db.query(ClassModel)
            .join(ClassEnrollmentModel, ClassEnrollmentModel.class_id == ClassModel.class_id)
            .filter(ClassEnrollmentModel.student_id == student_id)
            .order_by(ClassEnrollmentModel.enrolled_at.desc())
            .all()
        )

    def get_enrollment(self, class_id: str, student_id: str) -> Optional[ClassEnrollmentModel]:
        return (
            self.db.query(ClassEnrollmentModel)
            .filter(
                ClassEnrollmentModel.class_id == class_id,
                ClassEnrollmentModel.student_id == student_id,
            )
            .first()
        )

    def join_by_code(self, code: str, student_id: str) -> ClassEnrollmentModel:
        """Enroll a student in the class with the given join code.

        Args:
            code: Class join code.
            student_id: Student joining the class.

        Returns:
            The new enrollment.

        Raises:
            NotFoundError: If no class has this code.
            AlreadyEnrolledError: If the student is already enrolled.
        """
        class_model = self.get_class_by_code(code)
        if class_model is None:
            raise NotFoundError("Invalid class code")
        if self.get_enrollment(class_model.class_id, student_id) is not None:
            raise AlreadyEnrolledError("Already enrolled in this class")

        enrollment = ClassEnrollmentModel(
            class_id=class_model.class_id,
            student_id=student_id,
            status="active",
            enrolled_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(enrollment)
        try:
            commit(self.db)
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadyEnrolledError("Already enrolled in this class") from e
        self.db.refresh(enrollment)
        logger.info("Student %s joined class %s", student_id, class_model.class_id)
        return enrollment

    def leave_class(self, class_id: str, student_id: str) -> None:
        """Remove a student's enrollment.

        Raises:
            NotFoundError: If the class does not exist or the student is not
                enrolled.
        """
        self.get_class(class_id)
        enrollment = self.get_enrollment(class_id, student_id)
        if enrollment is None:
            raise NotFoundError("Not enrolled in this class")
        self.db.delete(enrollment)
        commit(self.db)
        logger.info("Student %s left class %s", student_id, class_id)

    def delete_class(self, class_id: str, teacher_id: str) -> None:
        """Delete a class with its enrollments and assignments.

        Only the teacher who owns the class can delete it.

        Raises:
            NotFoundError: If the class does not exist.
            ForbiddenError: If the teacher does not own the class.
        """
        class_model = self.get_class(class_id)
        if class_model.teacher_id != teacher_id:
            raise ForbiddenError("Only the class owner can delete the class")
        self.db.delete(class_model)
        commit(self.db)
        logger.info("Deleted class: %s", class_id)

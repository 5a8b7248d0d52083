"""Assignment and submission management utilities."""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import commit
from core.exceptions import (
    AlreadySubmittedError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from models.assignment import AssignmentModel
from models.class_enrollment import ClassEnrollmentModel
from models.submission import SubmissionModel
from utils.class_manager import ClassManager

logger = logging.getLogger(__name__)


def _to_utc_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(pytz.utc).isoformat()


class AssignmentManager:
    """Manages assignments and student submissions."""

    def __init__(self, db: Session):
        self.db = db
        self.classes = ClassManager(db)

    def create_assignment(
        self,
        teacher_id: str,
        class_id: str,
        title: str,
        due_date: datetime,
        description: Optional[str] = None,
        instructions: Optional[str] = None,
        max_score: int = 100,
        topic: Optional[str] = None,
        youtube_link: Optional[str] = None,
        drive_link: Optional[str] = None,
    ) -> AssignmentModel:
        """Create an assignment in a class the teacher owns.

        Raises:
            NotFoundError: If the class does not exist.
            ForbiddenError: If the class belongs to another teacher.
        """
        class_model = self.classes.get_class(class_id)
        if class_model.teacher_id != teacher_id:
            raise ForbiddenError("You can only create assignments for your own classes")

        model = AssignmentModel(
            assignment_id=uuid.uuid4().hex,
            title=title,
            description=description,
            instructions=instructions,
            class_id=class_id,
            teacher_id=teacher_id,
            due_date=_to_utc_iso(due_date),
            max_score=max_score,
            topic=topic,
            youtube_link=youtube_link,
            drive_link=drive_link,
            created_at=datetime.now(pytz.utc).isoformat(),
        )
        self.db.add(model)
        commit(self.db)
        self.db.refresh(model)
        logger.info("Teacher %s created assignment %s", teacher_id, model.assignment_id)
        return model

    def get_assignment(self, assignment_id: str) -> AssignmentModel:
        model = (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.assignment_id == assignment_id)
            .first()
        )
        if not model:
            raise NotFoundError(f"Assignment '{assignment_id}' not found")
        return model

    def list_for_teacher(self, teacher_id: str) -> List[AssignmentModel]:
        return (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.teacher_id == teacher_id)
            .order_by(AssignmentModel.due_date)
            .all()
        )

    def list_for_class(self, class_id: str) -> List[AssignmentModel]:
        return (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.class_id == class_id)
            .order_by(AssignmentModel.due_date)
            .all()
        )

    def list_for_student(self, student_id: str) -> List[AssignmentModel]:
        """Assignments of every class the student is enrolled in."""
        return (
            self.db.query(AssignmentModel)
            .join(
                ClassEnrollmentModel,
                ClassEnrollmentModel.class_id == AssignmentModel.class_id,
            )
            .filter(ClassEnrollmentModel.student_id == student_id)
            .order_by(AssignmentModel.due_date)
            .all()
        )

    def create_submission(
        self, student_id: str, assignment_id: str, content: Optional[str] = None
    ) -> SubmissionModel:
        """Submit work for an assignment.

        Raises:
            NotFoundError: If the assignment does not exist.
            ForbiddenError: If the student is not enrolled in its class.
            AlreadySubmittedError: If the student already submitted.
        """
        assignment = self.get_assignment(assignment_id)
        if self.classes.get_enrollment(assignment.class_id, student_id) is None:
            raise ForbiddenError("You are not enrolled in this assignment's class")

        existing = (
            self.db.query(SubmissionModel)
            .filter(
                SubmissionModel.assignment_id == assignment_id,
                SubmissionModel.student_id == student_id,
            )
            .first()
        )
        if existing:
            raise AlreadySubmittedError("Assignment already submitted")

        now = datetime.now(pytz.utc).isoformat()
        model = SubmissionModel(
            submission_id=uuid.uuid4().hex,
            assignment_id=assignment_id,
            student_id=student_id,
            content=content,
            status="submitted",
            submitted_at=now,
            created_at=now,
        )
        self.db.add(model)
        try:
            commit(self.db)
        except IntegrityError as e:
            self.db.rollback()
            raise AlreadySubmittedError("Assignment already submitted") from e
        self.db.refresh(model)
        logger.info("Student %s submitted assignment %s", student_id, assignment_id)
        return model

    def list_submissions_for_student(self, student_id: str) -> List[SubmissionModel]:
        return (
            self.db.query(SubmissionModel)
            .filter(SubmissionModel.student_id == student_id)
            .order_by(SubmissionModel.created_at.desc())
            .all()
        )

    def list_submissions_for_teacher(self, teacher_id: str) -> List[SubmissionModel]:
        return (
            self.db.query(SubmissionModel)
            .join(
                AssignmentModel,
                AssignmentModel.assignment_id == SubmissionModel.assignment_id,
            )
            .filter(AssignmentModel.teacher_id == teacher_id)
            .order_by(SubmissionModel.created_at.desc())
            .all()
        )

    def grade_submission(
        self,
        teacher_id: str,
        submission_id: str,
        score: int,
        feedback: Optional[str] = None,
    ) -> SubmissionModel:
        """Grade a submission to one of the teacher's assignments.

        Raises:
            NotFoundError: If the submission does not exist.
            ForbiddenError: If the assignment belongs to another teacher.
            ValidationError: If the score is outside ``[0, max_score]``.
        """
        model = (
            self.db.query(SubmissionModel)
            .filter(SubmissionModel.submission_id == submission_id)
            .first()
        )
        if not model:
            raise NotFoundError(f"Submission '{submission_id}' not found")
        assignment = self.get_assignment(model.assignment_id)
        if assignment.teacher_id != teacher_id:
            raise ForbiddenError("You can only grade submissions to your own assignments")
        if not 0 <= score <= assignment.max_score:
            raise ValidationError(f"Score must be between 0 and {assignment.max_score}")

        model.score = score
        model.feedback = feedback
        model.status = "graded"
        model.graded_at = datetime.now(pytz.utc).isoformat()
        commit(self.db)
        self.db.refresh(model)
        logger.info("Teacher %s graded submission %s", teacher_id, submission_id)
        return model

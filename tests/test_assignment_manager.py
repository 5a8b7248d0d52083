from datetime import datetime

import pytest
import pytz

from core.exceptions import (
    AlreadySubmittedError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from utils.assignment_manager import AssignmentManager
from utils.class_manager import ClassManager

DUE = datetime(2026, 11, 1, 17, 0, tzinfo=pytz.utc)


@pytest.fixture
def assignments(db):
    return AssignmentManager(db)


@pytest.fixture
def setup(db, make_account):
    teacher = make_account("teacher")
    student = make_account("student")
    classes = ClassManager(db)
    class_model = classes.create_class("Reading", teacher.user_id)
    classes.join_by_code(class_model.code, student.user_id)
    return teacher, student, class_model


def test_create_assignment(assignments, setup):
    teacher, _, class_model = setup

    model = assignments.create_assignment(
        teacher.user_id, class_model.class_id, "Chapter 1", DUE, topic="Fables"
    )

    assert model.max_score == 100
    assert model.due_date == DUE.isoformat()
    assert model.topic == "Fables"
    assert [a.assignment_id for a in assignments.list_for_class(class_model.class_id)] == [
        model.assignment_id
    ]


def test_naive_due_date_is_treated_as_utc(assignments, setup):
    teacher, _, class_model = setup
    model = assignments.create_assignment(
        teacher.user_id, class_model.class_id, "Chapter 1", datetime(2026, 11, 1, 17, 0)
    )
    assert model.due_date == DUE.isoformat()


def test_create_assignment_in_foreign_class(assignments, setup, make_account):
    _, _, class_model = setup
    other = make_account("teacher")

    with pytest.raises(ForbiddenError):
        assignments.create_assignment(other.user_id, class_model.class_id, "Nope", DUE)


def test_create_assignment_missing_class(assignments, setup):
    teacher, _, _ = setup
    with pytest.raises(NotFoundError):
        assignments.create_assignment(teacher.user_id, "missing", "Nope", DUE)


def test_lists_by_role(assignments, setup, make_account):
    teacher, student, class_model = setup
    outsider = make_account("student")
    model = assignments.create_assignment(teacher.user_id, class_model.class_id, "Ch 1", DUE)

    assert [a.assignment_id for a in assignments.list_for_teacher(teacher.user_id)] == [
        model.assignment_id
    ]
    assert [a.assignment_id for a in assignments.list_for_student(student.user_id)] == [
        model.assignment_id
    ]
    assert assignments.list_for_student(outsider.user_id) == []


def test_submission_flow(assignments, setup):
    teacher, student, class_model = setup
    assignment = assignments.create_assignment(teacher.user_id, class_model.class_id, "Ch 1", DUE)

    submission = assignments.create_submission(student.user_id, assignment.assignment_id, "essay")

    assert submission.status == "submitted"
    assert submission.submitted_at is not None
    assert [s.submission_id for s in assignments.list_submissions_for_student(student.user_id)] == [
        submission.submission_id
    ]
    assert [s.submission_id for s in assignments.list_submissions_for_teacher(teacher.user_id)] == [
        submission.submission_id
    ]

    graded = assignments.grade_submission(teacher.user_id, submission.submission_id, 90, "Good")
    assert graded.status == "graded"
    assert graded.score == 90
    assert graded.feedback == "Good"
    assert graded.graded_at is not None


def test_duplicate_submission(assignments, setup):
    teacher, student, class_model = setup
    assignment = assignments.create_assignment(teacher.user_id, class_model.class_id, "Ch 1", DUE)
    assignments.create_submission(student.user_id, assignment.assignment_id)

    with pytest.raises(AlreadySubmittedError):
        assignments.create_submission(student.user_id, assignment.assignment_id)


def test_submission_requires_enrollment(assignments, setup, make_account):
    teacher, _, class_model = setup
    outsider = make_account("student")
    assignment = assignments.create_assignment(teacher.user_id, class_model.class_id, "Ch 1", DUE)

    with pytest.raises(ForbiddenError):
        assignments.create_submission(outsider.user_id, assignment.assignment_id)


def test_submission_missing_assignment(assignments, setup):
    _, student, _ = setup
    with pytest.raises(NotFoundError):
        assignments.create_submission(student.user_id, "missing")


def test_grading_rules(assignments, setup, make_account):
    teacher, student, class_model = setup
    other = make_account("teacher")
    assignment = assignments.create_assignment(
        teacher.user_id, class_model.class_id, "Ch 1", DUE, max_score=10
    )
    submission = assignments.create_submission(student.user_id, assignment.assignment_id)

    with pytest.raises(ForbiddenError):
        assignments.grade_submission(other.user_id, submission.submission_id, 5)
    with pytest.raises(ValidationError):
        assignments.grade_submission(teacher.user_id, submission.submission_id, 11)
    with pytest.raises(ValidationError):
        assignments.grade_submission(teacher.user_id, submission.submission_id, -1)
    with pytest.raises(NotFoundError):
        assignments.grade_submission(teacher.user_id, "missing", 5)

    assert assignments.grade_submission(teacher.user_id, submission.submission_id, 10).score == 10


def test_deleting_class_removes_assignments(db, assignments, setup):
    teacher, student, class_model = setup
    assignment = assignments.create_assignment(teacher.user_id, class_model.class_id, "Ch 1", DUE)
    assignments.create_submission(student.user_id, assignment.assignment_id)

    ClassManager(db).delete_class(class_model.class_id, teacher.user_id)

    assert assignments.list_for_teacher(teacher.user_id) == []
    assert assignments.list_submissions_for_student(student.user_id) == []

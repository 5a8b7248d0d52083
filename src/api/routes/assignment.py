"""Assignment and submission routes."""

from typing import List

from fastapi import APIRouter, HTTPException, status

from core.dependencies import (
    AssignmentManagerDep,
    CurrentUserDep,
    ParentLinkManagerDep,
    StudentDep,
    TeacherDep,
)
from core.exceptions import (
    AlreadySubmittedError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from schemas.assignment import (
    AssignmentInfo,
    CreateAssignmentRequest,
    CreateSubmissionRequest,
    GradeSubmissionRequest,
    SubmissionInfo,
)
from utils.authorization import PARENT, STUDENT, TEACHER

router = APIRouter(prefix="/api", tags=["Assignment"])


def _raise_http(e: Exception) -> None:
    if isinstance(e, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, ForbiddenError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(e, AlreadySubmittedError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    raise HTTPException(status_code=code, detail=str(e))


@router.post(
    "/assignments",
    response_model=AssignmentInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Create an assignment",
)
def create_assignment(
    req: CreateAssignmentRequest,
    assignment_manager: AssignmentManagerDep,
    current_user: TeacherDep,
) -> AssignmentInfo:
    """Create an assignment in one of the teacher's classes.

    Raises:
        HTTPException: 404 if the class does not exist, 403 if another
            teacher owns it.
    """
    try:
        model = assignment_manager.create_assignment(
            teacher_id=current_user.user_id,
            **req.model_dump(),
        )
    except (NotFoundError, ForbiddenError) as e:
        _raise_http(e)
    return AssignmentInfo.model_validate(model)


@router.get("/assignments", response_model=List[AssignmentInfo], summary="List assignments")
def list_assignments(
    assignment_manager: AssignmentManagerDep,
    parent_links: ParentLinkManagerDep,
    current_user: CurrentUserDep,
) -> List[AssignmentInfo]:
    """List assignments visible to the current account.

    Teachers see what they created, students see the assignments of their
    classes, parents see those of their linked children.
    """
    if current_user.role == TEACHER:
        models = assignment_manager.list_for_teacher(current_user.user_id)
    elif current_user.role == STUDENT:
        models = assignment_manager.list_for_student(current_user.user_id)
    else:
        seen = {}
        for child, _ in parent_links.list_children(current_user.user_id):
            for model in assignment_manager.list_for_student(child.user_id):
                seen.setdefault(model.assignment_id, model)
        models = sorted(seen.values(), key=lambda m: m.due_date)
    return [AssignmentInfo.model_validate(model) for model in models]


@router.post(
    "/submissions",
    response_model=SubmissionInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an assignment",
)
def create_submission(
    req: CreateSubmissionRequest,
    assignment_manager: AssignmentManagerDep,
    current_user: StudentDep,
) -> SubmissionInfo:
    """Submit work for an assignment of an enrolled class.

    Raises:
        HTTPException: 404 if the assignment does not exist, 403 if the
            student is not enrolled, 409 if already submitted.
    """
    try:
        model = assignment_manager.create_submission(
            current_user.user_id, req.assignment_id, req.content
        )
    except (NotFoundError, ForbiddenError, AlreadySubmittedError) as e:
        _raise_http(e)
    return SubmissionInfo.model_validate(model)


@router.get("/submissions", response_model=List[SubmissionInfo], summary="List submissions")
def list_submissions(
    assignment_manager: AssignmentManagerDep,
    parent_links: ParentLinkManagerDep,
    current_user: CurrentUserDep,
) -> List[SubmissionInfo]:
    if current_user.role == TEACHER:
        models = assignment_manager.list_submissions_for_teacher(current_user.user_id)
    elif current_user.role == PARENT:
        models = []
        for child, _ in parent_links.list_children(current_user.user_id):
            models.extend(assignment_manager.list_submissions_for_student(child.user_id))
    else:
        models = assignment_manager.list_submissions_for_student(current_user.user_id)
    return [SubmissionInfo.model_validate(model) for model in models]


@router.put(
    "/submissions/{submission_id}/grade",
    response_model=SubmissionInfo,
    summary="Grade a submission",
)
def grade_submission(
    submission_id: str,
    req: GradeSubmissionRequest,
    assignment_manager: AssignmentManagerDep,
    current_user: TeacherDep,
) -> SubmissionInfo:
    try:
        model = assignment_manager.grade_submission(
            current_user.user_id, submission_id, req.score, req.feedback
        )
    except (NotFoundError, ForbiddenError, ValidationError) as e:
        _raise_http(e)
    return SubmissionInfo.model_validate(model)

"""Class management routes."""

from typing import List

from fastapi import APIRouter, HTTPException, status

from core.dependencies import (
    AssignmentManagerDep,
    ClassManagerDep,
    CurrentUserDep,
    StudentDep,
    TeacherDep,
)
from core.exceptions import AlreadyEnrolledError, ForbiddenError, NotFoundError
from schemas.assignment import AssignmentInfo
from schemas.classroom import (
    ClassInfo,
    CreateClassRequest,
    EnrollmentInfo,
    JoinClassRequest,
    JoinClassResponse,
)
from schemas.user import MessageResponse
from utils.authorization import STUDENT, TEACHER

router = APIRouter(prefix="/api/classes", tags=["Class"])


@router.post(
    "",
    response_model=ClassInfo,
    status_code=status.HTTP_201_CREATED,
    summary="Create a class",
)
def create_class(
    req: CreateClassRequest,
    class_manager: ClassManagerDep,
    current_user: TeacherDep,
) -> ClassInfo:
    name = req.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Class name cannot be empty.",
        )
    class_model = class_manager.create_class(name, current_user.user_id)
    return ClassInfo.model_validate(class_model)


@router.get("", response_model=List[ClassInfo], summary="List classes")
def list_classes(
    class_manager: ClassManagerDep,
    current_user: CurrentUserDep,
) -> List[ClassInfo]:
    """List the classes a teacher owns or a student is enrolled in.

    Parents have no classes of their own and get an empty list.
    """
    if current_user.role == TEACHER:
        models = class_manager.list_classes_for_teacher(current_user.user_id)
    elif current_user.role == STUDENT:
        models = class_manager.list_classes_for_student(current_user.user_id)
    else:
        models = []
    return [ClassInfo.model_validate(model) for model in models]


@router.post("/join", response_model=JoinClassResponse, summary="Join a class by code")
def join_class(
    req: JoinClassRequest,
    class_manager: ClassManagerDep,
    current_user: StudentDep,
) -> JoinClassResponse:
    """Join a class using its join code.

    Args:
        req: Join request with the class code.
        class_manager: Injected ClassManager instance.
        current_user: Current authenticated student.

    Returns:
        JoinClassResponse with the class and the new enrollment.

    Raises:
        HTTPException: 404 if the code is unknown, 409 if already enrolled.
    """
    try:
        enrollment = class_manager.join_by_code(
            req.class_code.strip().upper(), current_user.user_id
        )
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except AlreadyEnrolledError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    return JoinClassResponse(
        message="Successfully joined class",
        class_info=ClassInfo.model_validate(enrollment.class_),
        enrollment=EnrollmentInfo.model_validate(enrollment),
    )


@router.post(
    "/{class_id}/leave",
    response_model=MessageResponse,
    summary="Leave a class",
)
def leave_class(
    class_id: str,
    class_manager: ClassManagerDep,
    current_user: StudentDep,
) -> MessageResponse:
    try:
        class_manager.leave_class(class_id, current_user.user_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    return MessageResponse(message="Left class")


@router.delete("/{class_id}", response_model=MessageResponse, summary="Delete a class")
def delete_class(
    class_id: str,
    class_manager: ClassManagerDep,
    current_user: TeacherDep,
) -> MessageResponse:
    """Delete a class with its enrollments, assignments and submissions.

    Raises:
        HTTPException: 404 if the class does not exist, 403 if another
            teacher owns it.
    """
    try:
        class_manager.delete_class(class_id, current_user.user_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except ForbiddenError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        )
    return MessageResponse(message="Class deleted")


@router.get(
    "/{class_id}/assignments",
    response_model=List[AssignmentInfo],
    summary="List the assignments of a class",
)
def list_class_assignments(
    class_id: str,
    class_manager: ClassManagerDep,
    assignment_manager: AssignmentManagerDep,
    current_user: CurrentUserDep,
) -> List[AssignmentInfo]:
    """List a class's assignments for its teacher or an enrolled student.

    Raises:
        HTTPException: 404 if the class does not exist, 403 for anyone else.
    """
    try:
        class_model = class_manager.get_class(class_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    is_owner = class_model.teacher_id == current_user.user_id
    is_member = (
        current_user.role == STUDENT
        and class_manager.get_enrollment(class_id, current_user.user_id) is not None
    )
    if not (is_owner or is_member):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this class",
        )
    models = assignment_manager.list_for_class(class_id)
    return [AssignmentInfo.model_validate(model) for model in models]

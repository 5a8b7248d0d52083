"""Account and profile routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from core.dependencies import CurrentUserDep, UserManagerDep, require_admin
from core.exceptions import DuplicateEmailError, ValidationError, WeakPasswordError
from schemas.user import (
    AuthResponse,
    MessageResponse,
    ProfilePictureRequest,
    UpdateProfileRequest,
    User,
    UserPublic,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["User"])


def _apply_update(user_manager, current_user: User, **fields) -> User:
    try:
        user = user_manager.update_account(current_user.user_id, **fields)
    except DuplicateEmailError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    except (ValidationError, WeakPasswordError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


@router.get("/users/{user_id}", response_model=UserPublic, summary="Get an account")
def get_user(
    user_id: str,
    user_manager: UserManagerDep,
    current_user: CurrentUserDep,
) -> UserPublic:
    user = user_manager.get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user.to_public()


@router.put("/profile", response_model=AuthResponse, summary="Update own profile")
def update_profile(
    req: UpdateProfileRequest,
    user_manager: UserManagerDep,
    current_user: CurrentUserDep,
) -> AuthResponse:
    """Update name, email or password of the current account.

    Only fields present in the body are changed. The role cannot be
    changed; a body carrying ``role`` is rejected with 422.
    """
    fields = req.model_dump(exclude_unset=True)
    if "name" in fields and fields["name"] is not None:
        fields["name"] = fields["name"].strip()
    user = _apply_update(user_manager, current_user, **fields)
    return AuthResponse(user=user.to_public())


@router.put(
    "/profile/picture",
    response_model=AuthResponse,
    summary="Set profile picture",
)
def set_profile_picture(
    req: ProfilePictureRequest,
    user_manager: UserManagerDep,
    current_user: CurrentUserDep,
) -> AuthResponse:
    user = _apply_update(user_manager, current_user, profile_picture=req.profile_picture)
    return AuthResponse(user=user.to_public())


@router.delete(
    "/profile/picture",
    response_model=AuthResponse,
    summary="Remove profile picture",
)
def remove_profile_picture(
    user_manager: UserManagerDep,
    current_user: CurrentUserDep,
) -> AuthResponse:
    user = _apply_update(user_manager, current_user, profile_picture=None)
    return AuthResponse(user=user.to_public())


@router.delete(
    "/admin/users/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
    summary="Delete an account",
)
def delete_user(
    user_id: str,
    user_manager: UserManagerDep,
) -> MessageResponse:
    """Delete an account with its sessions, links, enrollments and submissions.

    Requires the ``X-Admin-Token`` header.
    """
    if not user_manager.delete_account(user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    logger.info("Admin deleted account %s", user_id)
    return MessageResponse(message="User deleted successfully")

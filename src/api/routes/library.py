"""Book, reading progress and achievement routes."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from core.dependencies import (
    AchievementManagerDep,
    CurrentUserDep,
    ReadingProgressManagerDep,
    require_admin,
)
from core.exceptions import NotFoundError, ValidationError
from schemas.library import (
    AchievementInfo,
    AwardAchievementRequest,
    BookInfo,
    CreateAchievementRequest,
    CreateBookRequest,
    ReadingProgressInfo,
    UpdateReadingProgressRequest,
    UserAchievementInfo,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Library"])


@router.get("/books", response_model=List[BookInfo], summary="List books")
def list_books(
    progress_manager: ReadingProgressManagerDep,
    current_user: CurrentUserDep,
    genre: Optional[str] = None,
) -> List[BookInfo]:
    return [BookInfo.model_validate(m) for m in progress_manager.list_books(genre)]


@router.post(
    "/admin/books",
    response_model=BookInfo,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    summary="Add a book",
)
def create_book(
    req: CreateBookRequest,
    progress_manager: ReadingProgressManagerDep,
) -> BookInfo:
    return BookInfo.model_validate(progress_manager.create_book(**req.model_dump()))


@router.get(
    "/reading-progress",
    response_model=List[ReadingProgressInfo],
    summary="List the current account's reading progress",
)
def list_reading_progress(
    progress_manager: ReadingProgressManagerDep,
    current_user: CurrentUserDep,
) -> List[ReadingProgressInfo]:
    models = progress_manager.list_progress(current_user.user_id)
    return [ReadingProgressInfo.model_validate(m) for m in models]


@router.get(
    "/reading-progress/{book_id}",
    response_model=ReadingProgressInfo,
    summary="Get reading progress for one book",
)
def get_reading_progress(
    book_id: str,
    progress_manager: ReadingProgressManagerDep,
    current_user: CurrentUserDep,
) -> ReadingProgressInfo:
    model = progress_manager.get_progress(current_user.user_id, book_id)
    if model is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No reading progress for this book",
        )
    return ReadingProgressInfo.model_validate(model)


@router.put(
    "/reading-progress/{book_id}",
    response_model=ReadingProgressInfo,
    summary="Update reading progress for one book",
)
def update_reading_progress(
    book_id: str,
    req: UpdateReadingProgressRequest,
    progress_manager: ReadingProgressManagerDep,
    current_user: CurrentUserDep,
) -> ReadingProgressInfo:
    """Record progress on a book, starting it if needed.

    Raises:
        HTTPException: 404 if the book does not exist, 400 if a value is
            out of range.
    """
    try:
        model = progress_manager.update_progress(
            current_user.user_id,
            book_id,
            status=req.status,
            progress=req.progress,
        )
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return ReadingProgressInfo.model_validate(model)


@router.get("/achievements", response_model=List[AchievementInfo], summary="List achievements")
def list_achievements(
    achievements: AchievementManagerDep,
    current_user: CurrentUserDep,
) -> List[AchievementInfo]:
    return [AchievementInfo.model_validate(m) for m in achievements.list_achievements()]


@router.post(
    "/admin/achievements",
    response_model=AchievementInfo,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    summary="Add an achievement",
)
def create_achievement(
    req: CreateAchievementRequest,
    achievements: AchievementManagerDep,
) -> AchievementInfo:
    return AchievementInfo.model_validate(achievements.create_achievement(**req.model_dump()))


@router.get(
    "/user-achievements",
    response_model=List[UserAchievementInfo],
    summary="List the current account's achievements",
)
def list_user_achievements(
    achievements: AchievementManagerDep,
    current_user: CurrentUserDep,
) -> List[UserAchievementInfo]:
    models = achievements.list_for_user(current_user.user_id)
    return [UserAchievementInfo.model_validate(m) for m in models]


@router.post(
    "/admin/user-achievements",
    response_model=UserAchievementInfo,
    dependencies=[Depends(require_admin)],
    summary="Award an achievement",
)
def award_achievement(
    req: AwardAchievementRequest,
    achievements: AchievementManagerDep,
) -> UserAchievementInfo:
    try:
        award = achievements.award(req.user_id, req.achievement_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    logger.info("Admin awarded achievement %s to %s", req.achievement_id, req.user_id)
    return UserAchievementInfo.model_validate(award)

"""Parent-child linking routes."""

from typing import List

from fastapi import APIRouter, HTTPException, status

from core.dependencies import ParentDep, ParentLinkManagerDep
from core.exceptions import NotFoundError
from schemas.parent import ChildInfo, LinkChildRequest, LinkChildResponse
from schemas.user import MessageResponse

router = APIRouter(prefix="/api/parent", tags=["Parent"])


def _build_child_info(child, link) -> ChildInfo:
    return ChildInfo(
        user_id=child.user_id,
        name=child.name,
        email=child.email,
        student_code=child.student_code,
        profile_picture=child.profile_picture,
        linked_at=link.created_at,
    )


@router.get("/children", response_model=List[ChildInfo], summary="List linked children")
def list_children(
    parent_links: ParentLinkManagerDep,
    current_user: ParentDep,
) -> List[ChildInfo]:
    return [
        _build_child_info(child, link)
        for child, link in parent_links.list_children(current_user.user_id)
    ]


@router.post("/link-child", response_model=LinkChildResponse, summary="Link a child by code")
def link_child(
    req: LinkChildRequest,
    parent_links: ParentLinkManagerDep,
    current_user: ParentDep,
) -> LinkChildResponse:
    """Link the current parent to the student owning the code.

    Linking an already linked child succeeds and changes nothing.

    Raises:
        HTTPException: 404 if no student has the code.
    """
    try:
        child, link = parent_links.link_with_child_code(
            current_user.user_id, req.child_code.strip().upper()
        )
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    return LinkChildResponse(
        message="Child linked successfully",
        child=_build_child_info(child, link),
    )


@router.delete(
    "/unlink-child/{child_id}",
    response_model=MessageResponse,
    summary="Unlink a child",
)
def unlink_child(
    child_id: str,
    parent_links: ParentLinkManagerDep,
    current_user: ParentDep,
) -> MessageResponse:
    if not parent_links.unlink(current_user.user_id, child_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Child link not found",
        )
    return MessageResponse(message="Child unlinked successfully")

"""Parent-child linking schema definitions."""

from typing import Optional

from pydantic import BaseModel, Field


class LinkChildRequest(BaseModel):
    child_code: str = Field(min_length=1)


class ChildInfo(BaseModel):
    user_id: str
    name: str
    email: str
    student_code: Optional[str] = None
    profile_picture: Optional[str] = None
    linked_at: str


class LinkChildResponse(BaseModel):
    message: str
    child: ChildInfo

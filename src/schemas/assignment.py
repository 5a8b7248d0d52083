"""Assignment and submission schema definitions."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateAssignmentRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    class_id: str = Field(min_length=1)
    due_date: datetime
    description: Optional[str] = None
    instructions: Optional[str] = None
    max_score: int = Field(default=100, ge=1)
    topic: Optional[str] = None
    youtube_link: Optional[str] = None
    drive_link: Optional[str] = None


class AssignmentInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    assignment_id: str
    title: str
    description: Optional[str] = None
    instructions: Optional[str] = None
    class_id: str
    teacher_id: str
    due_date: str
    max_score: int
    topic: Optional[str] = None
    youtube_link: Optional[str] = None
    drive_link: Optional[str] = None
    created_at: str


class CreateSubmissionRequest(BaseModel):
    assignment_id: str = Field(min_length=1)
    content: Optional[str] = None


class GradeSubmissionRequest(BaseModel):
    score: int = Field(ge=0)
    feedback: Optional[str] = None


class SubmissionInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    submission_id: str
    assignment_id: str
    student_id: str
    content: Optional[str] = None
    status: str
    score: Optional[int] = None
    feedback: Optional[str] = None
    submitted_at: Optional[str] = None
    graded_at: Optional[str] = None
    created_at: str

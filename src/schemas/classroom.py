"""Class and enrollment schema definitions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateClassRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)


class JoinClassRequest(BaseModel):
    class_code: str = Field(min_length=1)


class ClassInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    class_id: str
    name: str
    code: str
    teacher_id: str
    created_at: str
    updated_at: str


class EnrollmentInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    class_id: str
    student_id: str
    status: str
    enrolled_at: str


class JoinClassResponse(BaseModel):
    message: str
    class_info: ClassInfo
    enrollment: Optional[EnrollmentInfo] = None

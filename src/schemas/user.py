"""User schema definitions.

This module defines the User domain model and the request/response models of
the authentication and profile endpoints.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

import pytz
from pydantic import BaseModel, ConfigDict, Field

Role = Literal["student", "teacher", "parent"]

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class User(BaseModel):
    """An account as held by the credential store.

    Carries the password hash and reset-token fields, so it must never be
    returned from an endpoint directly. Use ``to_public()``.
    """
    user_id: str = Field(
        description="The unique identifier for the user.",
        default_factory=lambda: uuid.uuid4().hex,
        frozen=True,
    )
    name: str = Field(description="Display name.")
    email: str = Field(description="Unique email, matched case-sensitively.")
    password_hash: str = Field(description="bcrypt hash of the password.")
    role: Role = Field(description="Role, fixed at creation.")
    student_code: Optional[str] = Field(
        default=None,
        description="Code a parent uses to link to this student.",
    )
    profile_picture: Optional[str] = None
    google_id: Optional[str] = None
    email_verified: bool = False
    password_reset_token: Optional[str] = Field(
        default=None,
        description="SHA-256 digest of the pending reset token.",
    )
    password_reset_expires: Optional[str] = None
    created_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat()
    )
    updated_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat()
    )

    def to_public(self) -> "UserPublic":
        return UserPublic.model_validate(self.model_dump())


class UserPublic(BaseModel):
    """User fields that are safe to return to clients."""
    user_id: str
    name: str
    email: str
    role: Role
    student_code: Optional[str] = None
    profile_picture: Optional[str] = None
    email_verified: bool = False
    created_at: str
    updated_at: str


class SignupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=254)
    password: str = Field(min_length=1)
    role: Role


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AuthResponse(BaseModel):
    user: UserPublic


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UpdateProfileRequest(BaseModel):
    """Partial profile update. Role is intentionally absent."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=254)
    password: Optional[str] = None


class ProfilePictureRequest(BaseModel):
    profile_picture: str = Field(min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: str = Field(min_length=1)


class ValidateResetTokenRequest(BaseModel):
    token: str = Field(min_length=1)


class ValidateResetTokenResponse(BaseModel):
    valid: bool


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    new_password: str

"""User database model.

This module defines the User (account) database model using SQLAlchemy.
"""

from sqlalchemy import Boolean, Column, String
from .base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False)  # 'student', 'teacher', or 'parent'
    student_code = Column(String, unique=True, index=True, nullable=True)  # students only
    profile_picture = Column(String, nullable=True)
    google_id = Column(String, index=True, nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    password_reset_token = Column(String, unique=True, index=True, nullable=True)  # sha256 digest
    password_reset_expires = Column(String, nullable=True)  # ISO format string
    created_at = Column(String, nullable=False)  # ISO format string
    updated_at = Column(String, nullable=False)  # ISO format string

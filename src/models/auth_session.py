"""Server-side login session model."""

from sqlalchemy import Column, ForeignKey, String
from .base import Base


class AuthSessionModel(Base):
    """Maps an opaque session id (the cookie value) to a user id."""

    __tablename__ = "auth_sessions"

    session_id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(String, nullable=False)
    expires_at = Column(String, nullable=False)

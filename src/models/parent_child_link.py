from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from .base import Base


class ParentChildLinkModel(Base):
    __tablename__ = "parent_child_links"
    __table_args__ = (
        UniqueConstraint("parent_id", "child_id", name="uq_parent_child"),
    )

    id = Column(Integer, primary_key=True, index=True)
    parent_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    child_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(String, nullable=False)

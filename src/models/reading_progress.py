from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base


class ReadingProgressModel(Base):
    """One row per reader and book."""

    __tablename__ = "reading_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_reading_progress_user_book"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False)
    book_id = Column(String, ForeignKey("books.book_id", ondelete="CASCADE"), index=True, nullable=False)
    # 'reading', 'completed', or 'wishlist'
    status = Column(String, nullable=False, default="reading")
    # Percent read, 0 to 100
    progress = Column(Integer, nullable=False, default=0)
    started_at = Column(String, nullable=False)
    completed_at = Column(String, nullable=True)
    updated_at = Column(String, nullable=False)

    book = relationship("BookModel")

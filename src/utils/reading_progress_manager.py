"""Book catalogue and per-reader progress.

Each reader has at most one progress row per book. Updating progress for a
book the reader has not started creates the row.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import commit
from core.exceptions import NotFoundError, ValidationError
from models.book import BookModel
from models.reading_progress import ReadingProgressModel

logger = logging.getLogger(__name__)

READING = "reading"
COMPLETED = "completed"
WISHLIST = "wishlist"
READING_STATUSES = frozenset({READING, COMPLETED, WISHLIST})


def _now_iso() -> str:
    return datetime.now(pytz.utc).isoformat()


class ReadingProgressManager:
    """Manages books and reading progress using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def create_book(
        self,
        title: str,
        author: str,
        genre: str,
        description: Optional[str] = None,
        cover_url: Optional[str] = None,
        reading_level: Optional[str] = None,
        pages: int = 0,
    ) -> BookModel:
        book = BookModel(
            book_id=str(uuid.uuid4()),
            title=title,
            author=author,
            genre=genre,
            description=description,
            cover_url=cover_url,
            reading_level=reading_level,
            pages=pages,
            created_at=_now_iso(),
        )
        self.db.add(book)
        commit(self.db)
        self.db.refresh(book)
        logger.info("Added book %s: %s", book.book_id, title)
        return book

    def get_book(self, book_id: str) -> BookModel:
        model = self.db.query(BookModel).filter(BookModel.book_id == book_id).first()
        if not model:
            raise NotFoundError(f"Book '{book_id}' not found")
        return model

    def list_books(self, genre: Optional[str] = None) -> List[BookModel]:
        query = self.db.query(BookModel)
        if genre:
            query = query.filter(BookModel.genre == genre)
        return query.order_by(BookModel.title).all()

    def get_progress(self, user_id: str, book_id: str) -> Optional[ReadingProgressModel]:
        return (
            self.db.query(ReadingProgressModel)
            .filter(
                ReadingProgressModel.user_id == user_id,
                ReadingProgressModel.book_id == book_id,
            )
            .first()
        )

    def list_progress(self, user_id: str) -> List[ReadingProgressModel]:
        return (
            self.db.query(ReadingProgressModel)
            .filter(ReadingProgressModel.user_id == user_id)
            .order_by(ReadingProgressModel.updated_at.desc())
            .all()
        )

    def update_progress(
        self,
        user_id: str,
        book_id: str,
        status: Optional[str] = None,
        progress: Optional[int] = None,
    ) -> ReadingProgressModel:
        """Create or update a reader's progress on a book.

        Marking a book completed records when it was completed and, unless a
        progress value is given, sets progress to 100. Moving it back to
        another status clears the completion time.

        Args:
            user_id: The reader.
            book_id: The book.
            status: New status, or None to keep the current one.
            progress: Percent read, or None to keep the current value.

        Returns:
            The stored progress row.

        Raises:
            NotFoundError: If the book does not exist.
            ValidationError: If the status or progress is out of range.
        """
        if status is not None and status not in READING_STATUSES:
            raise ValidationError(f"Unknown reading status '{status}'")
        if progress is not None and not 0 <= progress <= 100:
            raise ValidationError("Progress must be between 0 and 100")
        self.get_book(book_id)

        model = self.get_progress(user_id, book_id)
        if model is None:
            now = _now_iso()
            model = ReadingProgressModel(
                user_id=user_id,
                book_id=book_id,
                status=READING,
                progress=0,
                started_at=now,
                updated_at=now,
            )
            self._apply(model, status, progress)
            self.db.add(model)
            try:
                commit(self.db)
            except IntegrityError:
                # Concurrent request created the row first
                self.db.rollback()
                model = self.get_progress(user_id, book_id)
                self._apply(model, status, progress)
                commit(self.db)
            else:
                logger.info("User %s started book %s", user_id, book_id)
        else:
            self._apply(model, status, progress)
            commit(self.db)

        self.db.refresh(model)
        return model

    def _apply(
        self, model: ReadingProgressModel, status: Optional[str], progress: Optional[int]
    ) -> None:
        now = _now_iso()
        if status is not None:
            if status == COMPLETED and model.status != COMPLETED:
                model.completed_at = now
                if progress is None:
                    progress = 100
            elif status != COMPLETED:
                model.completed_at = None
            model.status = status
        if progress is not None:
            model.progress = progress
        model.updated_at = now

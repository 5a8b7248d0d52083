from sqlalchemy import Column, Integer, String, Text
from .base import Base


class BookModel(Base):
    __tablename__ = "books"

    book_id = Column(String, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    author = Column(String, nullable=False, index=True)
    genre = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    cover_url = Column(String, nullable=True)
    reading_level = Column(String, nullable=True)
    pages = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=False)

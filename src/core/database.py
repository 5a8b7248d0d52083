"""Database connection and session management.

This module wraps the SQLAlchemy engine in a ``Database`` handle. The handle
is constructed by the process entry point (see ``app.create_app``) and
attached to the application state; nothing connects at import time.
"""

import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import DATA_DIR, DATABASE_URL
from core.exceptions import StoreUnavailableError
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401

logger = logging.getLogger(__name__)


class Database:
    """Owns one SQLAlchemy engine and its session factory."""

    def __init__(self, url: str = DATABASE_URL, **engine_kwargs):
        """Initialize the handle.

        Args:
            url: SQLAlchemy database URL.
            **engine_kwargs: Extra keyword arguments for ``create_engine``.
        """
        self.url = url
        if url.startswith("sqlite"):
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs.setdefault("poolclass", StaticPool)
            elif url.startswith(f"sqlite:///{DATA_DIR}"):
                DATA_DIR.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self) -> None:
        """Create tables that do not exist yet."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except OperationalError as exc:
            raise StoreUnavailableError(str(exc.orig)) from exc
        logger.info("Database ready: %s", self.engine.url.render_as_string(hide_password=True))

    def session(self) -> Session:
        """Open a new ORM session. The caller must close it."""
        return self.SessionLocal()

    def dispose(self) -> None:
        """Release every pooled connection."""
        self.engine.dispose()
        logger.info("Database connections closed")


def commit(db: Session) -> None:
    """Commit, translating transport failures into ``StoreUnavailableError``.

    Args:
        db: SQLAlchemy Session.

    Raises:
        StoreUnavailableError: If the store cannot be reached.
    """
    try:
        db.commit()
    except OperationalError as exc:
        db.rollback()
        raise StoreUnavailableError(str(exc.orig)) from exc


def get_db(request: Request) -> Iterator[Session]:
    """Dependency for getting a request-scoped database session."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()

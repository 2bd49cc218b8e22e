"""Database session management."""

from __future__ import annotations

import functools
import logging

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from gamebox.core.config import settings
from gamebox.core.errors import StorageFailureError

logger = logging.getLogger(__name__)

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    echo=settings.debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for FastAPI to get DB session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_fail(db: Session) -> None:
    """Commit the current unit of work, rolling everything back on failure."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Commit failed, unit of work rolled back")
        raise StorageFailureError("Could not commit changes") from exc


def storage_unit(func):
    """Run a service call as one unit of work.

    Any database error raised before or during commit rolls the session back
    and surfaces as StorageFailureError. The session is the first argument.
    """

    @functools.wraps(func)
    def wrapper(db: Session, *args, **kwargs):
        try:
            return func(db, *args, **kwargs)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Storage error in %s, unit of work rolled back", func.__name__)
            raise StorageFailureError("Storage operation failed") from exc

    return wrapper


def get_for_update(db: Session, model, ident):
    """Load a row by primary key under SELECT ... FOR UPDATE.

    Always re-reads the row so a copy already in the session cannot hide a
    concurrent commit.
    """
    stmt = (
        select(model)
        .where(model.id == ident)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalar_one_or_none()

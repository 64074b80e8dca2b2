"""Engine and sessions for the SQL emulation of the document store.

All containers share the single ``document`` table, so the metadata here only
ever holds ``quillpost.models.document.Document``.
"""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from quillpost.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for the document table."""


# Register Document on Base.metadata before create_all or Alembic reads it.
import quillpost.models  # noqa: E402,F401

engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    echo=settings.sql_debug,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a session for one request's SqlDocumentStore."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create the document table if it is missing."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop the document table, discarding every container's documents."""
    Base.metadata.drop_all(bind=engine)

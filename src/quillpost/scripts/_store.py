"""Open the configured document store outside a request."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from quillpost.core.settings import settings
from quillpost.db.session import SessionLocal
from quillpost.repositories.cosmos_store import CosmosDocumentStore
from quillpost.repositories.documents import DocumentStore
from quillpost.repositories.sql_store import SqlDocumentStore


@contextmanager
def open_store() -> Iterator[DocumentStore]:
    """Yield the store selected by ``STORAGE_BACKEND``."""
    if settings.storage_backend == "cosmos":
        yield CosmosDocumentStore.from_settings(settings)
        return
    db = SessionLocal()
    try:
        yield SqlDocumentStore(db)
    finally:
        db.close()

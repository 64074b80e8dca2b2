"""Document store backed by a single SQLAlchemy table.

Used for local development and tests; production runs on Cosmos DB. The
addressing rules are the same in both, including "wrong partition key value
means not found".
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from quillpost.core.errors import (
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
)
from quillpost.models.document import Document
from quillpost.repositories.documents import (
    DocumentQuery,
    FilterValue,
    SortKey,
    partition_key_of,
    validate_field_name,
)

__all__ = ["SqlDocumentStore"]

logger = logging.getLogger(__name__)


def _filter_clause(field: str, value: FilterValue) -> Any:
    element = Document.body[validate_field_name(field)]
    if value is None:
        return element.as_string().is_(None)
    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, int):
        return element.as_integer() == value
    return element.as_string() == value


def _order_clause(key: SortKey) -> Any:
    element = Document.body[validate_field_name(key.field)]
    expr = element.as_float() if key.numeric else element.as_string()
    # Missing values sort lowest, as in Cosmos DB.
    if key.descending:
        return expr.desc().nulls_last()
    return expr.asc().nulls_first()


class SqlDocumentStore:
    """Thin wrapper around the ``document`` table for one request session."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    @contextmanager
    def _classified(self, action: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            self.session.rollback()
            raise ConflictError(f"Document already exists ({action})") from exc
        except (OperationalError, InterfaceError, PoolTimeoutError) as exc:
            self.session.rollback()
            logger.error("SQL document store failure during %s: %s", action, exc)
            raise StorageUnavailableError() from exc

    def _get(self, container: str, item_id: str, partition_key: str) -> Document | None:
        return self.session.get(
            Document,
            {"container": container, "partition_key": partition_key, "id": item_id},
        )

    def query(self, container: str, query: DocumentQuery) -> list[dict[str, Any]]:
        """Return documents in ``container`` matching ``query``."""
        stmt = select(Document).where(Document.container == container)
        for field, value in query.filters.items():
            stmt = stmt.where(_filter_clause(field, value))
        if query.order_by:
            stmt = stmt.order_by(*(_order_clause(key) for key in query.order_by))
        if query.limit is not None:
            stmt = stmt.limit(query.limit)
        with self._classified("query"):
            result = self.session.execute(stmt)
            return [dict(doc.body) for doc in result.scalars()]

    def read(self, container: str, item_id: str, partition_key: str) -> dict[str, Any]:
        """Point-read a document by id and partition key value."""
        with self._classified("read"):
            doc = self._get(container, item_id, partition_key)
        if doc is None:
            raise NotFoundError(f"Document '{item_id}' not found in {container}")
        return dict(doc.body)

    def create(self, container: str, record: Mapping[str, Any]) -> dict[str, Any]:
        """Insert ``record``; its id must be free within its partition."""
        item_id = str(record["id"])
        partition_key = partition_key_of(container, record)
        with self._classified("create"):
            if self._get(container, item_id, partition_key) is not None:
                raise ConflictError(f"Document '{item_id}' already exists in {container}")
            doc = Document(
                container=container,
                partition_key=partition_key,
                id=item_id,
                body=dict(record),
            )
            self.session.add(doc)
            self.session.commit()
        return dict(record)

    def write(
        self,
        container: str,
        item_id: str,
        partition_key: str,
        record: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Create or replace the document stored at the given address."""
        if str(record.get("id")) != item_id:
            raise ValueError("Document id does not match its address")
        if partition_key_of(container, record) != partition_key:
            raise ValueError("Document partition key does not match its address")
        with self._classified("write"):
            doc = self._get(container, item_id, partition_key)
            if doc is None:
                doc = Document(
                    container=container,
                    partition_key=partition_key,
                    id=item_id,
                    body=dict(record),
                )
                self.session.add(doc)
            else:
                # Assign a new dict so the JSON column is flagged dirty.
                doc.body = dict(record)
            self.session.commit()
        return dict(record)

    def delete(self, container: str, item_id: str, partition_key: str) -> None:
        """Delete the document stored at the given address."""
        with self._classified("delete"):
            doc = self._get(container, item_id, partition_key)
            if doc is None:
                raise NotFoundError(f"Document '{item_id}' not found in {container}")
            self.session.delete(doc)
            self.session.commit()

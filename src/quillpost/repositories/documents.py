"""Storage collaborator contract shared by the SQL and Cosmos backends."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

__all__ = [
    "PARTITION_KEY_PATHS",
    "DocumentQuery",
    "DocumentStore",
    "SortKey",
    "partition_key_of",
    "validate_field_name",
]

# Partition key attribute for each logical container.
PARTITION_KEY_PATHS: dict[str, str] = {
    "posts": "id",
    "pages": "id",
    "comments": "postId",
}

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

FilterValue = str | int | bool | None


def validate_field_name(name: str) -> str:
    """Return ``name`` if it is a plain document attribute, else raise ValueError.

    Field names are interpolated into query text by both backends, so only
    bare identifiers are accepted; values always travel as parameters.
    """
    if not _FIELD_NAME.match(name):
        raise ValueError(f"Invalid document field name: {name!r}")
    return name


def partition_key_of(container: str, record: Mapping[str, Any]) -> str:
    """Return the partition key value stored in ``record`` for ``container``."""
    try:
        path = PARTITION_KEY_PATHS[container]
    except KeyError as exc:
        raise ValueError(f"Unknown container: {container!r}") from exc
    value = record.get(path)
    if value is None:
        raise ValueError(f"Document for {container!r} is missing partition key {path!r}")
    return str(value)


@dataclass(frozen=True)
class SortKey:
    """One ORDER BY term. ``numeric`` sorts the attribute as a number."""

    field: str
    descending: bool = False
    numeric: bool = False


@dataclass(frozen=True)
class DocumentQuery:
    """Equality filters plus ordering, understood by every backend.

    A filter value of ``None`` matches documents where the attribute is null
    or absent.
    """

    filters: Mapping[str, FilterValue] = field(default_factory=dict)
    order_by: Sequence[SortKey] = ()
    limit: int | None = None


class DocumentStore(Protocol):
    """Minimal document store used by the services.

    Implementations classify their native failures into the
    ``quillpost.core.errors`` taxonomy and never retry on their own.
    """

    def query(self, container: str, query: DocumentQuery) -> list[dict[str, Any]]:
        """Return matching documents in the requested order."""
        ...

    def read(self, container: str, item_id: str, partition_key: str) -> dict[str, Any]:
        """Point-read one document; raises NotFoundError."""
        ...

    def create(self, container: str, record: Mapping[str, Any]) -> dict[str, Any]:
        """Insert a new document; raises ConflictError when the id is taken."""
        ...

    def write(
        self,
        container: str,
        item_id: str,
        partition_key: str,
        record: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Create or replace the document at ``(item_id, partition_key)``."""
        ...

    def delete(self, container: str, item_id: str, partition_key: str) -> None:
        """Remove the document; raises NotFoundError."""
        ...

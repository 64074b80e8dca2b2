"""Document store backed by Azure Cosmos DB (NoSQL API)."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from threading import Lock
from typing import Any

from azure.core.exceptions import ServiceRequestError, ServiceResponseError
from azure.cosmos import ContainerProxy, CosmosClient, DatabaseProxy, PartitionKey, exceptions

from quillpost.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    QuillpostError,
    StorageUnavailableError,
)
from quillpost.core.settings import Settings
from quillpost.repositories.documents import (
    PARTITION_KEY_PATHS,
    DocumentQuery,
    partition_key_of,
    validate_field_name,
)

__all__ = ["INDEXING_POLICIES", "CosmosDocumentStore", "build_query", "classify_cosmos_error"]

logger = logging.getLogger(__name__)

HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_REQUEST_TIMEOUT = 408
HTTP_CONFLICT = 409
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500


def _composite(*terms: tuple[str, str]) -> list[dict[str, str]]:
    return [{"path": f"/{path}", "order": order} for path, order in terms]


# Multi-field ORDER BY needs a matching composite index in Cosmos.
INDEXING_POLICIES: dict[str, dict[str, Any]] = {
    "pages": {
        "indexingMode": "consistent",
        "automatic": True,
        "includedPaths": [{"path": "/*"}],
        "excludedPaths": [{"path": "/\"_etag\"/?"}],
        "compositeIndexes": [
            _composite(("order", "ascending"), ("createdAt", "descending")),
            _composite(("order", "ascending"), ("title", "ascending")),
        ],
    },
}


def build_query(query: DocumentQuery) -> tuple[str, list[dict[str, Any]]]:
    """Translate a DocumentQuery into Cosmos SQL text and parameters."""
    clauses: list[str] = []
    parameters: list[dict[str, Any]] = []
    for field, value in query.filters.items():
        validate_field_name(field)
        if value is None:
            clauses.append(f"(NOT IS_DEFINED(c.{field}) OR IS_NULL(c.{field}))")
            continue
        clauses.append(f"c.{field} = @{field}")
        parameters.append({"name": f"@{field}", "value": value})

    text = "SELECT * FROM c"
    if query.limit is not None:
        text = f"SELECT TOP {int(query.limit)} * FROM c"
    if clauses:
        text += " WHERE " + " AND ".join(clauses)
    if query.order_by:
        terms = [
            f"c.{validate_field_name(key.field)} {'DESC' if key.descending else 'ASC'}"
            for key in query.order_by
        ]
        text += " ORDER BY " + ", ".join(terms)
    return text, parameters


def classify_cosmos_error(exc: exceptions.CosmosHttpResponseError) -> QuillpostError | None:
    """Map a Cosmos HTTP error onto the error taxonomy.

    Returns None for statuses that indicate a caller bug (400, 412...), which
    are left to propagate unchanged.
    """
    code = int(exc.status_code or 0)
    if code == HTTP_NOT_FOUND:
        return NotFoundError("Document not found in database")
    if code == HTTP_CONFLICT:
        return ConflictError("Document already exists in database")
    if code == HTTP_FORBIDDEN:
        return ForbiddenError("Database access denied - possible firewall issue")
    if code in (HTTP_REQUEST_TIMEOUT, HTTP_TOO_MANY_REQUESTS) or code >= HTTP_SERVER_ERROR:
        return StorageUnavailableError()
    return None


class CosmosDocumentStore:
    """Document store over one Cosmos database, creating containers on demand."""

    def __init__(
        self,
        client: CosmosClient,
        database_id: str,
        container_ids: Mapping[str, str] | None = None,
    ) -> None:
        self.client = client
        self.database_id = database_id
        self.container_ids = dict(container_ids or {name: name for name in PARTITION_KEY_PATHS})
        self._database: DatabaseProxy | None = None
        self._containers: dict[str, ContainerProxy] = {}
        self._lock = Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> CosmosDocumentStore:
        """Build a store from the COSMOS_* settings."""
        if not settings.cosmos_endpoint or not settings.cosmos_key:
            raise ValueError("COSMOS_ENDPOINT and COSMOS_KEY must be set for the cosmos backend")
        client = CosmosClient(settings.cosmos_endpoint, credential=settings.cosmos_key)
        return cls(client, settings.cosmos_database, settings.cosmos_containers)

    @contextmanager
    def _classified(self, action: str) -> Iterator[None]:
        try:
            yield
        except exceptions.CosmosHttpResponseError as exc:
            mapped = classify_cosmos_error(exc)
            if mapped is None:
                raise
            if isinstance(mapped, StorageUnavailableError):
                logger.error("Cosmos failure during %s: %s", action, exc.message)
            raise mapped from exc
        except (ServiceRequestError, ServiceResponseError) as exc:
            logger.error("Cosmos unreachable during %s: %s", action, exc)
            raise StorageUnavailableError() from exc

    def container(self, name: str) -> ContainerProxy:
        """Return the proxy for a logical container, creating it if needed."""
        cached = self._containers.get(name)
        if cached is not None:
            return cached
        options: dict[str, Any] = {"partition_key": PartitionKey(path=f"/{PARTITION_KEY_PATHS[name]}")}
        if name in INDEXING_POLICIES:
            options["indexing_policy"] = INDEXING_POLICIES[name]
        with self._lock, self._classified("container setup"):
            container = self._get_database().create_container_if_not_exists(
                id=self.container_ids.get(name, name),
                **options,
            )
            self._containers[name] = container
        return container

    def _get_database(self) -> DatabaseProxy:
        if self._database is None:
            self._database = self.client.create_database_if_not_exists(id=self.database_id)
        return self._database

    def apply_indexing_policy(self, name: str) -> bool:
        """Push the indexing policy for ``name`` onto an existing container.

        ``create_container_if_not_exists`` leaves the policy of a container
        that already exists untouched. Returns False when ``name`` has no
        custom policy.
        """
        policy = INDEXING_POLICIES.get(name)
        if policy is None:
            return False
        container = self.container(name)
        with self._lock, self._classified("indexing policy"):
            self._containers[name] = self._get_database().replace_container(
                container,
                partition_key=PartitionKey(path=f"/{PARTITION_KEY_PATHS[name]}"),
                indexing_policy=policy,
            )
        return True

    def query(self, container: str, query: DocumentQuery) -> list[dict[str, Any]]:
        text, parameters = build_query(query)
        with self._classified("query"):
            items = self.container(container).query_items(
                query=text,
                parameters=parameters,
                enable_cross_partition_query=True,
            )
            return [dict(item) for item in items]

    def read(self, container: str, item_id: str, partition_key: str) -> dict[str, Any]:
        with self._classified("read"):
            return dict(self.container(container).read_item(item=item_id, partition_key=partition_key))

    def create(self, container: str, record: Mapping[str, Any]) -> dict[str, Any]:
        partition_key_of(container, record)
        with self._classified("create"):
            return dict(self.container(container).create_item(body=dict(record)))

    def write(
        self,
        container: str,
        item_id: str,
        partition_key: str,
        record: Mapping[str, Any],
    ) -> dict[str, Any]:
        if str(record.get("id")) != item_id:
            raise ValueError("Document id does not match its address")
        if partition_key_of(container, record) != partition_key:
            raise ValueError("Document partition key does not match its address")
        with self._classified("write"):
            return dict(self.container(container).upsert_item(body=dict(record)))

    def delete(self, container: str, item_id: str, partition_key: str) -> None:
        with self._classified("delete"):
            self.container(container).delete_item(item=item_id, partition_key=partition_key)

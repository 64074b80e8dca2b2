"""Tests for the SQLAlchemy document store."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from quillpost.core.errors import ConflictError, NotFoundError, StorageUnavailableError
from quillpost.db.session import Base
from quillpost.repositories.documents import DocumentQuery, SortKey, partition_key_of


def _comment(comment_id: str, post_id: str, created: str, **extra) -> dict:
    return {"id": comment_id, "postId": post_id, "createdAt": created, "approved": True, **extra}


def test_create_then_read_by_address(store) -> None:
    store.create("posts", {"id": "p1", "slug": "one"})

    assert store.read("posts", "p1", "p1") == {"id": "p1", "slug": "one"}


def test_read_with_wrong_partition_key_is_not_found(store) -> None:
    store.create("comments", _comment("c1", "post-a", "2024-01-01T00:00:00Z"))

    with pytest.raises(NotFoundError):
        store.read("comments", "c1", "post-b")


def test_create_duplicate_address_conflicts(store) -> None:
    store.create("posts", {"id": "p1", "slug": "one"})

    with pytest.raises(ConflictError):
        store.create("posts", {"id": "p1", "slug": "other"})
    assert store.read("posts", "p1", "p1")["slug"] == "one"


def test_same_id_in_different_partitions_is_allowed(store) -> None:
    store.create("comments", _comment("c1", "post-a", "2024-01-01T00:00:00Z"))
    store.create("comments", _comment("c1", "post-b", "2024-01-02T00:00:00Z"))

    assert store.read("comments", "c1", "post-b")["createdAt"] == "2024-01-02T00:00:00Z"


def test_write_replaces_and_upserts(store) -> None:
    store.write("posts", "p1", "p1", {"id": "p1", "views": 1})
    store.write("posts", "p1", "p1", {"id": "p1", "views": 2})

    assert store.read("posts", "p1", "p1") == {"id": "p1", "views": 2}


def test_write_rejects_mismatched_address(store) -> None:
    with pytest.raises(ValueError):
        store.write("posts", "p1", "my-slug", {"id": "p1", "slug": "my-slug"})
    with pytest.raises(ValueError):
        store.write("posts", "p2", "p2", {"id": "p1"})


def test_delete_removes_and_missing_is_not_found(store) -> None:
    store.create("posts", {"id": "p1"})

    store.delete("posts", "p1", "p1")

    with pytest.raises(NotFoundError):
        store.read("posts", "p1", "p1")
    with pytest.raises(NotFoundError):
        store.delete("posts", "p1", "p1")


class TestQuery:
    @pytest.fixture(autouse=True)
    def documents(self, store) -> None:
        store.create("comments", _comment("c1", "post-a", "2024-01-01T00:00:00Z"))
        store.create("comments", _comment("c2", "post-a", "2024-01-03T00:00:00Z", parentId="c1"))
        store.create("comments", _comment("c3", "post-a", "2024-01-02T00:00:00Z", approved=False))
        store.create("comments", _comment("c4", "post-b", "2024-01-04T00:00:00Z", parentId=None))
        store.create("pages", {"id": "pg1", "order": 10, "title": "Ten"})
        store.create("pages", {"id": "pg2", "order": 2, "title": "Two"})
        store.create("pages", {"id": "pg3", "title": "Unordered"})

    def test_filters_are_scoped_to_container(self, store) -> None:
        assert len(store.query("comments", DocumentQuery())) == 4
        assert len(store.query("pages", DocumentQuery())) == 3

    def test_equality_and_boolean_filters(self, store) -> None:
        docs = store.query("comments", DocumentQuery(filters={"postId": "post-a", "approved": True}))
        assert sorted(doc["id"] for doc in docs) == ["c1", "c2"]

    def test_none_filter_matches_null_or_absent(self, store) -> None:
        docs = store.query("comments", DocumentQuery(filters={"parentId": None}))
        assert sorted(doc["id"] for doc in docs) == ["c1", "c3", "c4"]

    def test_order_descending_with_limit(self, store) -> None:
        query = DocumentQuery(order_by=(SortKey("createdAt", descending=True),), limit=2)
        assert [doc["id"] for doc in store.query("comments", query)] == ["c4", "c2"]

    def test_missing_values_sort_lowest(self, store) -> None:
        ascending = DocumentQuery(order_by=(SortKey("order", numeric=True),))
        descending = DocumentQuery(order_by=(SortKey("order", numeric=True, descending=True),))

        assert [doc["id"] for doc in store.query("pages", ascending)] == ["pg3", "pg2", "pg1"]
        assert [doc["id"] for doc in store.query("pages", descending)] == ["pg1", "pg2", "pg3"]

    def test_rejects_unsafe_field_names(self, store) -> None:
        with pytest.raises(ValueError):
            store.query("pages", DocumentQuery(filters={"title') OR 1=1 --": "x"}))


def test_operational_errors_become_storage_unavailable(store, mocker) -> None:
    mocker.patch.object(
        store.session,
        "execute",
        side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
    )

    with pytest.raises(StorageUnavailableError) as excinfo:
        store.query("posts", DocumentQuery())

    assert excinfo.value.retryable is True
    assert isinstance(excinfo.value.__cause__, OperationalError)


def test_partition_key_of_requires_known_container() -> None:
    assert partition_key_of("comments", {"postId": "p"}) == "p"
    with pytest.raises(ValueError):
        partition_key_of("widgets", {"id": "x"})
    with pytest.raises(ValueError):
        partition_key_of("posts", {"slug": "no-id"})


def test_every_container_shares_the_document_table() -> None:
    assert list(Base.metadata.tables) == ["document"]

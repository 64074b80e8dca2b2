"""Data access helpers for working with posts."""
from __future__ import annotations

from quillpost.repositories.documents import DocumentQuery, DocumentStore, SortKey
from quillpost.schemas.post import Post, PostStatus

__all__ = ["POSTS_CONTAINER", "PostRepository"]

POSTS_CONTAINER = "posts"

_NEWEST_FIRST = (SortKey("publishedAt", descending=True),)


class PostRepository:
    """Thin wrapper around the ``posts`` container.

    Point operations take an explicit ``(item_id, partition_key)`` pair; use
    ``quillpost.services.identity.address_for`` to obtain it.
    """

    def __init__(self, store: DocumentStore) -> None:
        """Initialize the repository with a document store."""
        self.store = store

    def find_by_slug(self, slug: str) -> list[Post]:
        """Return every post carrying ``slug``, most recently published first."""
        docs = self.store.query(
            POSTS_CONTAINER,
            DocumentQuery(filters={"slug": slug}, order_by=_NEWEST_FIRST),
        )
        return [Post.model_validate(doc) for doc in docs]

    def list_posts(self, status: PostStatus | None = None, limit: int | None = None) -> list[Post]:
        """Return posts, optionally filtered by status, most recently published first."""
        filters = {"status": status} if status else {}
        docs = self.store.query(
            POSTS_CONTAINER,
            DocumentQuery(filters=filters, order_by=_NEWEST_FIRST, limit=limit),
        )
        return [Post.model_validate(doc) for doc in docs]

    def list_all(self) -> list[Post]:
        """Return every post without ordering guarantees."""
        return [Post.model_validate(doc) for doc in self.store.query(POSTS_CONTAINER, DocumentQuery())]

    def read(self, item_id: str, partition_key: str) -> Post:
        return Post.model_validate(self.store.read(POSTS_CONTAINER, item_id, partition_key))

    def create(self, post: Post) -> Post:
        return Post.model_validate(self.store.create(POSTS_CONTAINER, post.to_document()))

    def replace(self, item_id: str, partition_key: str, post: Post) -> Post:
        saved = self.store.write(POSTS_CONTAINER, item_id, partition_key, post.to_document())
        return Post.model_validate(saved)

    def delete(self, item_id: str, partition_key: str) -> None:
        self.store.delete(POSTS_CONTAINER, item_id, partition_key)

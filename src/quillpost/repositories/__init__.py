"""Document storage backends and container-specific repositories."""

from .documents import PARTITION_KEY_PATHS, DocumentQuery, DocumentStore, SortKey
from .post_repo import POSTS_CONTAINER, PostRepository
from .sql_store import SqlDocumentStore

__all__ = [
    "PARTITION_KEY_PATHS",
    "POSTS_CONTAINER",
    "DocumentQuery",
    "DocumentStore",
    "PostRepository",
    "SortKey",
    "SqlDocumentStore",
]

"""Reader comments, stored in the ``comments`` container partitioned by post id."""
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from quillpost.repositories.documents import DocumentQuery, DocumentStore, SortKey
from quillpost.schemas.comment import Comment, CommentCreate

logger = logging.getLogger(__name__)

COMMENTS_CONTAINER = "comments"

_NEWEST_FIRST = (SortKey("createdAt", descending=True),)
_OLDEST_FIRST = (SortKey("createdAt"),)


class CommentService:
    """CRUD over comments; new comments wait for moderation."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def _query(self, query: DocumentQuery) -> list[Comment]:
        return [Comment.model_validate(doc) for doc in self.store.query(COMMENTS_CONTAINER, query)]

    def list_for_post(self, post_id: str, approved: bool = True) -> list[Comment]:
        """Return a post's comments with the given approval state, newest first."""
        return self._query(
            DocumentQuery(filters={"postId": post_id, "approved": approved}, order_by=_NEWEST_FIRST)
        )

    def list_all(self) -> list[Comment]:
        """Return every comment, newest first, for moderation."""
        return self._query(DocumentQuery(order_by=_NEWEST_FIRST))

    def thread(self, post_id: str, parent_id: str | None = None) -> list[Comment]:
        """Return approved top-level comments, or the replies to ``parent_id``.

        Top-level comments are newest first; replies read oldest first.
        """
        if parent_id is None:
            return self._query(
                DocumentQuery(
                    filters={"postId": post_id, "parentId": None, "approved": True},
                    order_by=_NEWEST_FIRST,
                )
            )
        return self._query(
            DocumentQuery(
                filters={"postId": post_id, "parentId": parent_id, "approved": True},
                order_by=_OLDEST_FIRST,
            )
        )

    def create(self, post_id: str, payload: CommentCreate) -> Comment:
        comment = Comment(
            id=uuid.uuid4().hex,
            post_id=post_id,
            author=payload.author,
            content=payload.content,
            created_at=datetime.now(UTC),
            approved=False,
            parent_id=payload.parent_id,
        )
        saved = self.store.create(COMMENTS_CONTAINER, comment.to_document())
        logger.info("Comment %s queued for moderation on post %s", comment.id, post_id)
        return Comment.model_validate(saved)

    def approve(self, comment_id: str, post_id: str) -> Comment:
        """Mark a comment approved; raises NotFoundError if it does not exist."""
        existing = Comment.model_validate(self.store.read(COMMENTS_CONTAINER, comment_id, post_id))
        approved = existing.model_copy(update={"approved": True})
        saved = self.store.write(COMMENTS_CONTAINER, comment_id, post_id, approved.to_document())
        return Comment.model_validate(saved)

    def delete(self, comment_id: str, post_id: str) -> None:
        self.store.delete(COMMENTS_CONTAINER, comment_id, post_id)

"""Service-level helpers for reading and mutating posts."""
from __future__ import annotations

import logging
from datetime import UTC, datetime

from quillpost.core.errors import ForbiddenError, QuillpostError
from quillpost.repositories.documents import DocumentStore
from quillpost.repositories.post_repo import PostRepository
from quillpost.schemas.post import Author, Post, PostCreate, PostStatus, PostUpdate
from quillpost.schemas.user import CurrentUser
from quillpost.services.identity import (
    PostIdentityResolver,
    address_for,
    published_at_for,
    rank_by_publication,
)

logger = logging.getLogger(__name__)

# Fields a caller can never change through an update.
IMMUTABLE_FIELDS = frozenset({"id", "slug", "created_at"})
# Fields an update may explicitly clear with null.
CLEARABLE_FIELDS = frozenset({"featured_image"})


def author_from_user(user: CurrentUser) -> Author:
    """Build the embedded author block for ``user``."""
    return Author(id=user.id, name=user.name, email=user.email)


def ensure_can_modify(post: Post, user: CurrentUser) -> None:
    """Only the post's author or an admin may change or delete it.

    Raises:
        ForbiddenError: If ``user`` is neither.
    """
    if post.author.id != user.id and not user.is_admin:
        logger.warning("User %s not authorized to modify post %s", user.id, post.id)
        raise ForbiddenError("Only the author or an admin can modify this post")


class PostService:
    """Post use cases built on the identity resolver."""

    def __init__(self, store: DocumentStore, resolver: PostIdentityResolver | None = None) -> None:
        self.repo = PostRepository(store)
        self.resolver = resolver or PostIdentityResolver(store)

    def list_posts(self, status: PostStatus | None = None) -> list[Post]:
        """Return posts ordered by descending ``publishedAt``."""
        return rank_by_publication(self.repo.list_posts(status))

    def get(self, slug: str) -> Post:
        return self.resolver.resolve_by_slug(slug)

    def create(self, payload: PostCreate, user: CurrentUser) -> Post:
        return self.resolver.create_unique(payload.slug, payload, author_from_user(user))

    def update(self, slug: str, changes: PostUpdate, user: CurrentUser) -> Post:
        """Apply a partial update to the post resolved from ``slug``.

        ``id``, ``slug`` and ``createdAt`` are preserved; ``publishedAt`` follows
        the draft/published status machine and ``updatedAt`` is refreshed.
        """
        post = self.resolver.resolve_by_slug(slug)
        ensure_can_modify(post, user)

        updates = {
            name: value
            for name, value in changes.model_dump(exclude_unset=True).items()
            if name not in IMMUTABLE_FIELDS and (value is not None or name in CLEARABLE_FIELDS)
        }
        now = datetime.now(UTC)
        new_status = updates.get("status") or post.status
        updates["published_at"] = published_at_for(new_status, post.published_at, now)
        updates["updated_at"] = now
        updated = post.model_copy(update=updates)

        address = address_for(post)
        return self.repo.replace(address.id, address.partition_key, updated)

    def delete(self, slug: str, user: CurrentUser) -> None:
        """Hard-delete the post resolved from ``slug``."""
        post = self.resolver.resolve_by_slug(slug)
        ensure_can_modify(post, user)
        address = address_for(post)
        logger.info("Deleting post %s (slug %r)", post.id, post.slug)
        self.repo.delete(address.id, address.partition_key)

    def record_view(self, post: Post) -> None:
        """Increment the view counter; failures are logged and swallowed.

        This is a separate best-effort write issued by the read endpoint, not
        part of slug resolution.
        """
        address = address_for(post)
        try:
            current = self.repo.read(address.id, address.partition_key)
            self.repo.replace(
                address.id,
                address.partition_key,
                current.model_copy(update={"views": current.views + 1}),
            )
        except QuillpostError as exc:
            logger.error("Failed to record view for post %s: %s", post.id, exc.detail)

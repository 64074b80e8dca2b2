"""Slug resolution and storage addressing for posts.

Posts live in a container partitioned on ``/id``. Earlier revisions addressed
posts as ``(id, slug)``, which broke update and delete for every record whose
stored partition value was not its slug. ``address_for`` is now the only place
a post's address is derived.

Slug uniqueness is checked before insert but not enforced by the store, so
two concurrent creates with the same slug can both succeed. Reads tolerate the
resulting duplicates: the most recently published record wins and a warning is
logged for out-of-band cleanup (see ``quillpost.scripts.check_duplicates``).
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from quillpost.core.errors import NotFoundError, SlugConflictError
from quillpost.repositories.documents import DocumentStore
from quillpost.repositories.post_repo import PostRepository
from quillpost.schemas.post import Author, Post, PostCreate, PostStatus

__all__ = [
    "DuplicateSlug",
    "PostAddress",
    "PostIdentityResolver",
    "address_for",
    "published_at_for",
    "rank_by_publication",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostAddress:
    """The ``(id, partition key)`` pair needed for point reads and writes."""

    id: str
    partition_key: str


@dataclass(frozen=True)
class DuplicateSlug:
    """Diagnostic describing a slug held by more than one post."""

    slug: str
    chosen: PostAddress
    others: tuple[PostAddress, ...]


def address_for(post: Post) -> PostAddress:
    """Return the storage address of ``post``; the partition key is its id."""
    return PostAddress(id=post.id, partition_key=post.id)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def rank_by_publication(posts: list[Post]) -> list[Post]:
    """Sort posts newest-published first; never-published posts go last."""

    def key(post: Post) -> tuple[bool, datetime, datetime]:
        published = _aware(post.published_at) if post.published_at else datetime.min.replace(tzinfo=UTC)
        return post.published_at is not None, published, _aware(post.created_at)

    return sorted(posts, key=key, reverse=True)


def published_at_for(
    new_status: PostStatus,
    published_at: datetime | None,
    now: datetime,
) -> datetime | None:
    """Apply the status machine to ``publishedAt``.

    Publishing stamps ``now`` unless the post was published before; reverting
    to draft keeps the original timestamp.
    """
    if new_status == "published" and published_at is None:
        return now
    return published_at


class PostIdentityResolver:
    """Resolves slugs to authoritative posts and guards slug uniqueness."""

    def __init__(
        self,
        store: DocumentStore,
        on_duplicate: Callable[[DuplicateSlug], None] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.repo = PostRepository(store)
        self._on_duplicate = on_duplicate
        self._clock = clock or (lambda: datetime.now(UTC))

    def resolve_by_slug(self, slug: str) -> Post:
        """Return the single authoritative post for ``slug``.

        Raises:
            NotFoundError: If no post carries the slug.
        """
        matches = rank_by_publication(self.repo.find_by_slug(slug))
        if not matches:
            raise NotFoundError(f"Post '{slug}' not found")

        chosen = matches[0]
        if len(matches) > 1:
            self._report_duplicate(
                DuplicateSlug(
                    slug=slug,
                    chosen=address_for(chosen),
                    others=tuple(address_for(post) for post in matches[1:]),
                )
            )
        return chosen

    def _report_duplicate(self, duplicate: DuplicateSlug) -> None:
        logger.warning(
            "Duplicate slug %r: %d posts share it; serving %s, ignoring %s",
            duplicate.slug,
            len(duplicate.others) + 1,
            duplicate.chosen.id,
            ", ".join(other.id for other in duplicate.others),
            extra={"duplicate_slug": duplicate.slug},
        )
        if self._on_duplicate is not None:
            self._on_duplicate(duplicate)

    def create_unique(self, candidate_slug: str, payload: PostCreate, author: Author) -> Post:
        """Create a post unless ``candidate_slug`` is already in use.

        Raises:
            SlugConflictError: If any post already carries the slug. Nothing
                is written in that case.
        """
        try:
            self.resolve_by_slug(candidate_slug)
        except NotFoundError:
            pass
        else:
            raise SlugConflictError(candidate_slug)

        now = self._clock()
        post = Post(
            id=uuid.uuid4().hex,
            slug=candidate_slug,
            title=payload.title,
            content=payload.content,
            excerpt=payload.excerpt,
            author=author,
            categories=payload.categories,
            tags=payload.tags,
            status=payload.status,
            published_at=published_at_for(payload.status, None, now),
            created_at=now,
            updated_at=now,
            featured_image=payload.featured_image,
            views=0,
        )
        created = self.repo.create(post)
        logger.info("Created post %s with slug %r", created.id, created.slug)
        return created

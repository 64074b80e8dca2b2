"""Standalone pages (about, contact...), partitioned by their own id."""
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from quillpost.core.errors import SlugConflictError
from quillpost.repositories.documents import DocumentQuery, DocumentStore, SortKey
from quillpost.schemas.page import Page, PageCreate, PageUpdate
from quillpost.schemas.post import Author, PostStatus
from quillpost.services.identity import published_at_for

logger = logging.getLogger(__name__)

PAGES_CONTAINER = "pages"

_MENU_ORDER = (SortKey("order", numeric=True), SortKey("createdAt", descending=True))
_SIDEBAR_ORDER = (SortKey("order", numeric=True), SortKey("title"))


class PageService:
    """CRUD over pages."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def _query(self, query: DocumentQuery) -> list[Page]:
        return [Page.model_validate(doc) for doc in self.store.query(PAGES_CONTAINER, query)]

    def list_pages(self, status: PostStatus | None = None) -> list[Page]:
        filters = {"status": status} if status else {}
        return self._query(DocumentQuery(filters=filters, order_by=_MENU_ORDER))

    def sidebar(self) -> list[Page]:
        """Published pages flagged for the sidebar, in menu order."""
        return self._query(
            DocumentQuery(
                filters={"status": "published", "showInSidebar": True},
                order_by=_SIDEBAR_ORDER,
            )
        )

    def find_by_slug(self, slug: str) -> Page | None:
        matches = self._query(DocumentQuery(filters={"slug": slug}, limit=1))
        return matches[0] if matches else None

    def get(self, page_id: str) -> Page:
        """Point-read a page; raises NotFoundError."""
        return Page.model_validate(self.store.read(PAGES_CONTAINER, page_id, page_id))

    def create(self, payload: PageCreate, author: Author) -> Page:
        """Create a page; raises SlugConflictError if the slug is taken."""
        if self.find_by_slug(payload.slug) is not None:
            raise SlugConflictError(payload.slug)
        now = datetime.now(UTC)
        page = Page(
            id=uuid.uuid4().hex,
            author=author,
            created_at=now,
            updated_at=now,
            published_at=published_at_for(payload.status, None, now),
            **payload.model_dump(),
        )
        saved = self.store.create(PAGES_CONTAINER, page.to_document())
        logger.info("Created page %s with slug %r", page.id, page.slug)
        return Page.model_validate(saved)

    def update(self, page_id: str, changes: PageUpdate) -> Page:
        existing = self.get(page_id)
        updates = {
            name: value
            for name, value in changes.model_dump(exclude_unset=True).items()
            if value is not None or name in {"order", "excerpt", "meta_description", "featured_image"}
        }
        now = datetime.now(UTC)
        new_status = updates.get("status") or existing.status
        updates["published_at"] = published_at_for(new_status, existing.published_at, now)
        updates["updated_at"] = now
        updated = existing.model_copy(update=updates)
        saved = self.store.write(PAGES_CONTAINER, page_id, page_id, updated.to_document())
        return Page.model_validate(saved)

    def delete(self, page_id: str) -> None:
        self.store.delete(PAGES_CONTAINER, page_id, page_id)

"""Post document and payload schemas.

Documents are stored with camelCase keys (``publishedAt``, ``createdAt``...),
so every model here accepts both the alias and the Python field name and
serializes by alias.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PostStatus = Literal["draft", "published"]

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class Author(BaseModel):
    """Denormalized author block embedded in posts and pages."""

    id: str
    name: str
    email: str


class Post(BaseModel):
    """A blog post as persisted in the ``posts`` container.

    ``id`` doubles as the partition key. ``slug`` is meant to be unique but the
    store does not enforce it, so legacy data may hold duplicates.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    slug: str
    title: str
    content: str
    excerpt: str = ""
    author: Author
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    status: PostStatus = "draft"
    published_at: datetime | None = Field(default=None, alias="publishedAt")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    featured_image: str | None = Field(default=None, alias="featuredImage")
    views: int = 0

    def to_document(self) -> dict[str, object]:
        """Return the JSON-safe document body written to storage."""
        return self.model_dump(mode="json", by_alias=True)


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    model_config = ConfigDict(populate_by_name=True)

    slug: str = Field(..., min_length=1, max_length=200, pattern=SLUG_PATTERN)
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    excerpt: str = ""
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    status: PostStatus = "draft"
    featured_image: str | None = Field(default=None, alias="featuredImage")


class PostUpdate(BaseModel):
    """Partial update; ``id``, ``slug`` and ``createdAt`` are silently dropped."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str | None = Field(default=None, min_length=1, max_length=300)
    content: str | None = Field(default=None, min_length=1)
    excerpt: str | None = None
    categories: list[str] | None = None
    tags: list[str] | None = None
    status: PostStatus | None = None
    featured_image: str | None = Field(default=None, alias="featuredImage")


class PostList(BaseModel):
    """Envelope for post listings."""

    posts: list[Post]

"""Static page schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .post import SLUG_PATTERN, Author, PostStatus


class Page(BaseModel):
    """A standalone page (about, contact...) partitioned by its own ``id``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    slug: str
    title: str
    content: str
    excerpt: str | None = None
    author: Author
    status: PostStatus = "draft"
    order: int | None = None
    show_in_sidebar: bool = Field(default=False, alias="showInSidebar")
    meta_description: str | None = Field(default=None, alias="metaDescription")
    featured_image: str | None = Field(default=None, alias="featuredImage")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")
    published_at: datetime | None = Field(default=None, alias="publishedAt")

    def to_document(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class PageCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slug: str = Field(..., min_length=1, max_length=200, pattern=SLUG_PATTERN)
    title: str = Field(..., min_length=1, max_length=300)
    content: str = Field(..., min_length=1)
    excerpt: str | None = None
    status: PostStatus = "draft"
    order: int | None = None
    show_in_sidebar: bool = Field(default=False, alias="showInSidebar")
    meta_description: str | None = Field(default=None, alias="metaDescription")
    featured_image: str | None = Field(default=None, alias="featuredImage")


class PageUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str | None = Field(default=None, min_length=1, max_length=300)
    content: str | None = Field(default=None, min_length=1)
    excerpt: str | None = None
    status: PostStatus | None = None
    order: int | None = None
    show_in_sidebar: bool | None = Field(default=None, alias="showInSidebar")
    meta_description: str | None = Field(default=None, alias="metaDescription")
    featured_image: str | None = Field(default=None, alias="featuredImage")

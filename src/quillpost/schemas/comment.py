"""Comment schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentAuthor(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)


class Comment(BaseModel):
    """A reader comment, partitioned by ``postId``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    post_id: str = Field(alias="postId")
    author: CommentAuthor
    content: str
    created_at: datetime = Field(alias="createdAt")
    approved: bool = False
    parent_id: str | None = Field(default=None, alias="parentId")

    def to_document(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class CommentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    author: CommentAuthor
    content: str = Field(..., min_length=1, max_length=5000)
    parent_id: str | None = Field(default=None, alias="parentId")

"""Pydantic schemas for documents and API payloads."""

from .comment import Comment, CommentAuthor, CommentCreate
from .page import Page, PageCreate, PageUpdate
from .post import Author, Post, PostCreate, PostStatus, PostUpdate
from .user import AuthorizedUser, CurrentUser

__all__ = [
    "Author",
    "AuthorizedUser",
    "Comment",
    "CommentAuthor",
    "CommentCreate",
    "CurrentUser",
    "Page",
    "PageCreate",
    "PageUpdate",
    "Post",
    "PostCreate",
    "PostStatus",
    "PostUpdate",
]

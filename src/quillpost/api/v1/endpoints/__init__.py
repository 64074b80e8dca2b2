# src/quillpost/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .comments import post_comments_router
from .comments import router as comments_router
from .pages import router as pages_router
from .posts import router as posts_router
from .system import router as system_router

__all__ = [
    "auth_router",
    "posts_router",
    "post_comments_router",
    "comments_router",
    "pages_router",
    "system_router",
]

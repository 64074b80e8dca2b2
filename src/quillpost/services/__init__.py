"""Business logic services for the Quillpost application."""

from .comments import CommentService
from .identity import PostIdentityResolver, address_for
from .pages import PageService
from .post_service import PostService
from .rate_limit import FixedWindowRateLimiter, InMemoryRateLimitStore, RedisRateLimitStore

__all__ = [
    "CommentService",
    "FixedWindowRateLimiter",
    "InMemoryRateLimitStore",
    "PageService",
    "PostIdentityResolver",
    "PostService",
    "RedisRateLimitStore",
    "address_for",
]

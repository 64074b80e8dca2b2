"""Shared API dependencies for storage, authentication and rate limiting."""

import logging
from collections.abc import Callable
from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from quillpost.core.authorized_users import get_authorized_user
from quillpost.core.errors import ForbiddenError, RateLimitedError
from quillpost.core.security import decode_access_token
from quillpost.core.settings import settings
from quillpost.db.session import get_db
from quillpost.repositories.cosmos_store import CosmosDocumentStore
from quillpost.repositories.documents import DocumentStore
from quillpost.repositories.sql_store import SqlDocumentStore
from quillpost.schemas.user import CurrentUser
from quillpost.services.comments import CommentService
from quillpost.services.pages import PageService
from quillpost.services.post_service import PostService
from quillpost.services.rate_limit import (
    FixedWindowRateLimiter,
    InMemoryRateLimitStore,
    RateLimitStore,
    RedisRateLimitStore,
    client_key,
)

logger = logging.getLogger(__name__)

# HTTP Bearer scheme; the session cookie is the fallback, so absence is not an error here.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


# --- Storage --------------------------------------------------------------------


@lru_cache
def get_cosmos_store() -> CosmosDocumentStore:
    """Return the process-wide Cosmos store (one client per process)."""
    return CosmosDocumentStore.from_settings(settings)


def get_document_store(db: SessionDep) -> DocumentStore:
    """Return the document store selected by ``STORAGE_BACKEND``."""
    if settings.storage_backend == "cosmos":
        return get_cosmos_store()
    return SqlDocumentStore(db)


StoreDep = Annotated[DocumentStore, Depends(get_document_store)]


def get_post_service(store: StoreDep) -> PostService:
    return PostService(store)


def get_comment_service(store: StoreDep) -> CommentService:
    return CommentService(store)


def get_page_service(store: StoreDep) -> PageService:
    return PageService(store)


PostServiceDep = Annotated[PostService, Depends(get_post_service)]
CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
PageServiceDep = Annotated[PageService, Depends(get_page_service)]


# --- Authentication -------------------------------------------------------------


def _user_from_claims(payload: dict[str, Any]) -> CurrentUser | None:
    """Rebuild the caller from token claims, re-checking the allow-list.

    Roles come from the allow-list rather than the token, so removing an email
    revokes its outstanding sessions.
    """
    subject = payload.get("sub")
    email = payload.get("email")
    if not subject or not email:
        return None
    entry = get_authorized_user(email)
    if entry is None:
        logger.warning("Rejected session for %s: not on the allow-list", email)
        return None
    return CurrentUser(
        id=subject,
        email=entry.email,
        name=entry.name or payload.get("name") or entry.email,
        roles=entry.roles,
    )


def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> CurrentUser | None:
    """Return the signed-in user, or None for anonymous or invalid sessions.

    The bearer token takes precedence over the session cookie.
    """
    token = credentials.credentials if credentials else request.cookies.get(
        settings.session_cookie_name
    )
    if not token:
        return None
    try:
        payload = decode_access_token(token)
    except JWTError:
        return None
    return _user_from_claims(payload)


OptionalUserDep = Annotated[CurrentUser | None, Depends(get_optional_user)]


def get_current_user(user: OptionalUserDep) -> CurrentUser:
    """Get the current authenticated user.

    Raises:
        HTTPException: 401 if there is no valid session for an allow-listed email.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


def require_role(role: str) -> Callable[[CurrentUser], CurrentUser]:
    """Build a dependency admitting users who hold ``role`` (or are admins)."""

    def _dependency(user: CurrentUserDep) -> CurrentUser:
        if not user.has_role(role):
            raise ForbiddenError(f"The '{role}' role is required")
        return user

    _dependency.__name__ = f"require_{role}"
    return _dependency


AuthorDep = Annotated[CurrentUser, Depends(require_role("author"))]
AdminDep = Annotated[CurrentUser, Depends(require_role("admin"))]


# --- Rate limiting --------------------------------------------------------------


@lru_cache
def get_rate_limit_store() -> RateLimitStore:
    """Return the process-wide counter store selected by ``RATE_LIMIT_BACKEND``."""
    if settings.rate_limit_backend == "redis":
        return RedisRateLimitStore.from_url(settings.redis_url)
    return InMemoryRateLimitStore()


def request_key(request: Request) -> str:
    return client_key(request, trust_proxy_headers=settings.rate_limit_trust_proxy_headers)


@lru_cache
def get_rate_limiters() -> dict[str, FixedWindowRateLimiter]:
    """Return the read, auth and write limiters sharing one store."""
    store = get_rate_limit_store()
    return {
        "read": FixedWindowRateLimiter(
            "read",
            window_seconds=settings.rate_limit_read_window_seconds,
            max_requests=settings.rate_limit_read_max,
            store=store,
            key_func=request_key,
        ),
        "auth": FixedWindowRateLimiter(
            "auth",
            window_seconds=settings.rate_limit_auth_window_seconds,
            max_requests=settings.rate_limit_auth_max,
            store=store,
            key_func=request_key,
        ),
        "write": FixedWindowRateLimiter(
            "write",
            window_seconds=settings.rate_limit_write_window_seconds,
            max_requests=settings.rate_limit_write_max,
            store=store,
            key_func=request_key,
        ),
    }


RateLimitersDep = Annotated[dict[str, FixedWindowRateLimiter], Depends(get_rate_limiters)]


def rate_limit(name: str) -> Callable[..., None]:
    """Build a dependency that rejects the request with 429 once over the limit.

    Declare it in a route's ``dependencies`` so it runs before any
    authentication or storage dependency.
    """

    def _dependency(request: Request, limiters: RateLimitersDep) -> None:
        limiter = limiters[name]
        if not limiter.admit(request):
            raise RateLimitedError(retry_after=limiter.retry_after(request))

    _dependency.__name__ = f"rate_limit_{name}"
    return _dependency


read_rate_limit = rate_limit("read")
auth_rate_limit = rate_limit("auth")
write_rate_limit = rate_limit("write")

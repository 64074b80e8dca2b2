"""Error taxonomy shared by the storage, service and API layers.

Every failure a request can end with is one of these classes. The API layer
renders them through a single exception handler (see ``quillpost.main``), so
services raise them directly instead of building ``HTTPException`` objects.
"""

from __future__ import annotations

from fastapi import status


class QuillpostError(RuntimeError):
    """Base exception carrying the HTTP status it maps to."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind: str = "error"
    retryable: bool = False
    default_detail: str = "Internal error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(QuillpostError):
    """Raised when an addressed record or slug does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"
    default_detail = "Not found"


class ConflictError(QuillpostError):
    """Raised when a write would collide with an existing record."""

    status_code = status.HTTP_409_CONFLICT
    kind = "conflict"
    default_detail = "Resource already exists"


class SlugConflictError(ConflictError):
    """Raised by uniqueness checks when the requested slug is already taken."""

    kind = "slug_conflict"

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(
            f"A record with slug '{slug}' already exists. Choose a different slug."
        )


class ForbiddenError(QuillpostError):
    """Raised when the caller (or the storage account) lacks permission."""

    status_code = status.HTTP_403_FORBIDDEN
    kind = "forbidden"
    default_detail = "Forbidden"


class StorageUnavailableError(QuillpostError):
    """Transient storage failure; the only class a caller may retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    kind = "storage_unavailable"
    retryable = True
    default_detail = "Storage is temporarily unavailable"


class RateLimitedError(QuillpostError):
    """Raised when a rate limiter rejects a request."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    kind = "rate_limited"
    default_detail = "Too many requests, please try again later."

    def __init__(self, detail: str | None = None, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(detail)

# src/quillpost/main.py
"""Main entry point for the Quillpost application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from quillpost.api.v1 import (
    auth_router,
    comments_router,
    pages_router,
    post_comments_router,
    posts_router,
    system_router,
)
from quillpost.api.v1.dependencies import get_rate_limit_store
from quillpost.core.errors import QuillpostError
from quillpost.core.settings import settings
from quillpost.services.rate_limit import RateLimitSweeper

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Quillpost API",
    description="Blog publishing API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers; per-post comments must precede the generic post routes.
app.include_router(auth_router, prefix="/api/v1")
app.include_router(post_comments_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(pages_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.exception_handler(QuillpostError)
async def quillpost_error_handler(request: Request, exc: QuillpostError) -> JSONResponse:
    """Render domain errors as ``{"detail", "error"}`` with their HTTP status."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    headers: dict[str, str] = {}
    retry_after = getattr(exc, "retry_after", None)
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.kind},
        headers=headers or None,
    )


@app.on_event("startup")
async def on_startup() -> None:
    sweeper = RateLimitSweeper(get_rate_limit_store(), settings.rate_limit_sweep_interval_seconds)
    await sweeper.start()
    app.state.rate_limit_sweeper = sweeper
    logger.info(
        "Quillpost %s started (storage=%s, rate limits=%s)",
        settings.app_version,
        settings.storage_backend,
        settings.rate_limit_backend,
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    sweeper: RateLimitSweeper | None = getattr(app.state, "rate_limit_sweeper", None)
    if sweeper:
        await sweeper.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Blog publishing API",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("quillpost.main:app", host="0.0.0.0", port=8000, reload=settings.debug)

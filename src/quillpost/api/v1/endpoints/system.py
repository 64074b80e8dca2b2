"""System and transparency endpoints for the Quillpost API."""

from __future__ import annotations

from fastapi import APIRouter

from quillpost.core.settings import settings
from quillpost.repositories.documents import PARTITION_KEY_PATHS

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/version")
async def get_version() -> dict[str, str]:
    return {"name": settings.app_name, "version": settings.app_version}


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets, keys and connection strings.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "jwt_algorithm": settings.jwt_algorithm,
            "access_token_expire_minutes": settings.access_token_expire_minutes,
            "debug": settings.debug,
        },
        "storage": {
            "backend": settings.storage_backend,
            "containers": {
                name: {"id": container_id, "partition_key": f"/{PARTITION_KEY_PATHS[name]}"}
                for name, container_id in settings.cosmos_containers.items()
            },
        },
        "rate_limits": {
            "backend": settings.rate_limit_backend,
            "read": {
                "window_seconds": settings.rate_limit_read_window_seconds,
                "max_requests": settings.rate_limit_read_max,
            },
            "auth": {
                "window_seconds": settings.rate_limit_auth_window_seconds,
                "max_requests": settings.rate_limit_auth_max,
            },
            "write": {
                "window_seconds": settings.rate_limit_write_window_seconds,
                "max_requests": settings.rate_limit_write_max,
            },
        },
    }

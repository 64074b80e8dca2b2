# src/quillpost/api/v1/endpoints/auth.py
"""Session endpoints for the Quillpost API.

Sign-in itself happens at the identity provider; these endpoints only inspect
and manage the session that results from it.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from quillpost.api.v1.dependencies import CurrentUserDep, auth_rate_limit
from quillpost.core.security import create_access_token
from quillpost.core.settings import settings
from quillpost.schemas.user import CurrentUser

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
    dependencies=[Depends(auth_rate_limit)],
)


@router.get("/me", response_model=CurrentUser)
async def read_me(user: CurrentUserDep) -> CurrentUser:
    """Return the signed-in user with roles from the allow-list."""
    return user


@router.post("/session", response_model=CurrentUser)
async def open_session(user: CurrentUserDep, response: Response) -> CurrentUser:
    """Exchange a valid bearer token for an HTTP-only session cookie."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=create_access_token(user),
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )
    return user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout() -> Response:
    """Clear the session cookie. Bearer tokens simply expire."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        secure=settings.session_cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return response

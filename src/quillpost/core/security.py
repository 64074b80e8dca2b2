"""Session token helpers built on python-jose."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import jwt

from quillpost.core.settings import settings
from quillpost.schemas.user import CurrentUser


def create_access_token(user: CurrentUser, expires_minutes: int | None = None) -> str:
    """Create a signed session token for ``user``.

    Args:
        user: The signed-in user; its email must be on the allow-list to be
            accepted later.
        expires_minutes: Lifetime override; defaults to
            ``ACCESS_TOKEN_EXPIRE_MINUTES``.

    Returns:
        The encoded JWT.
    """
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    to_encode: dict[str, Any] = {
        "sub": user.id,
        "email": user.email,
        "name": user.name,
        "roles": list(user.roles),
        "exp": datetime.now(UTC) + timedelta(minutes=minutes),
    }
    encoded_jwt: str = jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify ``token`` and return its claims.

    Raises:
        jose.JWTError: If the signature, algorithm or expiry is invalid.
    """
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.jwt_algorithm],
    )
    return payload

"""Static allow-list of people who may sign in to the admin side."""

from __future__ import annotations

from collections.abc import Iterable

from quillpost.core.settings import settings
from quillpost.schemas.user import AuthorizedUser


def _candidates(users: Iterable[AuthorizedUser] | None) -> Iterable[AuthorizedUser]:
    return settings.authorized_users if users is None else users


def get_authorized_user(
    email: str,
    users: Iterable[AuthorizedUser] | None = None,
) -> AuthorizedUser | None:
    """Return the allow-list entry for ``email`` (case-insensitive), if any."""
    wanted = email.strip().lower()
    for user in _candidates(users):
        if user.email.lower() == wanted:
            return user
    return None


def is_authorized_email(email: str, users: Iterable[AuthorizedUser] | None = None) -> bool:
    """Return True if ``email`` is on the allow-list."""
    return get_authorized_user(email, users) is not None

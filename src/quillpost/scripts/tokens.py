# src/quillpost/scripts/tokens.py
"""Mint a session token for an allow-listed email.

Stands in for the identity-provider callback during local development:

    python -m quillpost.scripts.tokens editor@example.com
"""

from __future__ import annotations

import argparse
import hashlib
import sys

from quillpost.core.authorized_users import get_authorized_user
from quillpost.core.security import create_access_token
from quillpost.core.settings import settings
from quillpost.schemas.user import AuthorizedUser, CurrentUser


def user_for(entry: AuthorizedUser) -> CurrentUser:
    """Build the session user for an allow-list entry.

    The subject is derived from the email so repeated runs mint tokens for the
    same author id.
    """
    subject = hashlib.sha256(entry.email.lower().encode("utf-8")).hexdigest()[:32]
    return CurrentUser(
        id=subject,
        email=entry.email,
        name=entry.name or entry.email,
        roles=entry.roles,
    )


def mint_token(email: str, expires_minutes: int | None = None) -> str:
    """Return a signed token for ``email``.

    Raises:
        PermissionError: If the email is not on the allow-list.
    """
    entry = get_authorized_user(email)
    if entry is None:
        raise PermissionError(f"{email} is not an authorized user")
    return create_access_token(user_for(entry), expires_minutes=expires_minutes)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Mint a Quillpost session token")
    parser.add_argument("email", help="Allow-listed email address")
    parser.add_argument(
        "--expires-minutes",
        type=int,
        default=None,
        help=f"Token lifetime (default {settings.access_token_expire_minutes})",
    )
    args = parser.parse_args(argv)
    try:
        print(mint_token(args.email, args.expires_minutes))
    except PermissionError as exc:
        print(f"[tokens] ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

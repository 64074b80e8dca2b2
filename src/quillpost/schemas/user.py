"""User and session schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AuthorizedUser(BaseModel):
    """An entry in the static allow-list of people who may sign in."""

    email: str
    roles: list[str] = Field(default_factory=list)
    name: str | None = None


class CurrentUser(BaseModel):
    """The authenticated caller, rebuilt from a verified session token."""

    id: str
    email: str
    name: str
    roles: list[str] = Field(default_factory=list)

    def has_role(self, role: str) -> bool:
        """Return True if the user holds ``role``; admins hold every role."""
        return role in self.roles or "admin" in self.roles

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles

"""ORM models for the SQL document store."""

from .document import Document

__all__ = ["Document"]

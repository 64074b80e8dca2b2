# src/quillpost/models/document.py
"""SQLAlchemy model emulating a partitioned document container."""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from quillpost.db.session import Base


class Document(Base):
    """One JSON document addressed by ``(container, partition_key, id)``.

    Mirrors Cosmos DB addressing: an id is only unique inside its partition,
    and a point read with the wrong partition key value finds nothing.
    """

    __tablename__ = "document"

    container: Mapped[str] = mapped_column(String(64), primary_key=True)
    partition_key: Mapped[str] = mapped_column(String(255), primary_key=True)
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    body: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

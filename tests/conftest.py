# tests/conftest.py
from __future__ import annotations

import json
import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-quillpost")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_COOKIE_SECURE", "false")
os.environ.setdefault("RATE_LIMIT_READ_MAX", "10000")
os.environ.setdefault("RATE_LIMIT_WRITE_MAX", "10000")
os.environ.setdefault("RATE_LIMIT_AUTH_MAX", "10000")
os.environ.setdefault(
    "AUTHORIZED_USERS",
    json.dumps(
        [
            {"email": "author@example.com", "roles": ["author"], "name": "Ada Author"},
            {"email": "writer@example.com", "roles": ["author"], "name": "Walt Writer"},
            {"email": "admin@example.com", "roles": ["admin"], "name": "Ann Admin"},
            {"email": "reader@example.com", "roles": [], "name": "Rita Reader"},
        ]
    ),
)

from quillpost.api.v1.dependencies import get_rate_limit_store  # noqa: E402
from quillpost.core.security import create_access_token  # noqa: E402
from quillpost.db.session import Base  # noqa: E402
from quillpost.db.session import get_db as app_get_session  # noqa: E402
from quillpost.main import app as fastapi_app  # noqa: E402
from quillpost.repositories.sql_store import SqlDocumentStore  # noqa: E402
from quillpost.schemas.post import Author, Post  # noqa: E402
from quillpost.schemas.user import CurrentUser  # noqa: E402
from quillpost.services.rate_limit import InMemoryRateLimitStore  # noqa: E402

TEST_DB_URL = "sqlite://"

_POST_COUNTER = count(1)

AUTHOR = CurrentUser(id="author-1", email="author@example.com", name="Ada Author", roles=["author"])
WRITER = CurrentUser(id="writer-1", email="writer@example.com", name="Walt Writer", roles=["author"])
ADMIN = CurrentUser(id="admin-1", email="admin@example.com", name="Ann Admin", roles=["admin"])
READER = CurrentUser(id="reader-1", email="reader@example.com", name="Rita Reader", roles=[])


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

        # The document store commits, so each test wipes the tables afterwards.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def store(db_session: Session) -> SqlDocumentStore:
    return SqlDocumentStore(db_session)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture(autouse=True)
def reset_rate_limits() -> Iterator[None]:
    """Start every test with empty rate-limit counters."""
    limit_store = get_rate_limit_store()
    if isinstance(limit_store, InMemoryRateLimitStore):
        limit_store.clear()
    yield


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def _headers_for(user: CurrentUser) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture()
def author_headers() -> dict[str, str]:
    """Return authorization headers for an author."""
    return _headers_for(AUTHOR)


@pytest.fixture()
def writer_headers() -> dict[str, str]:
    """Return authorization headers for a second author."""
    return _headers_for(WRITER)


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    return _headers_for(ADMIN)


@pytest.fixture()
def reader_headers() -> dict[str, str]:
    """Return authorization headers for an allow-listed user with no roles."""
    return _headers_for(READER)


@pytest.fixture()
def make_post(store: SqlDocumentStore) -> Callable[..., Post]:
    """Persist a post document directly, bypassing slug checks."""

    def _make_post(
        slug: str = "hello-world",
        *,
        status: str = "published",
        published_at: datetime | None = None,
        author: CurrentUser = AUTHOR,
        **overrides: Any,
    ) -> Post:
        number = next(_POST_COUNTER)
        created = datetime(2024, 1, 1, tzinfo=UTC)
        if status == "published" and published_at is None:
            published_at = datetime(2024, 1, number % 28 + 1, tzinfo=UTC)
        post = Post(
            id=overrides.pop("id", f"post-{number}"),
            slug=slug,
            title=overrides.pop("title", f"Post {number}"),
            content=overrides.pop("content", "Body text"),
            author=Author(id=author.id, name=author.name, email=author.email),
            status=status,
            published_at=published_at,
            created_at=created,
            updated_at=created,
            **overrides,
        )
        store.create("posts", post.to_document())
        return post

    return _make_post

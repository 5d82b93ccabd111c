"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.test_constants import TEST_DATABASE_URL, TEST_PASSWORD, TEST_SECRET_KEY

# Force an in-memory database when pytest runs; don't inherit from .env
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ.setdefault("SECRET_KEY", TEST_SECRET_KEY)
os.environ.setdefault("WORKER_POOL_SIZE", "2")


@pytest.fixture
def db() -> Iterator[Session]:
    """Database session on a fresh schema. Tables are dropped after each test."""
    import inkwell.models  # noqa: F401
    from inkwell.db.session import Base, engine

    Base.metadata.create_all(bind=engine)
    session = Session(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    from inkwell.main import app

    return TestClient(app)


@pytest.fixture
def client_with_db(db: Session) -> Iterator[TestClient]:
    """TestClient with get_db overridden to use the test db session."""
    from inkwell.db.session import get_db
    from inkwell.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app)
    yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def make_user(db: Session) -> Callable[..., Any]:
    """Factory creating persisted users: make_user("bob"), make_user("root", is_super_admin=True)."""
    from inkwell.services.auth import create_user

    def _make(username: str, is_super_admin: bool = False, **fields):
        return create_user(
            db,
            username=username,
            email=fields.pop("email", f"{username}@example.com"),
            password=fields.pop("password", TEST_PASSWORD),
            is_super_admin=is_super_admin,
            **fields,
        )

    return _make


# creatorhub/conftest.py
import itertools
import os

import pytest

# Must be set before creatorhub.core.config builds its Settings
os.environ.setdefault("JWT_SECRET", "creatorhub-test-secret-0123456789abcdef")
os.environ.setdefault("ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from fastapi.testclient import TestClient

from creatorhub.core.database import Database
from creatorhub.core.security import create_access_token
from creatorhub.features.users.service import create_user
from creatorhub.main import create_app
from creatorhub.models.user import Role, User


@pytest.fixture
def db():
    """Fresh in-memory SQLite database with all tables created."""
    database = Database("sqlite:///:memory:").open()
    database.create_all()
    yield database
    database.close()


@pytest.fixture
def app(db):
    return create_app(database=db)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    """
    Factory for persisted users.

    make_user()                       -> SUBSCRIBER
    make_user(Role.CREATOR)           -> CREATOR
    make_user(email="x@example.com")  -> custom email
    """
    counter = itertools.count(1)

    def _make(role: Role = Role.SUBSCRIBER, email: str = None, password: str = "password123") -> User:
        n = next(counter)
        return create_user(db, email or f"{role.value.lower()}{n}@example.com", password, role=role)

    return _make


@pytest.fixture
def auth_headers():
    """Build an Authorization header carrying a real signed token for `user`."""

    def _headers(user) -> dict:
        identity = user.identity() if isinstance(user, User) else user
        return {"Authorization": f"Bearer {create_access_token(identity)}"}

    return _headers

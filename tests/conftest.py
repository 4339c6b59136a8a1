"""
Shared fixtures.

Password hashing runs with a low iteration count so the suite stays fast.
"""

import pytest
from fastapi.testclient import TestClient

from vidvault.api.app import create_app
from vidvault.auth import IdentityVerifier, Principal, SessionManager
from vidvault.config import Settings
from vidvault.core.models import Role, VideoCreate
from vidvault.services import CatalogService
from vidvault.storage import create_local_storage


@pytest.fixture
def settings():
    return Settings(_env_file=None, password_hash_iterations=1_000)


@pytest.fixture
def storage():
    return create_local_storage()


@pytest.fixture
def store(storage):
    return storage.catalog


@pytest.fixture
def identity(storage, settings):
    return IdentityVerifier(
        store=storage.catalog,
        sessions=SessionManager(storage.cache, settings),
        settings=settings,
    )


@pytest.fixture
def catalog(store):
    return CatalogService(store)


@pytest.fixture
def admin():
    return Principal(id="user_admin", role=Role.ADMIN, email="admin@example.com")


@pytest.fixture
def user():
    return Principal(id="user_viewer", role=Role.USER, email="viewer@example.com")


@pytest.fixture
def new_video():
    """Factory for create() input."""
    def make(**overrides) -> VideoCreate:
        data = {"title": "Launch Keynote", "source_url": "https://cdn.example.com/keynote.mp4"}
        data.update(overrides)
        return VideoCreate(**data)
    return make


@pytest.fixture
def client(storage, settings):
    app = create_app(storage=storage, settings=settings)
    with TestClient(app) as c:
        yield c

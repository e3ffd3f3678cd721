"""API-specific test fixtures.

The app is wired to the shared InMemoryStore through ``dependency_overrides``;
ASGITransport does not run the lifespan, so no database is needed.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from taskboard.api.deps import get_store
from taskboard.main import create_app


@pytest.fixture
def app(store):
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def as_user(user) -> dict[str, str]:
    """Identity header for the given user."""
    return {"X-User-Id": str(user.id)}


@pytest.fixture
def owner_headers(owner):
    return as_user(owner)


@pytest.fixture
def other_headers(other_user):
    return as_user(other_user)

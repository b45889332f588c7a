"""Shared test fixtures for the SceneIt engine."""

import base64
import os

import pytest
from httpx import ASGITransport, AsyncClient


ADMIN_PASSWORD = "test-admin-password"
SECRET_KEY = "test-secret-key-for-unit-tests"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


@pytest.fixture
def admin_password():
    return ADMIN_PASSWORD


@pytest.fixture
def png_data_url():
    return PNG_DATA_URL


@pytest.fixture
def app():
    """Create a test app with in-memory DB."""
    os.environ["SCENEIT_ENVIRONMENT"] = "development"
    os.environ["SCENEIT_DB_URL"] = "sqlite+aiosqlite://"
    os.environ["SCENEIT_STORAGE_BACKEND"] = "sql"
    os.environ["SCENEIT_BLOB_BACKEND"] = "none"
    os.environ["SCENEIT_SECRET_KEY"] = SECRET_KEY
    os.environ["SCENEIT_ADMIN_PASSWORD"] = ADMIN_PASSWORD
    os.environ["SCENEIT_GOOGLE_API_KEY"] = ""

    # Clear caches and singletons so new env vars take effect
    from sceneit_engine.common.config import get_settings
    get_settings.cache_clear()

    from sceneit_engine.deps import reset_singletons
    reset_singletons()

    from sceneit_engine.app import create_app
    return create_app()


@pytest.fixture
async def storage(app):
    # Manually init storage since ASGITransport doesn't run lifespan
    from sceneit_engine.deps import get_storage
    backend = get_storage()
    await backend.init()
    yield backend
    await backend.close()


@pytest.fixture
async def client(app, storage):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def admin_client(client):
    resp = await client.post("/api/admin/auth", json={"password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    return client

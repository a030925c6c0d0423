"""Pytest configuration helpers.

Points the app at a throwaway SQLite database and media directory and
forces the mock image provider, before any ``storyforge`` module is
imported (settings and the engine are created at import time).
"""
import os
import sys
import tempfile

import httpx
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
BACKEND = os.path.join(ROOT, "backend")
if BACKEND not in sys.path:
    sys.path.insert(0, BACKEND)

_TMP = tempfile.mkdtemp(prefix="storyforge-tests-")
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP, 'test.db')}"
os.environ["MEDIA_VOLUME"] = os.path.join(_TMP, "media")
os.environ["USE_MOCK_API"] = "true"
os.environ["IMAGE_FALLBACK_TO_MOCK"] = "false"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["DEBUG"] = "false"


@pytest.fixture
async def db_tables():
    """Create all tables for one test and drop them afterwards."""
    import storyforge.models  # noqa: F401
    from storyforge.database import Base, engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_tables):
    """HTTP client bound to the ASGI app; background tasks finish before a response returns."""
    from storyforge.main import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def project(client):
    resp = await client.post("/api/projects", json={"name": "Neon Harbor"})
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def make_asset(client, project):
    """Factory creating an asset in the test project, optionally locked."""

    async def _make(name="Mira", type="character", locked=False, **fields):
        payload = {"name": name, "type": type, **fields}
        resp = await client.post(f"/api/projects/{project['id']}/assets", json=payload)
        assert resp.status_code == 201, resp.text
        asset = resp.json()
        if locked:
            resp = await client.post(f"/api/projects/{project['id']}/assets/{asset['id']}/lock")
            assert resp.status_code == 200, resp.text
            asset = resp.json()
        return asset

    return _make


@pytest.fixture
def make_scene(client, project):
    async def _make(**fields):
        resp = await client.post(f"/api/projects/{project['id']}/scenes", json=fields)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _make

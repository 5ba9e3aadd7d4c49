import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from backlink_tracker.database import Database
from backlink_tracker.main import app


@pytest_asyncio.fixture
async def database(tmp_path):
    """Fresh file-backed SQLite database per test, attached to the app."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path}/test.db")
    await db.connect()
    app.state.database = db
    yield db
    await db.dispose()
    del app.state.database


@pytest_asyncio.fixture
async def client(database):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def make_website(client):
    async def _make(domain="a.com", name="A", category="saas"):
        response = await client.post("/api/websites", json={
            "domain": domain,
            "name": name,
            "category": category
        })
        assert response.status_code == 200, response.text
        return response.json()["data"]
    return _make


@pytest.fixture
def make_resource(client):
    async def _make(domain="tools.example.com", category="ai-directory", **fields):
        payload = {
            "domain": domain,
            "url": f"https://{domain}/submit",
            "category": category,
        }
        payload.update(fields)
        response = await client.post("/api/resources", json=payload)
        assert response.status_code == 200, response.text
        return response.json()["data"]
    return _make


@pytest.fixture
def make_backlink(client):
    async def _make(website_id, resource_id, status="pending", **fields):
        payload = {"website_id": website_id, "resource_id": resource_id, "status": status}
        payload.update(fields)
        response = await client.post("/api/backlinks", json=payload)
        assert response.status_code == 200, response.text
        return response.json()["data"]
    return _make

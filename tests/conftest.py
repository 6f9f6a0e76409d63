"""
Plovster feedback - test configuration and fixtures
"""
import os

os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.pop("MONGO_URI", None)

import httpx
import pytest
from httpx import AsyncClient, ASGITransport

from main import app, init_state
from Connections.api_client import ComplaintsApi
from mocks.fake_backend import API_BASE, FakeBackend


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def api(backend: FakeBackend):
    client = ComplaintsApi(httpx.AsyncClient(transport=backend.transport(), base_url=API_BASE))
    yield client
    await client.aclose()


@pytest.fixture
async def client(api: ComplaintsApi):
    """Front service with fresh state, wired to the fake API"""
    init_state(app, api)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _login(client: AsyncClient, username: str) -> AsyncClient:
    response = await client.post("/auth/login", json={"username": username, "password": "secret"})
    assert response.status_code == 200
    client.headers["Authorization"] = f"Bearer {response.json()['access_token']}"
    return client


@pytest.fixture
async def admin_client(client: AsyncClient) -> AsyncClient:
    return await _login(client, "root")


@pytest.fixture
async def manager_client(client: AsyncClient) -> AsyncClient:
    return await _login(client, "olga")

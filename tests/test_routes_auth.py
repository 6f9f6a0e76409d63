import pytest
from httpx import AsyncClient

from auth.security import SESSION_COOKIE


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, backend):
    response = await client.post("/auth/login", json={"username": "root", "password": "secret"})

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["role"] == "admin"
    assert "access_token" in data
    assert SESSION_COOKIE in response.cookies


@pytest.mark.asyncio
async def test_login_invalid_credentials(client: AsyncClient):
    response = await client.post("/auth/login", json={"username": "root", "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Неверный логин или пароль"


@pytest.mark.asyncio
async def test_login_requires_fields(client: AsyncClient):
    response = await client.post("/auth/login", json={"username": "", "password": ""})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_me(admin_client: AsyncClient):
    response = await admin_client.get("/auth/me")

    assert response.status_code == 200
    assert response.json() == {"username": "root", "role": "admin", "is_admin": True}


@pytest.mark.asyncio
async def test_unauthorized_access(client: AsyncClient):
    response = await client.get("/admin/dashboard")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_garbage_token(client: AsyncClient):
    response = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_invalidates_session(admin_client: AsyncClient):
    token_header = admin_client.headers["Authorization"]

    response = await admin_client.post("/auth/logout")
    assert response.status_code == 204

    admin_client.cookies.clear()
    response = await admin_client.get("/auth/me", headers={"Authorization": token_header})
    assert response.status_code == 401
    assert response.json()["detail"] == "Session closed"


@pytest.mark.asyncio
async def test_backend_token_forwarded(admin_client: AsyncClient, backend):
    await admin_client.get("/admin/dashboard")
    request = backend.calls("GET", "/complaints")[-1]
    assert request.headers["Authorization"] == "Bearer tok-root"


@pytest.mark.asyncio
async def test_login_with_malformed_answer(client: AsyncClient, backend):
    backend.respond("POST", "/auth/login", 200, ["unexpected"])
    response = await client.post("/auth/login", json={"username": "root", "password": "secret"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Неверный логин или пароль"

"""Auth boundary: every /api route except login/logout needs a valid session token."""
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

from sigep.config import settings
from sigep.database import get_db
from sigep.main import app
from sigep.auth import create_session_token


@pytest.fixture
async def anon_client(session_factory):
    """Client with only get_db overridden, so require_user really runs."""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/api/persons", "/api/dashboard/stats", "/api/weapons", "/api/units", "/api/reports"])
async def test_protected_routes_require_a_session(anon_client, path):
    r = await anon_client.get(path)
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_health_is_public(anon_client):
    r = await anon_client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_bearer_token_is_accepted(anon_client):
    token = create_session_token("oidc|42", email="agente@sejus.ro.gov.br", name="Agente Teste")
    r = await anon_client.get("/api/persons", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json() == []
    r = await anon_client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})
    assert r.json()["id"] == "oidc|42"
    assert r.json()["first_name"] == "Agente"


@pytest.mark.asyncio
async def test_expired_or_tampered_token_is_rejected(anon_client):
    past = datetime.now(tz=timezone.utc) - timedelta(hours=1)
    expired = jwt.encode({"sub": "x", "exp": int(past.timestamp())}, settings.auth_secret, algorithm=settings.auth_algorithm)
    assert (await anon_client.get("/api/persons", headers={"Authorization": f"Bearer {expired}"})).status_code == 401
    forged = jwt.encode({"sub": "x"}, "another-secret", algorithm=settings.auth_algorithm)
    assert (await anon_client.get("/api/persons", headers={"Authorization": f"Bearer {forged}"})).status_code == 401


@pytest.mark.asyncio
async def test_login_sets_cookie_and_user(anon_client):
    r = await anon_client.post("/api/auth/login", json={"username": "admin", "password": "wrong"})
    assert r.status_code == 401

    r = await anon_client.post(
        "/api/auth/login",
        json={"username": settings.admin_username, "password": settings.admin_password},
    )
    assert r.status_code == 200
    assert settings.session_cookie_name in r.cookies
    # the cookie alone authenticates follow-up requests
    r = await anon_client.get("/api/auth/user")
    assert r.status_code == 200
    assert r.json()["id"] == settings.admin_username
    assert (await anon_client.get("/api/persons")).status_code == 200

    r = await anon_client.post("/api/auth/logout")
    assert r.status_code == 204
    assert (await anon_client.get("/api/persons")).status_code == 401

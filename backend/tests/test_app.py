"""Application-level error handling."""
import logging

import pytest
from httpx import ASGITransport, AsyncClient

from sigep.auth import AuthenticatedUser, require_user
from sigep.database import get_db
from sigep.main import app


@pytest.mark.asyncio
async def test_unexpected_error_is_generic_500_and_logged(caplog):
    async def broken_db():
        raise RuntimeError("connection string with password=secret")
        yield  # pragma: no cover

    app.dependency_overrides[get_db] = broken_db
    app.dependency_overrides[require_user] = lambda: AuthenticatedUser(id="tester")
    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            with caplog.at_level(logging.ERROR, logger="sigep.main"):
                r = await ac.get("/api/persons")
    finally:
        app.dependency_overrides.clear()
    assert r.status_code == 500
    assert r.json() == {"detail": "Internal Server Error"}
    assert "secret" not in r.text
    assert any("unhandled error" in rec.message for rec in caplog.records)

"""Application-level tests against the app built by create_app, without overrides."""

import pytest
from httpx import ASGITransport, AsyncClient

from rentals.main import create_app


@pytest.mark.asyncio
async def test_service_endpoints_without_overrides():
    """Health, readiness and info answer on the default engine."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

        response = await client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"

        response = await client.get("/info")
        assert response.status_code == 200
        assert response.json()["endpoints"]["metrics"] == "/metrics"


@pytest.mark.asyncio
async def test_unparseable_date_is_a_schema_violation():
    """Dates that cannot be read as a calendar day fail before reaching a service."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post(
            "/v1/availability/day",
            json={"date": "the fifth of november"},
        )

    assert response.status_code == 422
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["violations"][0]["path"] == "date"


@pytest.mark.asyncio
async def test_openapi_docs():
    """Test that OpenAPI docs are available in development."""
    app = create_app()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/docs")
        assert response.status_code == 200

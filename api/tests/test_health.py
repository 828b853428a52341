"""Tests for health and version endpoints."""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from validator_jobs.main import app
from validator_jobs.services.settings import Settings
from validator_jobs.services.team_registry_provider import (
    MisconfiguredTeamRegistryProvider,
    SimulatedTeamRegistryProvider,
)
from validator_jobs.services.team_registry_service import TeamRegistryService


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def _known_state(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        app.state,
        "settings",
        Settings(github_api_base="https://ghe.example.com/api/v3", github_token="secret-token", upstream_timeout_seconds=4.0),
    )
    monkeypatch.setattr(app.state, "team_registry", TeamRegistryService(SimulatedTeamRegistryProvider()))


@pytest.mark.asyncio
async def test_health_reports_configuration(client: AsyncClient):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "version": "1.0.0",
        "teamRegistryBackend": "simulated",
        "upstreams": {
            "githubApiBase": "https://ghe.example.com/api/v3",
            "githubAuthenticated": True,
            "poapApiBase": "https://api.poap.tech",
            "poapApiKeyConfigured": False,
            "timeoutSeconds": 4.0,
        },
    }


@pytest.mark.asyncio
async def test_health_degraded_when_registry_misconfigured(client: AsyncClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(
        app.state,
        "team_registry",
        TeamRegistryService(MisconfiguredTeamRegistryProvider("team_registry_misconfigured:missing_required_env")),
    )

    data = (await client.get("/api/health")).json()

    assert data["status"] == "degraded"
    assert data["teamRegistryBackend"] == "misconfigured"


@pytest.mark.asyncio
async def test_health_never_exposes_secrets(client: AsyncClient):
    body = (await client.get("/api/health")).text
    assert "secret-token" not in body


@pytest.mark.asyncio
async def test_version_endpoint(client: AsyncClient):
    response = await client.get("/api/version")
    assert response.status_code == 200
    assert response.json() == {"version": "1.0.0"}


@pytest.mark.asyncio
async def test_runtime_headers_attached(client: AsyncClient):
    response = await client.get("/api/version", headers={"x-request-id": "req-123"})
    assert float(response.headers["x-validator-jobs-runtime-ms"]) > 0
    assert response.headers["x-validator-jobs-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_request_id_header_omitted_without_incoming_id(client: AsyncClient):
    response = await client.get("/api/version")
    assert "x-validator-jobs-request-id" not in response.headers


@pytest.mark.asyncio
async def test_cors_exposes_runtime_headers(client: AsyncClient):
    response = await client.get("/api/version", headers={"Origin": "http://localhost:3000"})
    exposed = response.headers["access-control-expose-headers"].lower()
    assert "x-validator-jobs-runtime-ms" in exposed
    assert "x-validator-jobs-request-id" in exposed


@pytest.mark.asyncio
async def test_docs_returns_200(client: AsyncClient):
    response = await client.get("/docs")
    assert response.status_code == 200

"""Service status: version, upstream endpoints and the team registry backend."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel, ConfigDict, Field

from validator_jobs.services.settings import Settings
from validator_jobs.services.team_registry_service import TeamRegistryService

router = APIRouter()

API_VERSION = "1.0.0"


class UpstreamStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    github_api_base: str = Field(..., alias="githubApiBase")
    github_authenticated: bool = Field(..., alias="githubAuthenticated")
    poap_api_base: str = Field(..., alias="poapApiBase")
    poap_api_key_configured: bool = Field(..., alias="poapApiKeyConfigured")
    timeout_seconds: float = Field(..., alias="timeoutSeconds")


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # "degraded" while team registration cannot succeed (misconfigured backend).
    status: str
    version: str
    team_registry_backend: str = Field(..., alias="teamRegistryBackend")
    upstreams: UpstreamStatus


@router.get("/version")
async def version():
    return {"version": API_VERSION}


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    settings: Settings = request.app.state.settings
    registry: TeamRegistryService = request.app.state.team_registry
    backend = registry.backend
    return HealthResponse(
        status="degraded" if backend == "misconfigured" else "ok",
        version=API_VERSION,
        team_registry_backend=backend,
        upstreams=UpstreamStatus(
            github_api_base=settings.github_api_base,
            github_authenticated=bool(settings.github_token),
            poap_api_base=settings.poap_api_base,
            poap_api_key_configured=bool(settings.poap_api_key),
            timeout_seconds=settings.upstream_timeout_seconds,
        ),
    )

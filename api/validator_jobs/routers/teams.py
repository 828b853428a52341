from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from validator_jobs.models.error import ErrorDetail
from validator_jobs.models.team import Team, TeamMatchRequest
from validator_jobs.models.team_registration import TeamRegistration, TeamRegistrationRequest
from validator_jobs.services.team_matcher import match_teams
from validator_jobs.services.team_registry_service import TeamRegistryService

router = APIRouter()


def get_team_registry(request: Request) -> TeamRegistryService:
    return request.app.state.team_registry


@router.post(
    "/teams/match",
    response_model=list[Team],
    responses={400: {"model": ErrorDetail}},
)
def match(body: TeamMatchRequest) -> list[Team]:
    """Greedily form teams from operators ranked by reputation."""
    return match_teams(body.operators, body.min_team_size, body.max_team_size)


@router.post(
    "/teams/register",
    response_model=TeamRegistration,
    status_code=201,
    responses={
        400: {"model": ErrorDetail},
        502: {"model": ErrorDetail},
        503: {"model": ErrorDetail},
    },
)
async def register(
    body: TeamRegistrationRequest,
    registry: TeamRegistryService = Depends(get_team_registry),
) -> TeamRegistration:
    """Record a team with the on-chain team manager contract."""
    return await registry.register(body)

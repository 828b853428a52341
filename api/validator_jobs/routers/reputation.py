from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request

from validator_jobs.models.error import ErrorDetail
from validator_jobs.models.reputation import ReputationGrade, ReputationRequest, ReputationResponse
from validator_jobs.services.reputation_scorer import reputation_grade
from validator_jobs.services.reputation_service import ReputationService

router = APIRouter()


def get_reputation_service(request: Request) -> ReputationService:
    return request.app.state.reputation_service


@router.post(
    "/reputation/calculate",
    response_model=ReputationResponse,
    responses={
        400: {"model": ErrorDetail},
        404: {"model": ErrorDetail},
        429: {"model": ErrorDetail},
        503: {"model": ErrorDetail},
    },
)
def calculate_reputation(
    body: ReputationRequest,
    service: ReputationService = Depends(get_reputation_service),
) -> ReputationResponse:
    """Score a GitHub account and wallet from live GitHub and POAP data."""
    return service.calculate(body.github_username, body.wallet_address)


@router.get("/reputation/grade", response_model=ReputationGrade)
def grade_for_score(score: int = Query(..., ge=0, description="Total reputation score")) -> ReputationGrade:
    return reputation_grade(score)

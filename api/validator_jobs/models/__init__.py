"""Pydantic models."""

from validator_jobs.models.error import ErrorDetail
from validator_jobs.models.reputation import (
    GitHubProfile,
    GitHubRepository,
    PoapEvent,
    ReputationGrade,
    ReputationScore,
    ScoreBreakdown,
)
from validator_jobs.models.team import Operator, OperatorRole, Team, TeamRoles
from validator_jobs.models.team_registration import TeamRegistration, TeamRegistrationRequest

__all__ = [
    "ErrorDetail",
    "GitHubProfile",
    "GitHubRepository",
    "Operator",
    "OperatorRole",
    "PoapEvent",
    "ReputationGrade",
    "ReputationScore",
    "ScoreBreakdown",
    "Team",
    "TeamRegistration",
    "TeamRegistrationRequest",
    "TeamRoles",
]

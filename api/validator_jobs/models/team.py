from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OperatorRole(str, Enum):
    LEADER = "leader"
    MEMBER = "member"
    TECHNICAL = "technical"
    FINANCIAL = "financial"


class Operator(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    github_username: str = Field(..., alias="githubUsername")
    wallet_address: str = Field(..., min_length=1, alias="walletAddress")
    reputation_score: int = Field(..., alias="reputationScore")
    skills: list[str] = Field(default_factory=list)
    preferred_role: OperatorRole = Field(OperatorRole.MEMBER, alias="preferredRole")


class TeamRoles(BaseModel):
    model_config = ConfigDict(frozen=True)

    leader: Operator
    technical: list[Operator]
    financial: Operator


class Team(BaseModel):
    """A formed team; members are listed in selection order."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    team_id: str = Field(..., alias="teamId")
    members: list[Operator]
    average_reputation: int = Field(..., alias="averageReputation")
    team_strength: int = Field(..., ge=0, le=100, alias="teamStrength")
    roles: TeamRoles


class TeamMatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    operators: list[Operator] = Field(default_factory=list)
    min_team_size: int = Field(3, alias="minTeamSize")
    max_team_size: int = Field(5, alias="maxTeamSize")

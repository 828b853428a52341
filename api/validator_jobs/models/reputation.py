from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GitHubProfile(BaseModel):
    """Subset of the GitHub ``/users/{login}`` payload used for scoring."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    login: str
    public_repos: int = Field(0, ge=0)
    followers: int = Field(0, ge=0)
    created_at: datetime


class GitHubRepository(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    description: Optional[str] = None
    stargazers_count: int = Field(0, ge=0)
    topics: list[str] = Field(default_factory=list)

    @field_validator("topics", mode="before")
    @classmethod
    def _none_topics(cls, value: Any) -> Any:
        return [] if value is None else value


class PoapEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""

    @classmethod
    def from_scan_item(cls, item: Any) -> Optional[PoapEvent]:
        """Build from one ``/actions/scan`` entry; None when the entry has no event."""
        if not isinstance(item, dict):
            return None
        event = item.get("event")
        if not isinstance(event, dict) or not event.get("name"):
            return None
        return cls(name=str(event["name"]), description=str(event.get("description") or ""))


class ScoreBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    repos: int = Field(0, ge=0)
    followers: int = Field(0, ge=0)
    experience: int = Field(0, ge=0)
    dvt_bonus: int = Field(0, ge=0, alias="dvtBonus")
    ethereum_events: int = Field(0, ge=0, alias="ethereumEvents")
    hackathons: int = Field(0, ge=0)


class ReputationScore(BaseModel):
    """Composite 0-1000 score: GitHub (max 700) plus POAP (max 300)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total: int = Field(..., ge=0, le=1000)
    github: int = Field(..., ge=0, le=700)
    poap: int = Field(..., ge=0, le=300)
    breakdown: ScoreBreakdown


class Grade(str, Enum):
    S = "S"
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class ReputationGrade(BaseModel):
    model_config = ConfigDict(frozen=True)

    grade: Grade
    description: str


class ReputationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    github_username: str = Field("", alias="githubUsername")
    wallet_address: str = Field("", alias="walletAddress")


class ReputationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    github_username: str = Field(..., alias="githubUsername")
    wallet_address: str = Field(..., alias="walletAddress")
    score: ReputationScore
    grade: ReputationGrade

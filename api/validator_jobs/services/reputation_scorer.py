"""Reputation scoring for validator operators.

GitHub activity contributes up to 700 points and POAP attendance up to 300.
Every term is clamped before summing and each sub-score is clamped again,
so the total always lands in 0..1000. Wall-clock time only feeds the
account-age term and is read from an injectable clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional, Sequence

from validator_jobs.models.reputation import (
    GitHubProfile,
    GitHubRepository,
    Grade,
    PoapEvent,
    ReputationGrade,
    ReputationScore,
    ScoreBreakdown,
)

GITHUB_MAX = 700
POAP_MAX = 300

REPOS_CAP = 200
FOLLOWERS_CAP = 150
EXPERIENCE_CAP = 200
DVT_BONUS_CAP = 150
DVT_BONUS_PER_REPO_CAP = 30
ETHEREUM_EVENTS_CAP = 150
HACKATHONS_CAP = 150

# 365-day years, not calendar years.
YEAR = timedelta(days=365)

REPO_DVT_KEYWORDS = ("dvt", "obol", "ethereum", "validator", "consensus", "beacon", "staking")
ETHEREUM_EVENT_KEYWORDS = ("ethereum", "eth", "devconnect", "devcon", "consensus", "staking")
DVT_EVENT_KEYWORDS = ("dvt", "obol", "validator", "distributed")
HACKATHON_KEYWORDS = ("ethglobal", "hackathon", "buidl", "hack", "builder")

GRADE_BANDS: tuple[tuple[int, Grade, str], ...] = (
    (800, Grade.S, "Elite Operator"),
    (650, Grade.A, "Senior Operator"),
    (500, Grade.B, "Experienced Operator"),
    (350, Grade.C, "Junior Operator"),
)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _any_keyword(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)


def account_age_years(created_at: datetime, now: datetime) -> int:
    age = _as_utc(now) - _as_utc(created_at)
    if age <= timedelta(0):
        return 0
    return age // YEAR


def repo_dvt_bonus(repo: GitHubRepository) -> int:
    corpus = f"{repo.name} {repo.description or ''} {' '.join(repo.topics)}".lower()
    matches = sum(1 for keyword in REPO_DVT_KEYWORDS if keyword in corpus)
    if matches == 0:
        return 0
    return min(matches * 15 + repo.stargazers_count, DVT_BONUS_PER_REPO_CAP)


def calculate_github_score(
    profile: GitHubProfile,
    repos: Sequence[GitHubRepository],
    now: datetime,
) -> tuple[int, dict[str, int]]:
    """Return (github score, partial breakdown) for a profile and its repositories."""
    repos_points = min(profile.public_repos * 8, REPOS_CAP)
    followers_points = min(profile.followers // 5, FOLLOWERS_CAP)
    experience_points = min(account_age_years(profile.created_at, now) * 25, EXPERIENCE_CAP)

    dvt_bonus = 0
    for repo in repos:
        dvt_bonus += repo_dvt_bonus(repo)
    dvt_bonus = min(dvt_bonus, DVT_BONUS_CAP)

    total = repos_points + followers_points + experience_points + dvt_bonus
    return min(total, GITHUB_MAX), {
        "repos": repos_points,
        "followers": followers_points,
        "experience": experience_points,
        "dvt_bonus": dvt_bonus,
    }


def calculate_poap_score(poaps: Sequence[PoapEvent]) -> tuple[int, dict[str, int]]:
    """Return (poap score, partial breakdown) for a list of attended events."""
    ethereum_events = 0
    hackathons = 0
    for poap in poaps:
        corpus = f"{poap.name} {poap.description}".lower()
        if _any_keyword(corpus, ETHEREUM_EVENT_KEYWORDS):
            ethereum_events += 25
            if _any_keyword(corpus, DVT_EVENT_KEYWORDS):
                ethereum_events += 15
        if _any_keyword(corpus, HACKATHON_KEYWORDS):
            hackathons += 50
            if "ethglobal" in corpus:
                hackathons += 20

    ethereum_events = min(ethereum_events, ETHEREUM_EVENTS_CAP)
    hackathons = min(hackathons, HACKATHONS_CAP)
    return min(ethereum_events + hackathons, POAP_MAX), {
        "ethereum_events": ethereum_events,
        "hackathons": hackathons,
    }


def reputation_grade(total: int) -> ReputationGrade:
    for floor, grade, description in GRADE_BANDS:
        if total >= floor:
            return ReputationGrade(grade=grade, description=description)
    return ReputationGrade(grade=Grade.D, description="Novice Operator")


class ReputationScorer:
    def __init__(self, clock: Optional[Clock] = None) -> None:
        self._clock: Clock = clock or utc_now

    def score(
        self,
        profile: GitHubProfile,
        repos: Sequence[GitHubRepository],
        poaps: Sequence[PoapEvent],
        now: Optional[datetime] = None,
    ) -> ReputationScore:
        now = now or self._clock()
        github, github_parts = calculate_github_score(profile, repos, now)
        poap, poap_parts = calculate_poap_score(poaps)
        return ReputationScore(
            total=github + poap,
            github=github,
            poap=poap,
            breakdown=ScoreBreakdown(**github_parts, **poap_parts),
        )

"""Fetch upstream identity data and score it."""

from __future__ import annotations

import logging
from typing import Optional

from validator_jobs.models.reputation import ReputationResponse
from validator_jobs.services.errors import InvalidInputError, UpstreamUnavailableError
from validator_jobs.services.github_client import GitHubClient
from validator_jobs.services.poap_client import PoapClient
from validator_jobs.services.reputation_scorer import ReputationScorer, reputation_grade
from validator_jobs.services.settings import Settings

logger = logging.getLogger(__name__)


class ReputationService:
    def __init__(
        self,
        github: GitHubClient,
        poap: PoapClient,
        scorer: Optional[ReputationScorer] = None,
    ) -> None:
        self.github = github
        self.poap = poap
        self.scorer = scorer or ReputationScorer()

    @classmethod
    def from_settings(cls, settings: Settings, scorer: Optional[ReputationScorer] = None) -> ReputationService:
        github = GitHubClient(
            token=settings.github_token,
            base_url=settings.github_api_base,
            user_agent=settings.user_agent,
            timeout=settings.upstream_timeout_seconds,
        )
        poap = PoapClient(
            api_key=settings.poap_api_key,
            base_url=settings.poap_api_base,
            user_agent=settings.user_agent,
            timeout=settings.upstream_timeout_seconds,
        )
        return cls(github, poap, scorer)

    def calculate(self, github_username: str, wallet_address: str) -> ReputationResponse:
        github_username = (github_username or "").strip()
        wallet_address = (wallet_address or "").strip()
        if not github_username or not wallet_address:
            raise InvalidInputError("GitHub username and wallet address are required")

        profile = self.github.get_user(github_username)
        try:
            repos = self.github.list_user_repos(github_username)
        except UpstreamUnavailableError as exc:
            logger.warning("github_repos_unavailable github=%s error=%s", github_username, exc.detail)
            repos = []
        poaps = self.poap.fetch_events(wallet_address)

        score = self.scorer.score(profile, repos, poaps)
        logger.info(
            "reputation_scored github=%s wallet=%s total=%s github_score=%s poap_score=%s repos=%s poaps=%s",
            github_username,
            wallet_address,
            score.total,
            score.github,
            score.poap,
            len(repos),
            len(poaps),
        )
        return ReputationResponse(
            github_username=github_username,
            wallet_address=wallet_address,
            score=score,
            grade=reputation_grade(score.total),
        )

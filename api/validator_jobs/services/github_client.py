"""GitHub API client.

REST wrapper with:
- optional token auth (GITHUB_TOKEN / GH_TOKEN)
- fail-fast rate-limit detection (no sleeping, no retries)
- no response caching; every call goes to the API
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional
from urllib.parse import quote

import httpx

from validator_jobs.models.reputation import GitHubProfile, GitHubRepository
from validator_jobs.services.errors import (
    UpstreamNotFoundError,
    UpstreamRateLimitedError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)


class GitHubClient:
    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = "https://api.github.com",
        user_agent: str = "validator-jobs/1.0",
        timeout: float = 10.0,
    ) -> None:
        env_token = os.getenv("GITHUB_TOKEN")
        if not env_token:
            env_token = os.getenv("GH_TOKEN")
        if env_token:
            env_token = env_token.strip() or None
        self._token = token or env_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": user_agent,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            self._headers["Authorization"] = f"Bearer {self._token}"

    @staticmethod
    def _is_rate_limited(r: httpx.Response) -> bool:
        if r.status_code == 429:
            return True
        return r.status_code == 403 and (
            r.headers.get("X-RateLimit-Remaining") == "0" or "rate limit" in r.text.lower()
        )

    def _request(self, method: str, url: str) -> httpx.Response:
        try:
            with httpx.Client(timeout=self._timeout, headers=self._headers) as client:
                return client.request(method, url)
        except httpx.TimeoutException as exc:
            raise UpstreamUnavailableError("GitHub API timed out") from exc
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            raise UpstreamUnavailableError(f"GitHub API unreachable: {exc.__class__.__name__}") from exc

    def get_json(self, path: str) -> Any:
        """GET JSON for a path or full URL."""
        url = path if path.startswith("http") else f"{self._base_url}{path}"
        r = self._request("GET", url)

        if r.status_code == 404:
            raise UpstreamNotFoundError()
        if self._is_rate_limited(r):
            logger.warning("github_rate_limited url=%s reset=%s", url, r.headers.get("X-RateLimit-Reset"))
            raise UpstreamRateLimitedError()
        if r.status_code >= 400:
            raise UpstreamUnavailableError(f"GitHub API error {r.status_code}")

        try:
            return r.json()
        except ValueError as exc:
            raise UpstreamUnavailableError("GitHub API returned invalid JSON") from exc

    def get_user(self, login: str) -> GitHubProfile:
        data = self.get_json(f"/users/{quote(login, safe='')}")
        if not isinstance(data, dict):
            raise UpstreamUnavailableError("GitHub API returned an unexpected user payload")
        return GitHubProfile.model_validate(data)

    def list_user_repos(self, login: str, per_page: int = 100) -> list[GitHubRepository]:
        """Most recently updated repositories (first page only)."""
        data = self.get_json(f"/users/{quote(login, safe='')}/repos?per_page={per_page}&sort=updated")
        if not isinstance(data, list):
            return []
        return [GitHubRepository.model_validate(row) for row in data if isinstance(row, dict)]

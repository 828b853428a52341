"""Tests for the GitHub API client.

Validates headers, uncached requests, error mapping and payload normalization.
Uses mocked HTTP responses (respx) to avoid real GitHub API calls.
"""

import httpx
import pytest
import respx
from httpx import Response

from validator_jobs.services.errors import (
    UpstreamNotFoundError,
    UpstreamRateLimitedError,
    UpstreamUnavailableError,
)
from validator_jobs.services.github_client import GitHubClient

USER_PAYLOAD = {
    "login": "octo",
    "public_repos": 12,
    "followers": 40,
    "following": 3,
    "created_at": "2015-04-02T10:00:00Z",
    "bio": None,
}


@respx.mock
def test_github_client_get_user_with_headers():
    """Client should send GitHub headers and parse the profile."""
    route = respx.get("https://api.github.com/users/octo").mock(return_value=Response(200, json=USER_PAYLOAD))

    client = GitHubClient()
    profile = client.get_user("octo")

    assert profile.login == "octo"
    assert profile.public_repos == 12
    assert profile.followers == 40
    assert profile.created_at.year == 2015
    request = route.calls[0].request
    assert request.headers["accept"] == "application/vnd.github+json"
    assert request.headers["user-agent"] == "validator-jobs/1.0"
    assert "authorization" not in request.headers


@respx.mock
def test_github_client_with_token_auth():
    """Client should include Bearer token when configured."""
    route = respx.get("https://api.github.com/users/octo").mock(return_value=Response(200, json=USER_PAYLOAD))

    client = GitHubClient(token="test-token-123")
    client.get_user("octo")

    assert route.calls[0].request.headers["authorization"] == "Bearer test-token-123"


@respx.mock
def test_github_client_token_from_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("GH_TOKEN", " env-token ")
    route = respx.get("https://api.github.com/users/octo").mock(return_value=Response(200, json=USER_PAYLOAD))

    GitHubClient().get_user("octo")

    assert route.calls[0].request.headers["authorization"] == "Bearer env-token"


@respx.mock
def test_github_client_does_not_cache_between_calls():
    """Every lookup reaches GitHub; nothing is kept between calls."""
    route = respx.get(url__regex=r"https://api\.github\.com/users/user\d+").mock(
        return_value=Response(200, json=USER_PAYLOAD, headers={"ETag": '"abc123"'})
    )

    client = GitHubClient()
    for i in range(50):
        client.get_user(f"user{i}")
    client.get_user("user0")

    assert len(route.calls) == 51
    assert all("if-none-match" not in call.request.headers for call in route.calls)
    assert set(vars(client)) == {"_token", "_base_url", "_timeout", "_headers"}


@respx.mock
def test_github_client_fresh_data_on_repeat_lookup():
    route = respx.get("https://api.github.com/users/octo")
    route.mock(
        side_effect=[
            Response(200, json=USER_PAYLOAD),
            Response(200, json={**USER_PAYLOAD, "followers": 99}),
        ]
    )

    client = GitHubClient()

    assert client.get_user("octo").followers == 40
    assert client.get_user("octo").followers == 99


@respx.mock
def test_github_client_not_found():
    respx.get("https://api.github.com/users/ghost").mock(return_value=Response(404, json={"message": "Not Found"}))

    with pytest.raises(UpstreamNotFoundError) as exc_info:
        GitHubClient().get_user("ghost")

    assert exc_info.value.status_code == 404


@respx.mock
def test_github_client_rate_limit_403_fails_fast():
    """Exhausted rate limit surfaces immediately, without sleeping or retrying."""
    route = respx.get("https://api.github.com/users/octo").mock(
        return_value=Response(
            403,
            json={"message": "API rate limit exceeded"},
            headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"},
        )
    )

    with pytest.raises(UpstreamRateLimitedError):
        GitHubClient().get_user("octo")

    assert len(route.calls) == 1


@respx.mock
def test_github_client_rate_limit_429():
    respx.get("https://api.github.com/users/octo").mock(return_value=Response(429))

    with pytest.raises(UpstreamRateLimitedError):
        GitHubClient().get_user("octo")


@respx.mock
def test_github_client_forbidden_without_rate_limit_is_unavailable():
    respx.get("https://api.github.com/users/octo").mock(
        return_value=Response(403, json={"message": "Forbidden"}, headers={"X-RateLimit-Remaining": "42"})
    )

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        GitHubClient().get_user("octo")

    assert "403" in exc_info.value.detail


@respx.mock
def test_github_client_server_error_is_unavailable():
    respx.get("https://api.github.com/users/octo").mock(return_value=Response(502))

    with pytest.raises(UpstreamUnavailableError):
        GitHubClient().get_user("octo")


@respx.mock
def test_github_client_timeout_is_unavailable():
    respx.get("https://api.github.com/users/octo").mock(side_effect=httpx.ReadTimeout("slow"))

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        GitHubClient(timeout=0.5).get_user("octo")

    assert exc_info.value.detail == "GitHub API timed out"


@respx.mock
def test_github_client_list_user_repos():
    route = respx.get("https://api.github.com/users/octo/repos").mock(
        return_value=Response(
            200,
            json=[
                {"name": "obol-tools", "description": "DVT", "stargazers_count": 4, "topics": ["ethereum"]},
                {"name": "legacy", "description": None, "stargazers_count": 0},
                {"name": "nulls", "description": None, "stargazers_count": 1, "topics": None},
            ],
        )
    )

    repos = GitHubClient().list_user_repos("octo")

    assert [r.name for r in repos] == ["obol-tools", "legacy", "nulls"]
    assert repos[0].topics == ["ethereum"]
    assert repos[1].topics == []
    assert repos[2].topics == []
    params = route.calls[0].request.url.params
    assert params["per_page"] == "100"
    assert params["sort"] == "updated"


@respx.mock
def test_github_client_list_user_repos_non_list_response():
    """Non-list payloads should yield an empty list, not crash."""
    respx.get("https://api.github.com/users/octo/repos").mock(return_value=Response(200, json={"message": "odd"}))

    assert GitHubClient().list_user_repos("octo") == []


@respx.mock
def test_github_client_custom_base_url():
    """Client should support custom base URL (e.g., GitHub Enterprise)."""
    respx.get("https://github.enterprise.com/api/v3/users/octo").mock(return_value=Response(200, json=USER_PAYLOAD))

    client = GitHubClient(base_url="https://github.enterprise.com/api/v3/")

    assert client.get_user("octo").login == "octo"


@respx.mock
def test_github_client_get_json_with_full_url():
    """Client should handle full URLs in addition to paths."""
    respx.get("https://api.github.com/users/octo").mock(return_value=Response(200, json=USER_PAYLOAD))

    data = GitHubClient().get_json("https://api.github.com/users/octo")

    assert data["login"] == "octo"


@respx.mock
def test_github_client_invalid_json_is_unavailable():
    respx.get("https://api.github.com/users/octo").mock(return_value=Response(200, content=b"<html>"))

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        GitHubClient().get_user("octo")

    assert exc_info.value.detail == "GitHub API returned invalid JSON"


def test_github_client_bad_base_url_is_unavailable():
    with pytest.raises(UpstreamUnavailableError):
        GitHubClient(base_url="https://api.github.com:notaport").get_user("octo")

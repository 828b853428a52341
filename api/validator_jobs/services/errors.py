"""Error taxonomy shared by services and routers.

Routers let these propagate; ``main`` renders them as ``{"detail": str}``
with the status code carried on the class.
"""

from __future__ import annotations


class ValidatorJobsError(Exception):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidInputError(ValidatorJobsError):
    status_code = 400
    default_detail = "Invalid input"


class UpstreamNotFoundError(ValidatorJobsError):
    status_code = 404
    default_detail = "GitHub user not found"


class UpstreamRateLimitedError(ValidatorJobsError):
    status_code = 429
    default_detail = "GitHub API rate limit exceeded, try again later"


class UpstreamUnavailableError(ValidatorJobsError):
    status_code = 503
    default_detail = "Upstream service unavailable"


class TeamRegistrationError(ValidatorJobsError):
    status_code = 502
    default_detail = "Team registration transaction failed"

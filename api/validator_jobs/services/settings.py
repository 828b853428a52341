"""Environment-driven configuration for upstream collaborators and the API."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = _env_str(name)
    if not raw:
        return default
    try:
        return max(minimum, float(raw))
    except ValueError:
        return default


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "1" if default else "").strip().lower()
    return raw in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    github_api_base: str = "https://api.github.com"
    github_token: str | None = None
    poap_api_base: str = "https://api.poap.tech"
    poap_api_key: str | None = None
    upstream_timeout_seconds: float = 10.0
    user_agent: str = "validator-jobs/1.0"
    allowed_origins: tuple[str, ...] = ("http://localhost:3000",)
    slow_request_ms: float = 1500.0
    log_all_requests: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        token = _env_str("GITHUB_TOKEN") or _env_str("GH_TOKEN")
        origins_raw = _env_str("ALLOWED_ORIGINS", "http://localhost:3000")
        origins = tuple(origin.strip() for origin in origins_raw.split(",") if origin.strip())
        return cls(
            github_api_base=_env_str("GITHUB_API_BASE", "https://api.github.com").rstrip("/"),
            github_token=token or None,
            poap_api_base=_env_str("POAP_API_BASE", "https://api.poap.tech").rstrip("/"),
            poap_api_key=_env_str("POAP_API_KEY") or None,
            upstream_timeout_seconds=_env_float("UPSTREAM_TIMEOUT_SECONDS", 10.0, minimum=0.5),
            user_agent=_env_str("USER_AGENT", "validator-jobs/1.0"),
            allowed_origins=origins,
            slow_request_ms=_env_float("API_SLOW_REQUEST_MS", 1500.0, minimum=25.0),
            log_all_requests=env_flag("API_LOG_ALL_REQUESTS", False),
        )

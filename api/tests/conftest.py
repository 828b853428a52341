"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

FIXED_NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture(autouse=True)
def _isolate_upstream_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep real credentials and backend overrides out of tests.
    for key in (
        "GITHUB_TOKEN",
        "GH_TOKEN",
        "POAP_API_KEY",
        "TEAM_REGISTRY_BACKEND",
        "TEAM_REGISTRY_RPC_URL",
        "TEAM_REGISTRY_CHAIN_ID",
        "TEAM_REGISTRY_PRIVATE_KEY",
        "TEAM_REGISTRY_CONTRACT_ADDRESS",
    ):
        monkeypatch.delenv(key, raising=False)

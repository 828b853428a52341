"""POAP API client.

POAP data is best-effort: any upstream failure is logged and treated as an
empty event list so reputation scoring can proceed on GitHub data alone.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional
from urllib.parse import quote

import httpx

from validator_jobs.models.reputation import PoapEvent

logger = logging.getLogger(__name__)


class PoapClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = "https://api.poap.tech",
        user_agent: str = "validator-jobs/1.0",
        timeout: float = 10.0,
    ) -> None:
        env_key = (os.getenv("POAP_API_KEY") or "").strip() or None
        self._api_key = api_key or env_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {
            "Accept": "application/json",
            "User-Agent": user_agent,
        }
        if self._api_key:
            self._headers["X-API-Key"] = self._api_key

    def scan(self, address: str) -> Any:
        """Raw ``/actions/scan/{address}`` payload. Raises httpx errors."""
        url = f"{self._base_url}/actions/scan/{quote(address, safe='')}"
        with httpx.Client(timeout=self._timeout, headers=self._headers) as client:
            r = client.get(url)
        r.raise_for_status()
        return r.json()

    def fetch_events(self, address: str) -> list[PoapEvent]:
        try:
            payload = self.scan(address)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError, ValueError) as exc:
            logger.warning("poap_lookup_failed address=%s error=%s", address, exc.__class__.__name__)
            return []

        if not isinstance(payload, list):
            logger.warning("poap_lookup_unexpected_payload address=%s type=%s", address, type(payload).__name__)
            return []

        events: list[PoapEvent] = []
        for item in payload:
            event = PoapEvent.from_scan_item(item)
            if event is not None:
                events.append(event)
        return events

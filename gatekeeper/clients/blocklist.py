"""HTTP client for fetching a remotely hosted region block list."""
from __future__ import annotations

import logging
from typing import Any

import requests
from requests import Response

LOGGER = logging.getLogger(__name__)


class BlocklistError(RuntimeError):
    """Raised when the block list endpoint cannot be read."""


class BlocklistClient:
    """Small HTTP client that downloads the region block list as JSON."""

    def __init__(self, timeout_seconds: float = 10, session: requests.Session | None = None) -> None:
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    def fetch(self, url: str) -> Any:
        """Return the decoded JSON document served at ``url``."""

        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.RequestException as exc:
            raise BlocklistError(f"Unable to reach block list at {url}: {exc}") from exc
        self._raise_for_status(response)
        try:
            return response.json()
        except ValueError as exc:
            raise BlocklistError(f"Block list at {url} is not valid JSON.") from exc

    def _raise_for_status(self, response: Response) -> None:
        if response.ok:
            return
        status = response.status_code
        detail = response.text
        if status == 404:
            message = "Block list not found."
        elif status in (401, 403):
            message = "Access to the block list was refused."
        else:
            message = f"Block list request failed ({status})."
        LOGGER.error("block list request failed", extra={"status": status})
        raise BlocklistError(f"{message} Response: {detail[:200]}")

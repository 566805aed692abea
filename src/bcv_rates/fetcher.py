"""HTTP fetcher for the source page."""

from __future__ import annotations

import logging
from typing import Dict, Optional

import requests
from requests import Response

from bcv_rates.errors import FetchError

logger = logging.getLogger(__name__)


class Fetcher:
    """Lightweight HTTP client; a single attempt unless ``max_retries`` says otherwise."""

    DEFAULT_HEADERS: Dict[str, str] = {
        "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "es-VE,es;q=0.9,en;q=0.5",
    }

    def __init__(
        self,
        timeout: float = 10.0,
        max_retries: int = 1,
        headers: dict | None = None,
        verify_ssl: bool = True,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.headers = {**self.DEFAULT_HEADERS, **(headers or {})}
        self.verify_ssl = verify_ssl

    def _should_retry(self, response: Response | None, exc: Exception | None) -> bool:
        if exc is not None:
            return True
        if response is None:
            return False
        return 500 <= response.status_code < 600

    def get(self, url: str) -> str:
        """Fetch a URL and return the body text."""
        last_status: Optional[int] = None
        last_error: Exception | None = None
        for attempt in range(self.max_retries):
            response: Response | None = None
            error: Exception | None = None
            try:
                logger.info("Fetching %s (attempt %d/%d)", url, attempt + 1, self.max_retries)
                response = requests.get(
                    url, headers=self.headers, timeout=self.timeout, verify=self.verify_ssl
                )
                last_status = response.status_code
                if 200 <= response.status_code < 300:
                    return response.text
                logger.warning("Unexpected status %s from %s", response.status_code, url)
                if not self._should_retry(response, None):
                    break
            except requests.exceptions.RequestException as exc:
                logger.warning("Request to %s failed: %s", url, exc)
                error = exc
                last_error = exc
            if attempt == self.max_retries - 1 or not self._should_retry(response, error):
                break

        message = f"Failed to fetch URL ({last_error})" if last_error else "Failed to fetch URL"
        raise FetchError(url, last_status, message, cause=last_error)

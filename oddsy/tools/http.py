"""
Upstream HTTP client with bounded retries and exponential backoff.

Every tool executor talks to its provider through an UpstreamClient.
A failed attempt is a transport error, a timeout, a non-2xx status, a
non-JSON body, or a non-empty ``errors`` field inside a 200 payload.
Attempt ``i`` (0-based) is followed by a ``2**i * base_delay`` pause; the
last attempt's error is raised as UpstreamError.
"""

import json
import logging
import time
from typing import Any, Optional

import requests

from ..errors import UpstreamError

logger = logging.getLogger(__name__)

MASK = "***API_KEY***"


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Pause after the given 0-based failed attempt."""
    return (2 ** attempt) * base_delay


class UpstreamClient:
    """JSON-over-HTTP client bound to one provider and one credential."""

    def __init__(
        self,
        name: str,
        base_url: str,
        secret: str = "",
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, str]] = None,
        timeout: float = 15.0,
        max_retries: int = 3,
        base_delay: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            name: Provider label used in logs and error messages
            base_url: Prefix for every request path
            secret: Credential value; masked wherever it could leak
            headers: Headers sent with every request (auth goes here)
            params: Query parameters sent with every request (or here)
            timeout: Per-attempt timeout in seconds
            max_retries: Maximum attempts per call
            base_delay: Backoff base in seconds
            session: Optional requests session (one is created if None)
        """
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
        self._secret = secret
        self._headers = {"Accept": "application/json", **(headers or {})}
        self._params = dict(params or {})
        self._session = session or requests.Session()

    def _mask(self, text: str) -> str:
        if self._secret:
            return text.replace(self._secret, MASK)
        return text

    def _loggable_params(self, params: dict) -> dict:
        return {k: (MASK if v == self._secret else v) for k, v in params.items()}

    def get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET ``path`` and return the decoded JSON body."""
        return self.request_json("GET", path, params=params)

    def post_json(self, path: str, body: dict[str, Any]) -> Any:
        """POST a JSON body to ``path`` and return the decoded JSON body."""
        return self.request_json("POST", path, json_body=body)

    def request_json(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """
        Perform a request with retries.

        Raises:
            UpstreamError: After ``max_retries`` failed attempts
        """
        url = f"{self.base_url}{path}"
        query = {**self._params, **{k: v for k, v in (params or {}).items() if v is not None}}

        logger.debug(
            "[%s] %s %s params=%s",
            self.name,
            method,
            url,
            self._loggable_params(query),
        )

        last_error: Optional[UpstreamError] = None
        for attempt in range(self.max_retries):
            try:
                data = self._attempt(method, url, query, json_body)
            except UpstreamError as e:
                last_error = e
                logger.warning(
                    "[%s] Attempt %d/%d failed: %s",
                    self.name,
                    attempt + 1,
                    self.max_retries,
                    e,
                )
                if attempt < self.max_retries - 1:
                    time.sleep(backoff_delay(attempt, self.base_delay))
                continue

            item_count = len(data) if isinstance(data, list) else 1
            logger.debug("[%s] Success: %d item(s)", self.name, item_count)
            return data

        logger.error("[%s] Request failed after %d attempts", self.name, self.max_retries)
        raise last_error

    def _attempt(
        self,
        method: str,
        url: str,
        query: dict,
        json_body: Optional[dict],
    ) -> Any:
        """One HTTP round trip, raising UpstreamError on any failure."""
        try:
            response = self._session.request(
                method,
                url,
                params=query or None,
                json=json_body,
                headers=self._headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise UpstreamError(f"{self.name} request timed out after {self.timeout:g}s")
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"{self.name} request failed: {self._mask(str(e))}")

        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                f"{self.name} API request failed: {response.status_code} {response.reason}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise UpstreamError(f"{self.name} returned a non-JSON response")

        if isinstance(data, dict) and data.get("errors"):
            raise UpstreamError(
                f"{self.name} API error: {self._mask(json.dumps(data['errors'], default=str))}"
            )
        return data

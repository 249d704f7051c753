"""
GitHub REST API Client

Provides paginated, rate-limit-aware access to the GitHub REST API for the
area fetchers. Uses AsyncSecureHTTPClient for connection pooling, SSL
enforcement and timeouts.

Failure policy:
    - 404: feature not enabled for this repository -> empty result, warning
    - 403 with x-ratelimit-remaining: 0 -> RateLimitExceededError (fatal for the run)
    - 403 otherwise: missing permissions -> empty result, warning
    - any other non-2xx or network error -> empty result, warning, no retry

Usage:
    from dashbuild.collectors.github_rest_client import GitHubRESTClient

    async with GitHubRESTClient(token, tracker=tracker) as client:
        pulls = await client.fetch_paginated("/repos/o/r/pulls?state=all", max_pages=5)
        repo = await client.fetch_json("/repos/o/r")

API Documentation:
    https://docs.github.com/en/rest/using-the-rest-api/using-pagination-in-the-rest-api
"""

from collections.abc import Callable
from typing import Any

import httpx

from dashbuild.async_http_client import AsyncSecureHTTPClient
from dashbuild.core.collector_metrics import CollectorMetricsTracker
from dashbuild.core.logging_config import get_logger
from dashbuild.domain.constants import api_config
from dashbuild.utils.datetime_utils import epoch_to_iso
from dashbuild.utils.error_handling import log_and_continue

logger = get_logger(__name__)


class RateLimitExceededError(Exception):
    """Raised when the API quota is exhausted; aborts the whole collection run."""

    def __init__(self, reset_at: str | None, path: str = ""):
        self.reset_at = reset_at
        self.path = path
        super().__init__(f"GitHub API rate limit exceeded. Resets at {reset_at or 'an unknown time'}")


class GitHubRESTClient:
    """
    GitHub REST API client with cursor pagination.

    Every request is counted on the tracker passed in, so one tracker can be
    shared by all areas of a run.
    """

    def __init__(
        self,
        token: str,
        tracker: CollectorMetricsTracker | None = None,
        api_base_url: str = api_config.BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = api_config.DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Initialize GitHub REST client.

        Args:
            token: Bearer token
            tracker: Run tracker that counts requests (a private one is created if omitted)
            api_base_url: API root (GitHub Enterprise installs differ)
            transport: Optional httpx transport override
            timeout: Per-request timeout in seconds

        Raises:
            ValueError: If token is empty
        """
        if not token:
            raise ValueError("token is required")

        self.api_base_url = api_base_url.rstrip("/")
        self.tracker = tracker or CollectorMetricsTracker("github")
        self.headers = self._build_headers(token)
        self._http = AsyncSecureHTTPClient(
            headers=self.headers, timeout=timeout, transport=transport, request_hooks=[self._count_request]
        )

    @staticmethod
    def _build_headers(token: str) -> dict[str, str]:
        """
        Build bearer authentication and versioned accept headers.

        Example:
            {"Authorization": "Bearer ghp_...", "Accept": "application/vnd.github+json", ...}
        """
        return {
            "Authorization": f"Bearer {token}",
            "Accept": api_config.ACCEPT,
            "X-GitHub-Api-Version": api_config.API_VERSION,
            "User-Agent": api_config.USER_AGENT,
        }

    async def _count_request(self, request: httpx.Request) -> None:
        self.tracker.record_api_call()

    async def __aenter__(self) -> "GitHubRESTClient":
        await self._http.__aenter__()
        return self

    async def __aexit__(self, *args) -> None:
        await self._http.__aexit__(*args)

    @property
    def request_count(self) -> int:
        return self.tracker.api_call_count

    def _build_url(self, path: str) -> str:
        """Absolute URLs (e.g. Link header targets) pass through unchanged."""
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.api_base_url}{path}"

    def _first_page_url(self, path: str) -> str:
        url = self._build_url(path)
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}per_page={api_config.PAGE_SIZE}"

    def _handle_error_response(self, response: httpx.Response, path: str) -> None:
        """
        Classify a non-success response.

        Raises:
            RateLimitExceededError: On a 403 with an exhausted quota
        """
        status_code = response.status_code

        if status_code == 404:
            logger.warning(f"404 for {path} - feature may not be enabled", extra={"path": path})
        elif status_code == 403:
            if response.headers.get("x-ratelimit-remaining") == "0":
                self.tracker.record_rate_limit_hit()
                raise RateLimitExceededError(epoch_to_iso(response.headers.get("x-ratelimit-reset")), path)
            logger.warning(f"403 for {path} - may lack permissions", extra={"path": path})
        else:
            logger.warning(f"{status_code} for {path}", extra={"path": path, "status_code": status_code})

        self.tracker.record_failed_request()

    async def _request(self, url: str, path: str, headers: dict[str, str] | None = None) -> httpx.Response | None:
        """
        Issue one GET; return the response on success, None when it degraded to "no data".

        Raises:
            RateLimitExceededError: When the quota is exhausted
        """
        try:
            response = await self._http.get(url, headers=headers)
        except httpx.RequestError as e:
            self.tracker.record_failed_request()
            log_and_continue(logger, e, context={"path": path}, error_type="GitHub API request")
            return None

        if not response.is_success:
            self._handle_error_response(response, path)
            return None

        return response

    @staticmethod
    def _decode(response: httpx.Response, path: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            log_and_continue(logger, e, context={"path": path}, error_type="GitHub API response decoding")
            return None

    async def fetch_json(self, path: str, headers: dict[str, str] | None = None) -> Any | None:
        """
        Fetch a single (non-paginated) resource.

        Args:
            path: API path (e.g. "/repos/o/r") or absolute URL
            headers: Extra headers for this request

        Returns:
            Decoded JSON body, or None when the request degraded to "no data"

        Raises:
            RateLimitExceededError: When the quota is exhausted
        """
        response = await self._request(self._build_url(path), path, headers)
        if response is None:
            return None
        return self._decode(response, path)

    async def fetch_paginated(
        self,
        path: str,
        max_pages: int = api_config.DEFAULT_MAX_PAGES,
        predicate: Callable[[dict[str, Any]], bool] | None = None,
        headers: dict[str, str] | None = None,
        items_key: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch every page of a list endpoint, following Link rel="next".

        With a predicate, items are tested in order and the first item that
        fails it ends the traversal; items already accepted are returned.
        With items sorted most-recent-first this stops at the edge of a time
        window.

        Args:
            path: API path, with or without a query string
            max_pages: Hard cap on pages requested
            predicate: Per-item filter and early-termination signal
            headers: Extra headers for every page request
            items_key: Key holding the list for endpoints that wrap it in an
                object (e.g. "workflow_runs")

        Returns:
            Items in API order (empty on 404/403/other failures)

        Raises:
            RateLimitExceededError: When the quota is exhausted
        """
        results: list[dict[str, Any]] = []
        url: str | None = self._first_page_url(path)
        page = 0

        while url and page < max_pages:
            page += 1
            response = await self._request(url, path, headers)
            if response is None:
                break

            data = self._decode(response, path)
            if items_key is not None and isinstance(data, dict):
                data = data.get(items_key)
            if not isinstance(data, list) or not data:
                break

            if predicate is None:
                results.extend(data)
            else:
                for item in data:
                    if not predicate(item):
                        logger.debug(f"Predicate stopped pagination of {path} on page {page}")
                        return results
                    results.append(item)

            url = response.links.get("next", {}).get("url")

        return results

"""
Pytest configuration and shared fixtures

Provides a fake GitHub API (httpx.MockTransport routing), client and
fetch-context fixtures shared by the collector and orchestrator tests.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import httpx
import pytest
import pytest_asyncio

from dashbuild.collectors.base import FetchContext
from dashbuild.collectors.github_rest_client import GitHubRESTClient
from dashbuild.core.collector_metrics import CollectorMetricsTracker

API_ROOT = "https://api.github.com"


class FakeGitHub:
    """
    Minimal GitHub API double.

    Routes are keyed by request path (query string excluded). A route value
    is either a JSON body, an httpx.Response, or a callable taking the
    request and returning one of those. Unrouted paths answer 404.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, body: Any) -> None:
        self.routes[path] = body

    def paths_requested(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(route):
            route = route(request)
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def paged(pages: list[list[dict[str, Any]]], path: str) -> Callable[[httpx.Request], httpx.Response]:
    """Serve `pages` for one path, page selected by ?page=N, with Link rel="next" headers."""

    def handle(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        headers = {}
        if page < len(pages):
            headers["link"] = f'<{API_ROOT}{path}?per_page=100&page={page + 1}>; rel="next"'
        return httpx.Response(200, json=pages[page - 1], headers=headers)

    return handle


# ===== Time Fixtures =====


@pytest.fixture
def fixed_now():
    """Provide a consistent reference time for window and age calculations"""
    return datetime(2024, 6, 2, 12, 0, 0, tzinfo=UTC)


# ===== API Fixtures =====


@pytest.fixture
def fake_github():
    """Provide an empty fake GitHub API"""
    return FakeGitHub()


@pytest.fixture
def tracker():
    """Provide a fresh run tracker"""
    return CollectorMetricsTracker("test")


@pytest_asyncio.fixture
async def github_client(fake_github, tracker):
    """Provide an open GitHubRESTClient wired to the fake API"""
    async with GitHubRESTClient("test-token", tracker=tracker, transport=fake_github.transport) as client:
        yield client


@pytest.fixture
def fetch_context(github_client, fixed_now):
    """Provide a FetchContext for owner/repo at the fixed reference time"""
    return FetchContext(client=github_client, owner="octo", repo="widgets", now=fixed_now)


@pytest.fixture
def paged_route():
    """Provide the Link-paginated route builder"""
    return paged

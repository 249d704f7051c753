#!/usr/bin/env python3
"""
Base Area Fetcher

Provides the shared interface for every metrics area:
- FetchContext: client, repository, lookback window and per-area tunables
- AreaFetcher: uniform `name` + `run(context) -> AreaResult` contract
- gather_or_cancel(): concurrent requests that never outlive a failure

Area fetchers are independent of one another: none reads another's output,
so the orchestrator can run them concurrently and isolate their failures.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Coroutine
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

from dashbuild.collectors.github_rest_client import GitHubRESTClient
from dashbuild.core.logging_config import get_logger
from dashbuild.domain.metrics import AreaResult

T = TypeVar("T")


@dataclass
class FetchContext:
    """
    Everything an area fetcher needs for one run.

    Attributes:
        client: Shared GitHub REST client
        owner: Repository owner
        repo: Repository name
        lookback_days: Window for "recent" activity
        max_review_prs: Cap on per-PR review fetches
        max_branch_checks: Cap on per-branch last-commit fetches
        now: Reference time for ages and windows (UTC)
    """

    client: GitHubRESTClient
    owner: str
    repo: str
    lookback_days: int = 90
    max_review_prs: int = 30
    max_branch_checks: int = 20
    now: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def repo_path(self) -> str:
        """API path prefix for this repository."""
        return f"/repos/{self.owner}/{self.repo}"

    @property
    def lookback_cutoff(self) -> datetime:
        return self.now - timedelta(days=self.lookback_days)

    def days_ago(self, days: int) -> datetime:
        return self.now - timedelta(days=days)


class AreaFetcher(ABC):
    """Base class for all metrics areas

    Subclasses set `name` (the area key used in configuration) and implement
    run(). Exceptions raised from run() are isolated by the orchestrator;
    RateLimitExceededError is the only one that ends the run.
    """

    name: str = ""

    def __init__(self) -> None:
        self.logger = get_logger(type(self).__module__)

    @abstractmethod
    async def run(self, context: FetchContext) -> AreaResult:
        """Collect metrics and details for this area

        Args:
            context: Shared client and run settings

        Returns:
            AreaResult with flat metrics and detail payloads
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


async def gather_or_cancel(*coros: Coroutine[Any, Any, T]) -> list[T]:
    """
    Run coroutines concurrently and return their results in argument order.

    The first exception cancels every sibling still running and waits for
    them to finish before it is re-raised.
    """
    tasks = [asyncio.create_task(coro) for coro in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

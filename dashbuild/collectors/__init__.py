"""
Data Collectors - Fetch metrics from the GitHub REST API

This package contains:
    - github_rest_client: paginated, rate-limit-aware REST client
    - base: AreaFetcher interface and FetchContext
    - areas: one fetcher per metrics area
    - profiles: github-statistics and dependabot collection profiles
"""

from dashbuild.collectors.base import AreaFetcher, FetchContext
from dashbuild.collectors.github_rest_client import GitHubRESTClient, RateLimitExceededError

__all__ = ["AreaFetcher", "FetchContext", "GitHubRESTClient", "RateLimitExceededError"]

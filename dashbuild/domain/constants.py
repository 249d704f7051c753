#!/usr/bin/env python3
"""
Application Constants

Centralized configuration constants for the GitHub API and area fetchers.
Provides immutable values shared by the client and the area modules.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class APIConfig:
    """
    GitHub REST API constants.

    Attributes:
        BASE_URL: Default API root
        API_VERSION: Value sent in X-GitHub-Api-Version
        ACCEPT: Versioned media type
        STAR_ACCEPT: Media type that adds starred_at to stargazers
        PAGE_SIZE: Items requested per page
        DEFAULT_MAX_PAGES: Page cap when a caller sets none
        DEFAULT_TIMEOUT_SECONDS: Timeout on every HTTP call
    """

    BASE_URL: str = "https://api.github.com"
    API_VERSION: str = "2022-11-28"
    ACCEPT: str = "application/vnd.github+json"
    STAR_ACCEPT: str = "application/vnd.github.star+json"
    USER_AGENT: str = "dashbuild-metrics-collector"
    PAGE_SIZE: int = 100
    DEFAULT_MAX_PAGES: int = 10
    DEFAULT_TIMEOUT_SECONDS: int = 30


@dataclass(frozen=True)
class AreaConfig:
    """
    Area fetcher constants.

    Attributes:
        LIST_MAX_PAGES: Page cap for time-windowed PR/issue/run lists
        ALERT_MAX_PAGES: Page cap for open security alert lists
        SHORT_MAX_PAGES: Page cap for stargazers and resolved alerts
        RELEASE_MAX_PAGES: Page cap for releases
        BRANCH_MAX_PAGES: Page cap for the branch list
        STALE_BRANCH_DAYS: Branch is stale when its last commit is older than this
        ACTIVE_CONTRIBUTOR_DAYS: Window for "active" contributors
        RECENT_FIX_DAYS: Window for recently fixed/merged security items
        OPEN_PR_DETAIL_LIMIT: Open PRs listed in details
        RELEASE_DETAIL_LIMIT: Releases listed in details
        CONTRIBUTOR_DETAIL_LIMIT: Contributors listed in details
        DEPENDABOT_PR_DETAIL_LIMIT: Dependabot PRs listed in details
        COMMIT_ACTIVITY_WEEKS: Non-empty weeks kept in commit activity
    """

    LIST_MAX_PAGES: int = 5
    ALERT_MAX_PAGES: int = 3
    SHORT_MAX_PAGES: int = 2
    RELEASE_MAX_PAGES: int = 3
    BRANCH_MAX_PAGES: int = 3
    STALE_BRANCH_DAYS: int = 90
    ACTIVE_CONTRIBUTOR_DAYS: int = 30
    RECENT_FIX_DAYS: int = 30
    OPEN_PR_DETAIL_LIMIT: int = 20
    RELEASE_DETAIL_LIMIT: int = 10
    CONTRIBUTOR_DETAIL_LIMIT: int = 10
    DEPENDABOT_PR_DETAIL_LIMIT: int = 10
    COMMIT_ACTIVITY_WEEKS: int = 12


api_config = APIConfig()
area_config = AreaConfig()

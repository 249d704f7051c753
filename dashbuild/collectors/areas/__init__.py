"""
Area Fetchers Package

One AreaFetcher per metrics area, grouped into the two collection profiles.

Usage:
    from dashbuild.collectors.areas import GITHUB_STATISTICS_FETCHERS, build_registry

    registry = build_registry(GITHUB_STATISTICS_FETCHERS)
    registry["prs"]  # PullRequestsFetcher()
"""

from dashbuild.collectors.areas.activity import CommitsFetcher, ContributorsFetcher
from dashbuild.collectors.areas.branches import BranchesFetcher
from dashbuild.collectors.areas.issues import IssuesFetcher
from dashbuild.collectors.areas.pull_requests import PullRequestsFetcher
from dashbuild.collectors.areas.releases import ReleasesFetcher
from dashbuild.collectors.areas.repository import (
    CommunityFetcher,
    ForksFetcher,
    LanguagesFetcher,
    StarsFetcher,
    TrafficFetcher,
)
from dashbuild.collectors.areas.security_alerts import (
    CodeScanningFetcher,
    DependabotAlertsFetcher,
    SecretScanningFetcher,
)
from dashbuild.collectors.areas.workflows import WorkflowsFetcher
from dashbuild.collectors.base import AreaFetcher

GITHUB_STATISTICS_FETCHERS: list[type[AreaFetcher]] = [
    PullRequestsFetcher,
    IssuesFetcher,
    WorkflowsFetcher,
    ReleasesFetcher,
    CommitsFetcher,
    ContributorsFetcher,
    BranchesFetcher,
    LanguagesFetcher,
    CommunityFetcher,
    TrafficFetcher,
    StarsFetcher,
    ForksFetcher,
]

SECURITY_FETCHERS: list[type[AreaFetcher]] = [
    DependabotAlertsFetcher,
    CodeScanningFetcher,
    SecretScanningFetcher,
]


def build_registry(fetcher_classes: list[type[AreaFetcher]]) -> dict[str, AreaFetcher]:
    """Map area name -> fetcher instance."""
    registry: dict[str, AreaFetcher] = {}
    for fetcher_class in fetcher_classes:
        if fetcher_class.name in registry:
            raise ValueError(f"Duplicate area name: {fetcher_class.name}")
        registry[fetcher_class.name] = fetcher_class()
    return registry


__all__ = [
    "GITHUB_STATISTICS_FETCHERS",
    "SECURITY_FETCHERS",
    "build_registry",
    "BranchesFetcher",
    "CodeScanningFetcher",
    "CommitsFetcher",
    "CommunityFetcher",
    "ContributorsFetcher",
    "DependabotAlertsFetcher",
    "ForksFetcher",
    "IssuesFetcher",
    "LanguagesFetcher",
    "PullRequestsFetcher",
    "ReleasesFetcher",
    "SecretScanningFetcher",
    "StarsFetcher",
    "TrafficFetcher",
    "WorkflowsFetcher",
]

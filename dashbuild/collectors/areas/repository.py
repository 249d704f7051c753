"""
Repository Profile Areas

Small areas that read repository-level resources: languages, community
health files, traffic, stars and forks.
"""

from collections import Counter
from typing import Any

from dashbuild.collectors.base import AreaFetcher, FetchContext, gather_or_cancel
from dashbuild.domain.constants import api_config, area_config
from dashbuild.domain.metrics import AreaResult

# communityProfile key -> (community/profile "files" key, fallback file-name patterns)
COMMUNITY_FILES: dict[str, tuple[str, list[str]]] = {
    "hasReadme": ("readme", ["readme"]),
    "hasLicense": ("license", ["license"]),
    "hasContributing": ("contributing", ["contributing"]),
    "hasCodeOfConduct": ("code_of_conduct", ["code_of_conduct"]),
    "hasCodeowners": ("code_of_conduct_file", ["codeowners"]),
    "hasSecurity": ("security", ["security"]),
    "hasIssueTemplate": ("issue_template", [".github/issue_template"]),
    "hasPrTemplate": ("pull_request_template", [".github/pull_request_template"]),
}


class LanguagesFetcher(AreaFetcher):
    """Bytes of code per language."""

    name = "languages"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching languages...")
        data = await context.client.fetch_json(f"{context.repo_path}/languages")
        return AreaResult(details={"languages": data if isinstance(data, dict) else {}})


def profile_from_community(profile: dict[str, Any]) -> dict[str, bool]:
    files = profile.get("files") or {}
    return {key: bool(files.get(files_key)) for key, (files_key, _) in COMMUNITY_FILES.items()}


def profile_from_tree(tree: dict[str, Any] | None) -> dict[str, bool]:
    file_names = [entry.get("path", "").lower() for entry in (tree or {}).get("tree") or []]

    def has_any(patterns: list[str]) -> bool:
        return any(pattern in name for pattern in patterns for name in file_names)

    return {key: has_any(patterns) for key, (_, patterns) in COMMUNITY_FILES.items()}


class CommunityFetcher(AreaFetcher):
    """Presence of community health files.

    The community profile endpoint only answers for public repositories;
    private ones fall back to scanning the top-level tree.
    """

    name = "community"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching community profile...")

        profile = await context.client.fetch_json(f"{context.repo_path}/community/profile")
        if isinstance(profile, dict):
            return AreaResult(details={"communityProfile": profile_from_community(profile)})

        tree = await context.client.fetch_json(f"{context.repo_path}/git/trees/HEAD?recursive=false")
        return AreaResult(details={"communityProfile": profile_from_tree(tree if isinstance(tree, dict) else None)})


class TrafficFetcher(AreaFetcher):
    """Views, clones, referrers and popular paths (requires push access)."""

    name = "traffic"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching traffic (requires push access)...")
        base = f"{context.repo_path}/traffic"

        views, clones, referrers, paths = await gather_or_cancel(
            context.client.fetch_json(f"{base}/views"),
            context.client.fetch_json(f"{base}/clones"),
            context.client.fetch_json(f"{base}/popular/referrers"),
            context.client.fetch_json(f"{base}/popular/paths"),
        )

        if not isinstance(views, dict):
            self.logger.warning("Traffic data unavailable (requires push access)")
            return AreaResult.empty()

        return AreaResult(
            metrics={
                "traffic_views_14d": views.get("count") or 0,
                "traffic_uniques_14d": views.get("uniques") or 0,
            },
            details={
                "traffic": {
                    "views": views.get("views") or [],
                    "clones": (clones.get("clones") or []) if isinstance(clones, dict) else [],
                    "referrers": referrers if isinstance(referrers, list) else [],
                    "paths": paths if isinstance(paths, list) else [],
                }
            },
        )


def build_star_history(stargazers: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Cumulative star count per day from stargazer records carrying starred_at.

    Stargazers are listed oldest first, so a capped fetch covers the earliest
    stars only.
    """
    per_day = Counter(s["starred_at"][:10] for s in stargazers if isinstance(s.get("starred_at"), str))
    history = []
    running_total = 0
    for day in sorted(per_day):
        running_total += per_day[day]
        history.append({"date": day, "stars": running_total})
    return history


class StarsFetcher(AreaFetcher):
    """Total stars and the star history of the first stargazer pages."""

    name = "stars"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching star history...")

        stargazers = await context.client.fetch_paginated(
            f"{context.repo_path}/stargazers",
            max_pages=area_config.SHORT_MAX_PAGES,
            headers={"Accept": api_config.STAR_ACCEPT},
        )
        repo_data = await context.client.fetch_json(context.repo_path)

        return AreaResult(
            metrics={"stars_total": (repo_data or {}).get("stargazers_count") or 0},
            details={"starHistory": build_star_history(stargazers)},
        )


class ForksFetcher(AreaFetcher):
    name = "forks"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching forks...")
        repo_data = await context.client.fetch_json(context.repo_path)
        return AreaResult(metrics={"forks_total": (repo_data or {}).get("forks_count") or 0})

"""
Release Area
"""

from typing import Any

from dashbuild.collectors.base import AreaFetcher, FetchContext
from dashbuild.domain.constants import area_config
from dashbuild.domain.metrics import AreaResult
from dashbuild.utils.datetime_utils import calculate_age_days


def summarize_release(release: dict[str, Any]) -> dict[str, Any]:
    return {
        "tag": release.get("tag_name"),
        "name": release.get("name") or release.get("tag_name"),
        "date": release.get("published_at") or release.get("created_at"),
        "prerelease": bool(release.get("prerelease")),
        "url": release.get("html_url"),
    }


class ReleasesFetcher(AreaFetcher):
    """Release count and days since the latest stable release (-1 when none)."""

    name = "releases"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching releases...")

        releases = await context.client.fetch_paginated(
            f"{context.repo_path}/releases", max_pages=area_config.RELEASE_MAX_PAGES
        )

        latest = next((r for r in releases if not r.get("prerelease") and not r.get("draft")), None)
        days_since_last_release = -1
        if latest is not None:
            age = calculate_age_days(latest.get("published_at"), context.now)
            if age is not None:
                days_since_last_release = int(age)

        return AreaResult(
            metrics={
                "releases_total": len(releases),
                "days_since_last_release": days_since_last_release,
            },
            details={"releases": [summarize_release(r) for r in releases[: area_config.RELEASE_DETAIL_LIMIT]]},
        )

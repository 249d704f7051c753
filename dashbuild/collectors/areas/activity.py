"""
Commit Activity and Contributor Areas

Both read GitHub's precomputed statistics endpoints. Those endpoints answer
202 while statistics are still being computed; a non-list body is treated
as "no data" for this run.
"""

from datetime import UTC, datetime
from typing import Any

from dashbuild.collectors.base import AreaFetcher, FetchContext
from dashbuild.domain.constants import area_config
from dashbuild.domain.metrics import AreaResult


def week_start(epoch_seconds: int) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, UTC)


class CommitsFetcher(AreaFetcher):
    """Weekly commit totals over the last year."""

    name = "commits"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching commit activity...")

        data = await context.client.fetch_json(f"{context.repo_path}/stats/commit_activity")
        if not isinstance(data, list):
            return AreaResult(metrics={"commits_last_week": 0}, details={"commitActivity": []})

        active_weeks = [week for week in data if week.get("total", 0) > 0]
        commit_activity = [
            {"week": week_start(week["week"]).strftime("%Y-%m-%d"), "total": week["total"]}
            for week in active_weeks[-area_config.COMMIT_ACTIVITY_WEEKS :]
        ]

        last_week = data[-1] if data else {}

        return AreaResult(
            metrics={"commits_last_week": last_week.get("total") or 0},
            details={"commitActivity": commit_activity},
        )


def summarize_contributor(contributor: dict[str, Any], active_since: datetime) -> tuple[dict[str, Any], bool]:
    """Return the contributor summary and whether they committed since active_since."""
    additions = 0
    deletions = 0
    recent_commits = 0

    for week in contributor.get("weeks") or []:
        additions += week.get("a", 0)
        deletions += week.get("d", 0)
        if week_start(week.get("w", 0)) >= active_since:
            recent_commits += week.get("c", 0)

    summary = {
        "login": (contributor.get("author") or {}).get("login") or "unknown",
        "commits": contributor.get("total", 0),
        "additions": additions,
        "deletions": deletions,
    }
    return summary, recent_commits > 0


class ContributorsFetcher(AreaFetcher):
    """Active contributors over 30 days and the top committers."""

    name = "contributors"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching contributors...")

        data = await context.client.fetch_json(f"{context.repo_path}/stats/contributors")
        if not isinstance(data, list):
            return AreaResult(metrics={"contributors_active_30d": 0}, details={"topContributors": []})

        active_since = context.days_ago(area_config.ACTIVE_CONTRIBUTOR_DAYS)
        summaries = []
        active_count = 0
        for contributor in data:
            summary, active = summarize_contributor(contributor, active_since)
            summaries.append(summary)
            if active:
                active_count += 1

        summaries.sort(key=lambda c: c["commits"], reverse=True)

        return AreaResult(
            metrics={"contributors_active_30d": active_count},
            details={"topContributors": summaries[: area_config.CONTRIBUTOR_DETAIL_LIMIT]},
        )

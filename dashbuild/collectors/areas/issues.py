"""
Issue Area

The issues endpoint also returns pull requests; those are filtered out.
"""

from dashbuild.collectors.base import AreaFetcher, FetchContext
from dashbuild.domain.constants import area_config
from dashbuild.domain.metrics import AreaResult
from dashbuild.utils.datetime_utils import calculate_age_days, is_on_or_after
from dashbuild.utils.statistics import aging_buckets


class IssuesFetcher(AreaFetcher):
    """Issue throughput, open count and open-issue aging."""

    name = "issues"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching issues...")
        cutoff = context.lookback_cutoff

        all_items = await context.client.fetch_paginated(
            f"{context.repo_path}/issues?state=all&sort=updated&direction=desc",
            max_pages=area_config.LIST_MAX_PAGES,
            predicate=lambda item: is_on_or_after(item.get("updated_at"), cutoff),
        )

        issues = [item for item in all_items if "pull_request" not in item]
        open_issues = [issue for issue in issues if issue.get("state") == "open"]
        closed_issues = [issue for issue in issues if issue.get("state") == "closed"]

        ages = [
            age
            for age in (calculate_age_days(issue.get("created_at"), context.now) for issue in open_issues)
            if age is not None
        ]

        # Total open count is repository-wide, not limited to the window
        repo_data = await context.client.fetch_json(context.repo_path)
        total_open = len(open_issues)
        if isinstance(repo_data, dict) and repo_data.get("open_issues_count") is not None:
            total_open = repo_data["open_issues_count"]

        return AreaResult(
            metrics={
                "issues_opened": len(issues),
                "issues_closed": len(closed_issues),
                "issues_open_count": total_open,
            },
            details={"issueAgingBuckets": aging_buckets(ages)},
        )

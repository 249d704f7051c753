"""
Pull Request Area

Counts PRs updated inside the lookback window, merge cycle time, time to
first review (for the most recent merged PRs only) and open-PR aging.
"""

from typing import Any

from dashbuild.collectors.base import AreaFetcher, FetchContext
from dashbuild.domain.constants import area_config
from dashbuild.domain.metrics import AreaResult
from dashbuild.utils.datetime_utils import calculate_age_days, hours_between, is_on_or_after, parse_iso_timestamp
from dashbuild.utils.statistics import aging_buckets, lower_median, round_one_decimal


def first_review_hours(pr: dict[str, Any], reviews: list[dict[str, Any]]) -> float | None:
    """Hours from PR creation to its earliest submitted review.

    Reviews with a missing or unparseable submitted_at are ignored.
    """
    submitted = []
    for review in reviews:
        try:
            submitted_at = parse_iso_timestamp(review.get("submitted_at"))
        except ValueError:
            continue
        if submitted_at is not None:
            submitted.append(submitted_at)
    if not submitted:
        return None
    return hours_between(pr.get("created_at"), min(submitted).isoformat())


def summarize_open_pr(pr: dict[str, Any]) -> dict[str, Any]:
    return {
        "number": pr.get("number"),
        "title": pr.get("title"),
        "author": (pr.get("user") or {}).get("login") or "unknown",
        "createdAt": pr.get("created_at"),
        "updatedAt": pr.get("updated_at"),
        "labels": [label.get("name") for label in pr.get("labels") or []],
        "url": pr.get("html_url"),
    }


class PullRequestsFetcher(AreaFetcher):
    """PR throughput, cycle time and review latency."""

    name = "prs"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching pull requests...")
        cutoff = context.lookback_cutoff

        all_prs = await context.client.fetch_paginated(
            f"{context.repo_path}/pulls?state=all&sort=updated&direction=desc",
            max_pages=area_config.LIST_MAX_PAGES,
            predicate=lambda pr: is_on_or_after(pr.get("updated_at"), cutoff),
        )

        open_prs = [pr for pr in all_prs if pr.get("state") == "open"]
        merged_prs = [pr for pr in all_prs if pr.get("merged_at")]
        closed_not_merged = [pr for pr in all_prs if pr.get("state") == "closed" and not pr.get("merged_at")]

        cycle_times = [
            hours
            for hours in (hours_between(pr.get("created_at"), pr.get("merged_at")) for pr in merged_prs)
            if hours is not None
        ]

        review_times: list[float] = []
        for pr in merged_prs[: context.max_review_prs]:
            reviews = await context.client.fetch_json(f"{context.repo_path}/pulls/{pr.get('number')}/reviews")
            if isinstance(reviews, list):
                hours = first_review_hours(pr, reviews)
                if hours is not None:
                    review_times.append(hours)

        ages = [
            age for age in (calculate_age_days(pr.get("created_at"), context.now) for pr in open_prs) if age is not None
        ]

        return AreaResult(
            metrics={
                "prs_opened": len(all_prs),
                "prs_merged": len(merged_prs),
                "prs_closed": len(closed_not_merged),
                "prs_open_count": len(open_prs),
                "pr_cycle_time_median_hours": round_one_decimal(lower_median(cycle_times)),
                "pr_review_time_median_hours": round_one_decimal(lower_median(review_times)),
            },
            details={
                "openPrs": [summarize_open_pr(pr) for pr in open_prs[: area_config.OPEN_PR_DETAIL_LIMIT]],
                "prAgingBuckets": aging_buckets(ages),
            },
        )

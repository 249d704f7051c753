"""
Branch Area

The branch list does not carry commit dates, so staleness needs one extra
request per branch. Only the first `max_branch_checks` non-default branches
are checked.
"""

from dashbuild.collectors.base import AreaFetcher, FetchContext
from dashbuild.domain.constants import area_config
from dashbuild.domain.metrics import AreaResult
from dashbuild.utils.datetime_utils import parse_iso_timestamp


class BranchesFetcher(AreaFetcher):
    """Branch count and stale (no commit in 90 days) branches."""

    name = "branches"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching branches...")

        branches = await context.client.fetch_paginated(
            f"{context.repo_path}/branches", max_pages=area_config.BRANCH_MAX_PAGES
        )

        repo_data = await context.client.fetch_json(context.repo_path)
        default_branch = (repo_data or {}).get("default_branch") or "main"

        stale_cutoff = context.days_ago(area_config.STALE_BRANCH_DAYS)
        to_check = [b for b in branches if b.get("name") != default_branch][: context.max_branch_checks]

        stale_names: list[str] = []
        for branch in to_check:
            sha = (branch.get("commit") or {}).get("sha")
            if not sha:
                continue

            commit = await context.client.fetch_json(f"{context.repo_path}/commits/{sha}")
            committed = ((commit or {}).get("commit") or {}).get("committer") or {}
            try:
                commit_date = parse_iso_timestamp(committed.get("date"))
            except ValueError:
                self.logger.debug(f"Unparseable commit date on branch {branch.get('name')}")
                continue

            if commit_date is not None and commit_date < stale_cutoff:
                stale_names.append(branch["name"])

        return AreaResult(
            metrics={
                "branches_total": len(branches),
                "branches_stale": len(stale_names),
            },
            details={"staleBranches": stale_names},
        )

"""
Workflow Run Area

Success rate and duration percentiles for CI workflow runs created inside
the lookback window, overall and per workflow.
"""

from dataclasses import dataclass, field
from typing import Any

from dashbuild.collectors.base import AreaFetcher, FetchContext
from dashbuild.domain.constants import area_config
from dashbuild.domain.metrics import AreaResult
from dashbuild.utils.datetime_utils import hours_between
from dashbuild.utils.statistics import nearest_rank_percentile, percent, round_one_decimal


@dataclass
class WorkflowStats:
    runs: list[dict[str, Any]] = field(default_factory=list)
    successes: int = 0
    durations: list[float] = field(default_factory=list)


def run_duration_minutes(run: dict[str, Any]) -> float | None:
    hours = hours_between(run.get("run_started_at"), run.get("updated_at"))
    if hours is None or hours <= 0:
        return None
    return hours * 60


def group_runs(runs: list[dict[str, Any]]) -> dict[str, WorkflowStats]:
    """Group runs by workflow name, preserving first-seen order."""
    by_workflow: dict[str, WorkflowStats] = {}
    for run in runs:
        stats = by_workflow.setdefault(run.get("name") or "Unknown", WorkflowStats())
        stats.runs.append(run)
        if run.get("conclusion") == "success":
            stats.successes += 1
        duration = run_duration_minutes(run)
        if duration is not None:
            stats.durations.append(duration)
    return by_workflow


class WorkflowsFetcher(AreaFetcher):
    """CI reliability and speed."""

    name = "workflows"

    async def run(self, context: FetchContext) -> AreaResult:
        self.logger.info("Fetching workflow runs...")
        since = context.lookback_cutoff.strftime("%Y-%m-%d")

        runs = await context.client.fetch_paginated(
            f"{context.repo_path}/actions/runs?created=>{since}",
            max_pages=area_config.LIST_MAX_PAGES,
            items_key="workflow_runs",
        )

        if not runs:
            return AreaResult(
                metrics={
                    "workflow_success_rate": 0,
                    "workflow_p50_duration_min": 0,
                    "workflow_p95_duration_min": 0,
                },
                details={"workflowBreakdown": []},
            )

        breakdown = []
        total_runs = 0
        total_successes = 0
        all_durations: list[float] = []

        for name, stats in group_runs(runs).items():
            total_runs += len(stats.runs)
            total_successes += stats.successes
            all_durations.extend(stats.durations)

            breakdown.append(
                {
                    "name": name,
                    "successRate": percent(stats.successes, len(stats.runs)),
                    "p50": round_one_decimal(nearest_rank_percentile(stats.durations, 50)),
                    "p95": round_one_decimal(nearest_rank_percentile(stats.durations, 95)),
                    "runs": len(stats.runs),
                    "lastStatus": stats.runs[0].get("conclusion") or "unknown",
                }
            )

        breakdown.sort(key=lambda wf: wf["runs"], reverse=True)

        return AreaResult(
            metrics={
                "workflow_success_rate": percent(total_successes, total_runs),
                "workflow_p50_duration_min": round_one_decimal(nearest_rank_percentile(all_durations, 50)),
                "workflow_p95_duration_min": round_one_decimal(nearest_rank_percentile(all_durations, 95)),
            },
            details={"workflowBreakdown": breakdown},
        )

#!/usr/bin/env python3
"""
Async Metrics Collection Orchestrator

Runs the configured metrics areas concurrently against the GitHub REST API,
isolates per-area failures, merges every area's metrics and details into
one snapshot, and hands the snapshot to the history store.

Failure policy:
    - Unknown area: warning, skipped
    - Area exception: warning naming the area, area contributes nothing
    - Rate limit exhausted: every in-flight area is cancelled, nothing is
      written, exit code 1
    - Configuration error: exit code 1 before any network activity

Usage:
    python -m dashbuild.collect_all_metrics github-statistics
    python -m dashbuild.collect_all_metrics dependabot --json-logs
"""

import argparse
import asyncio
import os
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from dashbuild.collectors.base import AreaFetcher, FetchContext, gather_or_cancel
from dashbuild.collectors.github_rest_client import GitHubRESTClient, RateLimitExceededError
from dashbuild.collectors.profiles import PROFILES, CollectionProfile, get_profile
from dashbuild.core import get_logger, log_with_context, setup_logging, track_collector_performance
from dashbuild.domain.metrics import AreaResult, DetailPayload, MetricSnapshot, validate_snapshot
from dashbuild.merge_history import finalize_output, merge_history
from dashbuild.secure_config import CollectionConfig, ConfigurationError, GitHubConfig, get_config
from dashbuild.utils.error_handling import log_and_continue

logger = get_logger(__name__)


@dataclass
class AreaOutcome:
    """How one area fared in a run."""

    name: str
    success: bool
    duration: float
    metric_count: int = 0


@dataclass
class CollectionResult:
    """
    Merged output of one collection run.

    Attributes:
        metrics: Union of all areas' metrics (last write wins in area order)
        details: Union of all areas' details (same rule)
        areas: Areas as configured
        repository: owner/repo
        request_count: Total HTTP requests made
        visibility: "public" / "private" when the profile detects it
        outcomes: Per-area success and timing
    """

    metrics: MetricSnapshot = field(default_factory=dict)
    details: DetailPayload = field(default_factory=dict)
    areas: list[str] = field(default_factory=list)
    repository: str = ""
    request_count: int = 0
    visibility: str | None = None
    outcomes: list[AreaOutcome] = field(default_factory=list)


class AsyncMetricsOrchestrator:
    """Orchestrates concurrent, failure-isolated area collection"""

    def __init__(self, registry: dict[str, AreaFetcher], max_concurrency: int = 4):
        """
        Args:
            registry: Area name -> fetcher
            max_concurrency: Areas allowed to run at the same time
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.registry = registry
        self.max_concurrency = max_concurrency

    async def _run_area_async(
        self, fetcher: AreaFetcher, context: FetchContext, semaphore: asyncio.Semaphore
    ) -> tuple[AreaResult, AreaOutcome]:
        """
        Run one area, converting any failure into an empty result.

        Raises:
            RateLimitExceededError: Propagated so the whole run stops
        """
        async with semaphore:
            logger.info(f"[START] {fetcher.name}")
            start = time.monotonic()

            try:
                result = await fetcher.run(context)
                validate_snapshot(result.metrics)
            except RateLimitExceededError:
                raise
            except Exception as e:
                duration = time.monotonic() - start
                log_and_continue(
                    logger,
                    e,
                    context={"area": fetcher.name, "duration_seconds": round(duration, 2)},
                    error_type=f"Fetching area '{fetcher.name}'",
                )
                return AreaResult.empty(), AreaOutcome(fetcher.name, False, duration)

            duration = time.monotonic() - start
            log_with_context(
                logger,
                "info",
                f"[SUCCESS] {fetcher.name} completed in {duration:.2f}s",
                area=fetcher.name,
                metric_count=len(result.metrics),
            )
            if result.is_empty:
                logger.info(f"{fetcher.name} returned no data", extra={"area": fetcher.name})
            return result, AreaOutcome(fetcher.name, True, duration, len(result.metrics))

    def resolve_areas(self, areas: list[str]) -> list[AreaFetcher]:
        """Known fetchers in requested order; unknown names are warned about and skipped."""
        fetchers = []
        for area in dict.fromkeys(areas):
            fetcher = self.registry.get(area)
            if fetcher is None:
                logger.warning(f"Unknown area: {area}", extra={"area": area, "known_areas": sorted(self.registry)})
                continue
            fetchers.append(fetcher)
        return fetchers

    async def collect_all_metrics(self, areas: list[str], context: FetchContext) -> CollectionResult:
        """
        Collect all requested areas concurrently.

        Results are merged in requested-area order regardless of which area
        finishes first, so key collisions resolve the same way every run.

        Raises:
            RateLimitExceededError: After cancelling every remaining area
        """
        fetchers = self.resolve_areas(areas)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        completed = await gather_or_cancel(
            *(self._run_area_async(fetcher, context, semaphore) for fetcher in fetchers)
        )

        result = CollectionResult(areas=list(areas), repository=context.repository)
        for area_result, outcome in completed:
            result.metrics.update(area_result.metrics)
            result.details.update(area_result.details)
            result.outcomes.append(outcome)

        successful = sum(1 for outcome in result.outcomes if outcome.success)
        logger.info(f"Areas collected: {successful}/{len(result.outcomes)} succeeded")
        return result


async def detect_visibility(client: GitHubRESTClient, repo_path: str) -> str:
    """Repository visibility; "private" when the repository cannot be read."""
    repo_data = await client.fetch_json(repo_path)
    if isinstance(repo_data, dict):
        return "private" if repo_data.get("private") else "public"
    return "private"


async def run_collection(
    profile: CollectionProfile,
    github_config: GitHubConfig,
    collection_config: CollectionConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CollectionResult:
    """
    Collect every configured area for one profile.

    Args:
        profile: Collection profile (registry, output options)
        github_config: Validated token and repository
        collection_config: Validated run settings
        transport: Optional httpx transport override

    Raises:
        RateLimitExceededError: When the API quota runs out mid-run
    """
    with track_collector_performance(profile.slug) as tracker:
        tracker.area_count = len(collection_config.areas)

        async with GitHubRESTClient(
            github_config.token,
            tracker=tracker,
            api_base_url=github_config.api_base_url,
            transport=transport,
        ) as client:
            context = FetchContext(
                client=client,
                owner=github_config.owner,
                repo=github_config.repo,
                lookback_days=collection_config.lookback_days,
                max_review_prs=collection_config.max_review_prs,
                max_branch_checks=collection_config.max_branch_checks,
            )

            orchestrator = AsyncMetricsOrchestrator(profile.build_registry(), collection_config.max_concurrency)
            result = await orchestrator.collect_all_metrics(collection_config.areas, context)

            if profile.include_visibility:
                result.visibility = await detect_visibility(client, context.repo_path)

        result.request_count = tracker.api_call_count

    logger.info(f"Total API requests: {result.request_count}")
    return result


def output_path_for(profile: CollectionProfile, collection_config: CollectionConfig) -> Path:
    return Path(collection_config.dashbuild_dir) / "src" / "data" / f"{profile.slug}.json"


def write_output(
    result: CollectionResult,
    profile: CollectionProfile,
    collection_config: CollectionConfig,
    output_file: Path | None = None,
) -> dict[str, Any]:
    """
    Merge the run's metrics into history and write the data file (and cache).

    Returns:
        The final data file content
    """
    output_file = output_file or output_path_for(profile, collection_config)

    history_data = merge_history(
        todays_metrics=result.metrics,
        cache_file_path=collection_config.cache_file,
        areas=collection_config.areas,
        output_file_path=output_file,
        retention_days=collection_config.retention_days,
    )

    config: dict[str, Any] = {"areas": collection_config.areas, "repository": result.repository}
    if profile.include_lookback:
        config["lookbackDays"] = collection_config.lookback_days
    if profile.include_visibility:
        config["visibility"] = result.visibility or "private"

    return finalize_output(
        history_data,
        config=config,
        details=result.details,
        output_file_path=output_file,
        cache_file_path=collection_config.cache_file,
    )


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Process exit code (0 on success, including partial area failures)
    """
    parser = argparse.ArgumentParser(description="Collect GitHub metrics into a Dashbuild history file")
    parser.add_argument("profile", choices=sorted(PROFILES), help="Collection profile to run")
    parser.add_argument("--log-level", default=os.getenv("LOG_LEVEL", "INFO"), help="Log level (default: INFO)")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=os.getenv("LOG_JSON", "").lower() in ("1", "true", "yes"),
        help="Emit structured JSON logs",
    )
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, json_output=args.json_logs, static_fields={"profile": args.profile})
    profile = get_profile(args.profile)

    try:
        config = get_config()
        collection_config = config.get_collection_config(profile.env_prefix, list(profile.default_areas))
        github_config = config.get_github_config(profile.env_prefix)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    logger.info("=" * 60)
    logger.info(f"Dashbuild - {profile.slug} collection")
    logger.info(f"Repository: {github_config.repository}")
    logger.info(f"Areas: {', '.join(collection_config.areas)}")
    logger.info(f"Lookback: {collection_config.lookback_days} days")
    logger.info("=" * 60)

    try:
        result = asyncio.run(run_collection(profile, github_config, collection_config))
    except RateLimitExceededError as e:
        logger.error(f"{e} - no output written")
        return 1

    write_output(result, profile, collection_config)

    failed = [outcome.name for outcome in result.outcomes if not outcome.success]
    if failed:
        logger.warning(f"Completed with failed areas: {', '.join(failed)}")
    else:
        logger.info("[SUCCESS] All areas collected")

    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()

#!/usr/bin/env python3
"""
History Merge & Retention Store

Merges today's metric snapshot into a persisted per-day history:
one entry per UTC calendar date, sorted ascending, pruned to a retention
window, written to the data file and (optionally) a durable cache that the
next run reads back.

Can be used as:
    - A function: `from dashbuild.merge_history import merge_history`
    - A CLI: `python -m dashbuild.merge_history <metricsJson> <cacheFile> <areas> <outputFile> [retentionDays]`
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from dashbuild.core.logging_config import get_logger, setup_logging
from dashbuild.domain.metrics import (
    DetailPayload,
    HistoryEntry,
    MetricSnapshot,
    prune_before,
    replace_entry_for_date,
    validate_snapshot,
)
from dashbuild.secure_config import parse_areas
from dashbuild.utils.datetime_utils import subtract_days, today_utc
from dashbuild.utils_atomic_json import atomic_json_save, load_json_with_recovery

logger = get_logger(__name__)


def load_history(cache_file_path: str | Path | None) -> list[HistoryEntry]:
    """
    Load the carried-forward history from a cache file.

    A missing, unreadable or malformed cache is never fatal: the run starts
    from an empty history instead.
    """
    if not cache_file_path:
        return []

    cache_path = Path(cache_file_path)
    if not cache_path.exists():
        logger.info(f"No cache at {cache_path}, starting fresh")
        return []

    data = load_json_with_recovery(cache_path, default_value={})
    raw_history = data.get("history")
    if not isinstance(raw_history, list):
        logger.info("Cache file unreadable, starting fresh", extra={"cache_file": str(cache_path)})
        return []

    history: list[HistoryEntry] = []
    for raw_entry in raw_history:
        try:
            history.append(HistoryEntry.from_dict(raw_entry))
        except ValueError as e:
            logger.warning(f"Skipping malformed history entry in cache: {e}")

    logger.info(f"Loaded {len(history)} existing entries from cache")
    return history


def merge_history(
    todays_metrics: MetricSnapshot,
    cache_file_path: str | Path | None,
    areas: list[str],
    output_file_path: str | Path,
    retention_days: int = 0,
    today: str | None = None,
) -> dict[str, Any]:
    """
    Merge today's metrics into the historical data file.

    Args:
        todays_metrics: Flat metric name -> value snapshot for this run
        cache_file_path: Existing cache file ("" or None = no cache)
        areas: Enabled metric area names
        output_file_path: Where to write the merged output JSON
        retention_days: Days to retain (0 = keep all)
        today: Override for the UTC calendar date (YYYY-MM-DD)

    Returns:
        The written structure: {"config": {"areas": [...]}, "history": [...]}

    Raises:
        ValueError: If todays_metrics is not a valid snapshot

    Example:
        >>> data = merge_history({"open": 5}, "", ["prs"], "out/data.json")
        >>> len(data["history"])
        1
    """
    snapshot = validate_snapshot(todays_metrics)
    todays_date = today or today_utc()

    history = load_history(cache_file_path)
    history = replace_entry_for_date(history, HistoryEntry(date=todays_date, metrics=snapshot))

    if retention_days > 0:
        cutoff_date = subtract_days(todays_date, retention_days)
        count_before = len(history)
        history = prune_before(history, cutoff_date)
        pruned_count = count_before - len(history)

        if pruned_count > 0:
            logger.info(f"Pruned {pruned_count} entries older than {retention_days} days")

    output_data: dict[str, Any] = {
        "config": {"areas": list(areas)},
        "history": [entry.to_dict() for entry in history],
    }

    atomic_json_save(output_data, output_file_path)
    logger.info(f"Wrote {len(history)} entries to {output_file_path}")

    if cache_file_path:
        atomic_json_save(output_data, cache_file_path)
        logger.info(f"Updated cache at {cache_file_path}")

    return output_data


def finalize_output(
    history_data: dict[str, Any],
    config: dict[str, Any],
    details: DetailPayload,
    output_file_path: str | Path,
    cache_file_path: str | Path | None = None,
) -> dict[str, Any]:
    """
    Layer run configuration and point-in-time details over merged history.

    merge_history() owns the history and config.areas; everything else is
    attached here and the output (and cache) rewritten.

    Returns:
        The final written structure
    """
    final_output = {
        **history_data,
        "config": {**history_data.get("config", {}), **config},
        "details": details,
    }

    atomic_json_save(final_output, output_file_path)
    logger.info(f"Data written to {output_file_path}")

    if cache_file_path:
        atomic_json_save(final_output, cache_file_path)
        logger.info(f"Cache updated at {cache_file_path}")

    return final_output


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Merge today's metrics into a history data file")
    parser.add_argument("metrics_json", help="Flat JSON object of today's metrics")
    parser.add_argument("cache_file", help="Cache file path ('' disables the cache)")
    parser.add_argument("areas", help="Comma-separated area names")
    parser.add_argument("output_file", help="Output data file path")
    parser.add_argument("retention_days", nargs="?", type=int, default=0, help="Days to retain (0 = all)")
    args = parser.parse_args(argv)

    setup_logging()

    try:
        todays_metrics = json.loads(args.metrics_json)
        merge_history(
            todays_metrics=todays_metrics,
            cache_file_path=args.cache_file,
            areas=parse_areas(args.areas),
            output_file_path=args.output_file,
            retention_days=args.retention_days,
        )
    except (json.JSONDecodeError, ValueError) as e:
        logger.error(f"Invalid metrics: {e}")
        return 1

    return 0


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()

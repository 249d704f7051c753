"""
Base domain models for metrics

Provides the data model shared by the area fetchers, the orchestrator and
the history store:
    - MetricSnapshot / DetailPayload: flat metrics and point-in-time details
    - AreaResult: what one area fetcher returns
    - HistoryEntry: one day's snapshot in the time series
"""

import re
from dataclasses import dataclass, field
from typing import Any, TypeAlias

MetricValue: TypeAlias = int | float | str
MetricSnapshot: TypeAlias = dict[str, MetricValue]
DetailPayload: TypeAlias = dict[str, Any]

MAX_METRIC_STRING_LENGTH = 200
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def validate_snapshot(metrics: Any) -> MetricSnapshot:
    """
    Check that a snapshot is a flat mapping of metric name to scalar.

    Values may be int, float or a short string. Booleans, nested values and
    over-long strings are rejected.

    Returns:
        A copy of the snapshot

    Raises:
        ValueError: If the snapshot violates the value union

    Example:
        >>> validate_snapshot({"open": 5, "rate": 92.5})
        {'open': 5, 'rate': 92.5}
        >>> validate_snapshot({"open": [1, 2]})  # Raises ValueError
    """
    if not isinstance(metrics, dict):
        raise ValueError(f"Metric snapshot must be a mapping, got {type(metrics).__name__}")

    for key, value in metrics.items():
        if not isinstance(key, str) or not key:
            raise ValueError(f"Metric name must be a non-empty string, got {key!r}")
        if isinstance(value, bool) or not isinstance(value, int | float | str):
            raise ValueError(f"Metric {key!r} must be a number or short string, got {type(value).__name__}")
        if isinstance(value, str) and len(value) > MAX_METRIC_STRING_LENGTH:
            raise ValueError(f"Metric {key!r} string value exceeds {MAX_METRIC_STRING_LENGTH} characters")

    return dict(metrics)


@dataclass
class AreaResult:
    """
    Metrics fragment and details fragment produced by one area fetcher.

    Attributes:
        metrics: Flat metric name -> scalar values (joins the time series)
        details: Area detail payloads (latest run only)
    """

    metrics: MetricSnapshot = field(default_factory=dict)
    details: DetailPayload = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "AreaResult":
        """Result contributed by a failed or skipped area."""
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.metrics and not self.details


@dataclass(frozen=True)
class HistoryEntry:
    """
    One calendar day's snapshot in a history.

    Attributes:
        date: UTC calendar date (YYYY-MM-DD)
        metrics: Snapshot collected on that date
    """

    date: str
    metrics: MetricSnapshot

    def __post_init__(self) -> None:
        if not isinstance(self.date, str) or not DATE_PATTERN.match(self.date):
            raise ValueError(f"History entry date must be YYYY-MM-DD, got {self.date!r}")
        if not isinstance(self.metrics, dict):
            raise ValueError(f"History entry metrics must be a mapping, got {type(self.metrics).__name__}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        """
        Build an entry from its JSON form.

        Raises:
            ValueError: If the entry is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"History entry must be an object, got {type(data).__name__}")
        return cls(date=data.get("date"), metrics=data.get("metrics"))  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "metrics": self.metrics}


def replace_entry_for_date(history: list[HistoryEntry], entry: HistoryEntry) -> list[HistoryEntry]:
    """
    Drop any entry sharing the new entry's date, append it and sort by date.

    YYYY-MM-DD strings sort lexicographically in chronological order.
    """
    kept = [existing for existing in history if existing.date != entry.date]
    kept.append(entry)
    return sorted(kept, key=lambda e: e.date)


def prune_before(history: list[HistoryEntry], cutoff_date: str) -> list[HistoryEntry]:
    """Keep entries dated on or after cutoff_date, preserving order."""
    return [entry for entry in history if entry.date >= cutoff_date]

"""
Domain Models - Type-safe data structures for metrics

    - metrics: MetricSnapshot, AreaResult, HistoryEntry
    - constants: API and area constants

Usage:
    from dashbuild.domain import AreaResult, HistoryEntry

    entry = HistoryEntry(date="2026-02-07", metrics={"prs_open_count": 4})
"""

from .metrics import AreaResult, DetailPayload, HistoryEntry, MetricSnapshot, validate_snapshot

__all__ = [
    "AreaResult",
    "DetailPayload",
    "HistoryEntry",
    "MetricSnapshot",
    "validate_snapshot",
]

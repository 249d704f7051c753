"""
Core Infrastructure - Logging and Run Tracking

Usage:
    from dashbuild.core import get_logger, track_collector_performance

    logger = get_logger(__name__)
    with track_collector_performance("github-statistics") as tracker:
        ...
"""

from dashbuild.core.collector_metrics import CollectorMetricsTracker, track_collector_performance
from dashbuild.core.logging_config import get_logger, log_with_context, setup_logging

__all__ = [
    "get_logger",
    "log_with_context",
    "setup_logging",
    "CollectorMetricsTracker",
    "track_collector_performance",
]

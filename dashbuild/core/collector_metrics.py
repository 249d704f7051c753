"""
Collection run bookkeeping.

One CollectorMetricsTracker per run counts HTTP requests, exhausted
rate-limit quotas and requests that degraded to "no data". The tracker is
handed to the REST client explicitly; concurrent areas share it through
that client.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from dashbuild.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class CollectorMetricsTracker:
    """
    Counters and timing for a single collection run.

    Example:
        >>> tracker = CollectorMetricsTracker("github-statistics")
        >>> tracker.record_api_call()
        >>> tracker.api_call_count
        1
    """

    collector_name: str
    start_time: float | None = None
    execution_time_ms: float = 0
    success: bool = False
    area_count: int = 0
    api_call_count: int = 0
    rate_limit_hits: int = 0
    failed_request_count: int = 0
    error_message: str | None = None
    error_type: str | None = None

    def start(self) -> None:
        self.start_time = time.monotonic()

    def end(self, success: bool, error: BaseException | None = None) -> None:
        """Stop the clock; a failed run keeps the exception's class and text."""
        if self.start_time is not None:
            self.execution_time_ms = (time.monotonic() - self.start_time) * 1000
        self.success = success
        if error is not None:
            self.error_message = str(error)
            self.error_type = type(error).__name__

    def record_api_call(self) -> None:
        self.api_call_count += 1

    def record_rate_limit_hit(self) -> None:
        self.rate_limit_hits += 1
        logger.warning(
            f"Rate limit exhausted for {self.collector_name} collector",
            extra={"collector": self.collector_name, "total_rate_limit_hits": self.rate_limit_hits},
        )

    def record_failed_request(self) -> None:
        self.failed_request_count += 1

    def to_dict(self) -> dict[str, Any]:
        """Run summary for structured logs."""
        return {
            "timestamp": datetime.now(UTC).isoformat(),
            "collector_name": self.collector_name,
            "execution_time_ms": round(self.execution_time_ms, 2),
            "success": self.success,
            "area_count": self.area_count,
            "api_call_count": self.api_call_count,
            "rate_limit_hits": self.rate_limit_hits,
            "failed_request_count": self.failed_request_count,
            "error_message": self.error_message,
            "error_type": self.error_type,
        }


@contextmanager
def track_collector_performance(collector_name: str) -> Iterator[CollectorMetricsTracker]:
    """
    Time a collection run and log its summary on exit.

    Exceptions are recorded on the tracker and re-raised.

    Example:
        with track_collector_performance("github-statistics") as tracker:
            async with GitHubRESTClient(token, tracker=tracker) as client:
                ...
    """
    tracker = CollectorMetricsTracker(collector_name)
    tracker.start()

    try:
        yield tracker
    except Exception as e:
        tracker.end(success=False, error=e)
        logger.error(f"{collector_name} collection failed: {e}", extra=tracker.to_dict())
        raise

    tracker.end(success=True)
    logger.info(
        f"{collector_name} collection finished in {tracker.execution_time_ms / 1000:.2f}s",
        extra=tracker.to_dict(),
    )

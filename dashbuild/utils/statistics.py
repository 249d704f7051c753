"""
Statistics Utilities

Shared statistical functions for area metrics.

All percentiles use the nearest-rank definition and the median is the
"lower of the two middle" element, so that percentile and median agree on
the same sorted sample. Rates are rounded to one decimal place.

Usage:
    from dashbuild.utils.statistics import nearest_rank_percentile, lower_median, round_one_decimal

    p95 = nearest_rank_percentile(durations, 95)
    median_hours = round_one_decimal(lower_median(cycle_times))
"""

import math
from collections.abc import Iterable, Sequence

AGING_BUCKET_BOUNDS: list[tuple[str, float]] = [("0-7", 7), ("7-14", 14), ("14-30", 30)]
AGING_OVERFLOW_BUCKET = "30+"


def nearest_rank_percentile(data: Sequence[float], percentile: float) -> float:
    """
    Calculate a percentile with the nearest-rank method.

    Sort ascending, take index ceil(p/100 * n) - 1, clamped to 0.

    Args:
        data: Sequence of numeric values
        percentile: Percentile to calculate (0-100)

    Returns:
        The selected sample value, or 0 for empty data

    Raises:
        ValueError: If percentile is out of range

    Example:
        >>> nearest_rank_percentile([15, 20, 35, 40, 50], 30)
        20
        >>> nearest_rank_percentile([1, 2, 3, 4], 50)
        2
    """
    if not 0 <= percentile <= 100:
        raise ValueError(f"Percentile must be 0-100, got {percentile}")

    if not data:
        return 0

    sorted_data = sorted(data)
    index = math.ceil((percentile / 100) * len(sorted_data)) - 1
    return sorted_data[max(0, index)]


def lower_median(data: Sequence[float]) -> float:
    """
    Median of a sample without interpolation: element n // 2 of the sorted sample.

    Example:
        >>> lower_median([4, 1, 3, 2])
        3
        >>> lower_median([])
        0
    """
    if not data:
        return 0
    sorted_data = sorted(data)
    return sorted_data[len(sorted_data) // 2]


def round_one_decimal(value: float) -> float:
    """
    Round to one decimal place, half away from zero.

    Example:
        >>> round_one_decimal(2.25)
        2.3
        >>> round_one_decimal(-2.25)
        -2.3
    """
    scaled = value * 10
    return math.copysign(math.floor(abs(scaled) + 0.5), scaled) / 10


def percent(part: float, total: float) -> float:
    """Percentage of part in total rounded to one decimal, 0 when total is 0."""
    if total <= 0:
        return 0
    return round_one_decimal(part / total * 100)


def aging_buckets(ages_days: Iterable[float]) -> dict[str, int]:
    """
    Histogram of ages with fixed boundaries 0-7, 7-14, 14-30 and 30+ days.

    Upper bounds are inclusive: exactly 7 days falls into "0-7".

    Example:
        >>> aging_buckets([1, 7, 8, 30, 45])
        {'0-7': 2, '7-14': 1, '14-30': 1, '30+': 1}
    """
    buckets = {label: 0 for label, _ in AGING_BUCKET_BOUNDS}
    buckets[AGING_OVERFLOW_BUCKET] = 0

    for age in ages_days:
        for label, upper in AGING_BUCKET_BOUNDS:
            if age <= upper:
                buckets[label] += 1
                break
        else:
            buckets[AGING_OVERFLOW_BUCKET] += 1

    return buckets

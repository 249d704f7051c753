#!/usr/bin/env python3
"""
Datetime Utility Functions

Centralized datetime parsing and calendar arithmetic shared by the area
fetchers and the history store.

Handles common patterns:
- GitHub ISO timestamps with 'Z' suffix
- Epoch-second headers (x-ratelimit-reset, commit activity weeks)
- Age and duration calculations
- Pure UTC calendar-date arithmetic on YYYY-MM-DD strings
"""

from datetime import UTC, date, datetime, timedelta

DATE_FORMAT = "%Y-%m-%d"


def parse_iso_timestamp(timestamp_str: str | None) -> datetime | None:
    """
    Parse an ISO 8601 timestamp (with or without 'Z' suffix) to an aware datetime.

    Naive timestamps are assumed to be UTC.

    Args:
        timestamp_str: ISO timestamp string, or None

    Returns:
        datetime in UTC, or None if input is empty

    Raises:
        ValueError: If timestamp format is invalid

    Examples:
        >>> parse_iso_timestamp("2026-02-10T10:00:00Z")
        datetime.datetime(2026, 2, 10, 10, 0, tzinfo=datetime.timezone.utc)
    """
    if not timestamp_str:
        return None

    if not isinstance(timestamp_str, str):
        raise ValueError(f"Timestamp must be a string, got {type(timestamp_str)}")

    try:
        parsed = datetime.fromisoformat(timestamp_str.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValueError(f"Invalid timestamp format: {timestamp_str}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_on_or_after(timestamp_str: str | None, cutoff: datetime) -> bool:
    """True when the timestamp parses and is not earlier than cutoff."""
    try:
        parsed = parse_iso_timestamp(timestamp_str)
    except ValueError:
        return False
    return parsed is not None and parsed >= cutoff


def hours_between(start: str | None, end: str | None) -> float | None:
    """
    Hours elapsed between two ISO timestamps.

    Returns None if either timestamp is missing or invalid.

    Examples:
        >>> hours_between("2026-02-10T10:00:00Z", "2026-02-10T22:30:00Z")
        12.5
    """
    try:
        start_dt = parse_iso_timestamp(start)
        end_dt = parse_iso_timestamp(end)
    except ValueError:
        return None

    if start_dt is None or end_dt is None:
        return None

    return (end_dt - start_dt).total_seconds() / 3600


def calculate_age_days(created: str | None, reference_time: datetime | None = None) -> float | None:
    """
    Calculate age in days from creation timestamp to reference time (default: now).

    Args:
        created: ISO timestamp string when item was created
        reference_time: Reference datetime for age calculation (default: now in UTC)

    Returns:
        Age in days (fractional), or None if created is missing/invalid or in the future

    Examples:
        >>> ref = datetime(2026, 2, 10, 10, 0, 0, tzinfo=UTC)
        >>> calculate_age_days("2026-02-01T10:00:00Z", reference_time=ref)
        9.0
    """
    try:
        created_dt = parse_iso_timestamp(created)
    except ValueError:
        return None

    if created_dt is None:
        return None

    if reference_time is None:
        reference_time = datetime.now(UTC)
    if reference_time.tzinfo is None:
        reference_time = reference_time.replace(tzinfo=UTC)

    age_days = (reference_time - created_dt).total_seconds() / 86400
    if age_days < 0:
        return None
    return age_days


def epoch_to_iso(epoch_seconds: int | float | str | None) -> str | None:
    """
    Render epoch seconds as an ISO 8601 UTC timestamp.

    Examples:
        >>> epoch_to_iso("1700000000")
        '2023-11-14T22:13:20+00:00'
    """
    if epoch_seconds is None or epoch_seconds == "":
        return None
    try:
        return datetime.fromtimestamp(float(epoch_seconds), UTC).isoformat()
    except (TypeError, ValueError, OverflowError):
        return None


def today_utc(now: datetime | None = None) -> str:
    """Current UTC calendar date as YYYY-MM-DD."""
    now = now or datetime.now(UTC)
    return now.astimezone(UTC).strftime(DATE_FORMAT)


def parse_calendar_date(value: str) -> date:
    """
    Parse a strict YYYY-MM-DD calendar date.

    Raises:
        ValueError: If the value is not a valid calendar date
    """
    return datetime.strptime(value, DATE_FORMAT).date()


def subtract_days(calendar_date: str, days: int) -> str:
    """
    Pure calendar subtraction on a YYYY-MM-DD date.

    Results beyond the calendar range clamp to 0001-01-01 (or 9999-12-31 for
    negative days).

    Examples:
        >>> subtract_days("2024-06-02", 90)
        '2024-03-04'
        >>> subtract_days("2024-03-01", 1)
        '2024-02-29'
    """
    start = parse_calendar_date(calendar_date)
    try:
        return (start - timedelta(days=days)).isoformat()
    except OverflowError:
        return (date.min if days > 0 else date.max).isoformat()

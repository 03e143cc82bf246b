"""Date parsing and formatting utilities for dashboard queries."""

from datetime import datetime, timedelta, timezone


def parse_date_input(date_str: str) -> datetime:
    """Parse a user-supplied date into an aware UTC datetime.

    Supports:
    - ISO dates: 2024-01-01, 2024-01-01T10:00:00Z, 2024-01-01T10:00:00
    - Common formats: January 1, 2024, Jan 1 2024, 2024/01/01

    Args:
        date_str: Date string to parse

    Returns:
        Parsed datetime in UTC

    Raises:
        ValueError: If date format is not recognized
    """
    formats = [
        "%Y-%m-%d",  # 2024-01-01
        "%Y-%m-%dT%H:%M:%SZ",  # 2024-01-01T10:00:00Z
        "%Y-%m-%dT%H:%M:%S",  # 2024-01-01T10:00:00
        "%B %d, %Y",  # January 1, 2024
        "%b %d, %Y",  # Jan 1, 2024
        "%B %d %Y",  # January 1 2024
        "%b %d %Y",  # Jan 1 2024
        "%Y/%m/%d",  # 2024/01/01
    ]

    for fmt in formats:
        try:
            return datetime.strptime(date_str, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    raise ValueError(
        f"Unable to parse date '{date_str}'. "
        f"Supported formats include: YYYY-MM-DD, YYYY-MM-DDTHH:MM:SSZ, "
        f"'January 1, 2024', 'Jan 1 2024', YYYY/MM/DD"
    )


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def relative_date_to_absolute(now: datetime, days: int) -> datetime:
    """Return the datetime ``days`` days before ``now``.

    Raises:
        ValueError: If days is not a positive integer
    """
    if days <= 0:
        raise ValueError("Days must be a positive integer")
    return now - timedelta(days=days)


def format_datetime_for_github(dt: datetime) -> str:
    """Format datetime for GitHub API search qualifiers (``closed:>=...``)."""
    return dt.strftime("%Y-%m-%d")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 API timestamp into an aware UTC datetime."""
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))

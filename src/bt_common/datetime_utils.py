"""UTC datetime utilities."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def days_from_now(days: int) -> datetime:
    """Return the UTC instant `days` days after now (ban expiries)."""
    return utc_now() + timedelta(days=days)

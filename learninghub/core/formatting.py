"""Human-readable durations and timestamps for progress views."""

from __future__ import annotations

from datetime import datetime


def format_duration(milliseconds: int) -> str:
    """Return "1h 5m", "3m 12s" or "45s"."""
    seconds = max(int(milliseconds), 0) // 1000
    minutes = seconds // 60
    hours = minutes // 60
    if hours > 0:
        return f"{hours}h {minutes % 60}m"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"


def format_date(timestamp_ms: int) -> str:
    """Local calendar date of a millisecond timestamp, ISO formatted."""
    return datetime.fromtimestamp(timestamp_ms / 1000).date().isoformat()


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''} ago"


def format_relative_time(timestamp_ms: int, now_ms: int) -> str:
    seconds = (now_ms - timestamp_ms) // 1000
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24
    if days > 0:
        return _plural(days, "day")
    if hours > 0:
        return _plural(hours, "hour")
    if minutes > 0:
        return _plural(minutes, "minute")
    return "Just now"

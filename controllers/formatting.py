"""Display helpers shared by the controllers and templates."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

DATE_FORMAT = "%Y-%m-%d"


def parse_iso_date(value: Optional[str]):
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


def format_long_date(value: Optional[str]) -> str:
    """``2023-06-22`` -> ``Thursday, June 22, 2023``; unparseable input is returned as-is."""

    parsed = parse_iso_date(value)
    if parsed is None:
        return value or ""
    return f"{parsed:%A}, {parsed:%B} {parsed.day}, {parsed.year}"


def format_duration(minutes: Optional[int]) -> str:
    if minutes is None:
        return ""
    return f"{minutes} minutes"


def time_of_day_marker(value: Optional[str]) -> str:
    """Classify a free-form time string as ``morning``, ``evening`` or ``unknown``."""

    if not value or ":" not in value:
        return "unknown"
    try:
        hour = int(value.split(":")[0])
    except ValueError:
        return "unknown"
    return "evening" if hour > 11 else "morning"

"""Clock-time helpers for schedule rows.

Schedule times are local ``HH:MM`` strings; durations are decimal hours.
"""

from __future__ import annotations

import math

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str | None) -> int | None:
    """``"08:30"`` -> 510 minutes after midnight. ``None`` if unparseable."""
    if not value or ":" not in value:
        return None
    hours, _, minutes = value.partition(":")
    try:
        h, m = int(hours), int(minutes)
    except ValueError:
        return None
    if not (0 <= h < 24 and 0 <= m < 60):
        return None
    return h * 60 + m


def format_hhmm(minutes: int) -> str:
    """Minutes after midnight -> ``HH:MM``, wrapped to one day."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_minutes(etd: str | None, minutes: int) -> str:
    """Shift a clock time, wrapping past midnight. Empty if ``etd`` is unusable."""
    start = parse_hhmm(etd)
    if start is None:
        return ""
    return format_hhmm(start + minutes)


def hours_to_minutes(hours: float | None) -> int:
    """Whole minutes in ``hours``; a partial minute is dropped (1.01h -> 60)."""
    return math.floor((hours or 0.0) * 60)

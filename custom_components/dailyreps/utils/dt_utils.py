# File: utils/dt_utils.py
"""Day-string utilities for Daily Reps.

Pure Python date functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

⚠️ UTILS PURITY: NO `homeassistant.*` imports allowed.
   Uses standard library datetime plus dateutil for strict ISO parsing.

Every ledger key is a UTC calendar day formatted as ``YYYY-MM-DD``. Day
arithmetic is done on `datetime.date` ordinals, never on wall-clock
timestamps, so DST and the host timezone can not shift a result.

Functions:
    - dt_now_utc: Current datetime in UTC
    - dt_today_utc: Today's UTC calendar day as `datetime.date`
    - dt_today_iso: Today's UTC calendar day as a day-string
    - parse_day: Strict day-string parsing
    - format_day: `datetime.date` to day-string
    - add_days: Shift a day-string by whole days
    - day_diff: Whole calendar days between two day-strings
    - recent_days: The N most recent day-strings ending today
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
import logging

# Third-party date utilities (no HA dependency)
from dateutil.parser import isoparse

# Module-level logger (no HA dependency)
_LOGGER = logging.getLogger(__name__)

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

DAY_FORMAT = "%Y-%m-%d"


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_today_utc() -> date:
    """Return the current UTC calendar day as a `datetime.date`."""
    return dt_now_utc().date()


def dt_today_iso() -> str:
    """Return the current UTC calendar day as a day-string.

    Example:
        "2025-04-07"
    """
    return format_day(dt_today_utc())


# ==============================================================================
# Parsing / Formatting
# ==============================================================================


def format_day(day: date) -> str:
    """Format a `datetime.date` as a zero-padded day-string."""
    return day.strftime(DAY_FORMAT)


def parse_day(value: str | date | datetime | None) -> date | None:
    """Parse a day-string into a `datetime.date`.

    Accepts ISO 8601 calendar dates (and full ISO datetimes, whose date part
    is used). Anything else returns None rather than raising.

    Args:
        value: Day-string, date, datetime or None

    Returns:
        datetime.date or None if the value can not be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    try:
        return isoparse(value.strip()).date()
    except (ValueError, OverflowError):
        _LOGGER.debug("DEBUG: parse_day - unparseable day-string '%s'", value)
        return None


# ==============================================================================
# Day Arithmetic
# ==============================================================================


def add_days(day: str, days: int) -> str:
    """Return the day-string `days` whole days after `day`.

    Args:
        day: Base day-string (must be well formed)
        days: Number of days to add (may be negative)

    Raises:
        ValueError: If `day` is not a valid day-string.
    """
    base = parse_day(day)
    if base is None:
        raise ValueError(f"Invalid day-string: {day!r}")
    return format_day(base + timedelta(days=days))


def day_diff(start: str | None, end: str | None) -> int:
    """Return the number of whole UTC calendar days from `start` to `end`.

    Returns 0 if either value is missing, empty or unparseable. The result is
    negative when `end` is before `start`.

    Example:
        day_diff("2025-03-30", "2025-04-02") → 3
    """
    if not start or not end:
        return 0
    start_day = parse_day(start)
    end_day = parse_day(end)
    if start_day is None or end_day is None:
        return 0
    return end_day.toordinal() - start_day.toordinal()


def recent_days(count: int, today: str | None = None) -> list[str]:
    """Return the `count` most recent day-strings ending at today, oldest first.

    Pure function of the reference day: calling it again yields the same
    sequence until the UTC day changes.

    Args:
        count: Number of days (0 or negative gives an empty list)
        today: Reference day-string. Defaults to the current UTC day.

    Example:
        recent_days(3, "2025-04-07") → ["2025-04-05", "2025-04-06", "2025-04-07"]
    """
    if count <= 0:
        return []
    end = parse_day(today) if today else dt_today_utc()
    if end is None:
        end = dt_today_utc()
    return [format_day(end - timedelta(days=offset)) for offset in range(count - 1, -1, -1)]

"""Type definitions for Daily Reps data structures.

TypedDict is used for structures whose keys are fixed (the exercise record,
a ledger entry, the metrics snapshot). The history ledger itself is keyed by
day-string at runtime, so it is typed as a plain ``dict[str, LedgerEntry]``.

IMPORTANT: This file must NOT import from coordinator.py or any module that
imports the coordinator. Only typing machinery is used here.

NOTE: TypedDict is STATIC ANALYSIS ONLY. Runtime defaults and null handling
live in data_builders.py and the engines.
"""

from typing import NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

ExerciseId = str  # UUID string
DayString = str  # UTC calendar day "2026-01-18"
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"


# =============================================================================
# Ledger
# =============================================================================


class LedgerEntry(TypedDict):
    """One day of the sparse history ledger."""

    planned: int
    done: int


# =============================================================================
# Exercise
# =============================================================================


class ExerciseData(TypedDict):
    """Type definition for a tracked exercise.

    Every field is present once the record went through build_exercise() or
    normalize_exercise().
    """

    id: ExerciseId
    name: str
    daily_target: int
    decrement_step: int
    remaining: int
    last_applied_date: DayString
    history: dict[DayString, LedgerEntry]
    completion_threshold: float
    weekly_goal: int  # defaults to daily_target * 7
    quick_steps: list[int]
    badges: list[str]
    created_at: NotRequired[ISODatetime]


# =============================================================================
# Derived metrics
# =============================================================================


class WeeklyProgress(TypedDict):
    """Trailing seven day progress against the weekly goal."""

    done: int
    goal: int
    fraction: float  # clamped to [0, 1]


class RangeSummary(TypedDict):
    """Planned/done totals over the most recent N days."""

    days: int
    planned: int
    done: int


class DailyRow(TypedDict):
    """One row of the recent-history view."""

    day: DayString
    planned: int
    done: int
    completed: bool


class MetricsSnapshot(TypedDict):
    """All derived metrics for one exercise at one point in time."""

    current_streak: int
    longest_streak: int
    lifetime_done: int
    personal_best_day: DayString | None
    personal_best_value: int
    weekly_done: int
    weekly_goal: int
    weekly_fraction: float
    perfect_days: int
    today_completed: bool


# =============================================================================
# Quick actions
# =============================================================================


class QuickAction(TypedDict):
    """A parsed quick-action request."""

    action: str  # const.QUICK_ACTION_DECREMENT / const.QUICK_ACTION_ADD_TARGET
    amount: int
    exercise_name: str | None

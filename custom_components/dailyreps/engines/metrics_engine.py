"""Metrics Engine - Derived values computed from the history ledger.

This engine derives everything the dashboard shows from an exercise's sparse
history: per-day completion, current and longest streak, lifetime total,
personal best, weekly goal progress and short range summaries.

Design Principles:
    - Stateless over data: metrics are recomputed from the ledger on demand
    - Cached scans: the two streak scans are memoized in a MetricsCache
    - Explicit invalidation: LedgerEngine mutations clear the cache for the
      exercise in the same call, so a cached streak is never stale

Cache Architecture:
    - current streak keyed by (exercise_id, today)
    - longest streak keyed by exercise_id
    - invalidate(exercise_id) drops both
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import clamp, clamp_threshold, coerce_int

if TYPE_CHECKING:
    from ..type_defs import DailyRow, MetricsSnapshot, RangeSummary, WeeklyProgress


class MetricsCache:
    """Process-local memo for streak scans.

    Entries live only in memory and are always recreatable from the ledger.
    """

    def __init__(self) -> None:
        """Initialize empty caches."""
        self._current: dict[tuple[str, str], int] = {}
        self._longest: dict[str, int] = {}

    def get_current(self, exercise_id: str, today: str) -> int | None:
        """Return the cached current streak, or None on a miss."""
        return self._current.get((exercise_id, today))

    def set_current(self, exercise_id: str, today: str, value: int) -> None:
        """Store a current streak, dropping entries for other days."""
        for key in [k for k in self._current if k[0] == exercise_id and k[1] != today]:
            del self._current[key]
        self._current[(exercise_id, today)] = value

    def get_longest(self, exercise_id: str) -> int | None:
        """Return the cached longest streak, or None on a miss."""
        return self._longest.get(exercise_id)

    def set_longest(self, exercise_id: str, value: int) -> None:
        """Store a longest streak."""
        self._longest[exercise_id] = value

    def invalidate(self, exercise_id: str) -> None:
        """Drop every cached value for `exercise_id`."""
        for key in [k for k in self._current if k[0] == exercise_id]:
            del self._current[key]
        self._longest.pop(exercise_id, None)

    def clear(self) -> None:
        """Drop every cached value."""
        self._current.clear()
        self._longest.clear()

    def __contains__(self, exercise_id: object) -> bool:
        """Return True if anything is cached for `exercise_id`."""
        return exercise_id in self._longest or any(
            key[0] == exercise_id for key in self._current
        )


class MetricsEngine:
    """Derived-metric computations over an exercise's history.

    Example:
        metrics = MetricsEngine(cache)
        metrics.is_completed(exercise, "2026-01-19")
        metrics.current_streak(exercise)
        metrics.snapshot(exercise)
    """

    def __init__(self, cache: MetricsCache | None = None) -> None:
        """Initialize the engine with an optional shared cache."""
        self.cache = cache if cache is not None else MetricsCache()

    # ────────────────────────────────────────────────────────────────
    # Internal readers
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def _history(exercise: dict[str, Any]) -> dict[str, Any]:
        history = exercise.get(const.DATA_EXERCISE_HISTORY)
        return history if isinstance(history, dict) else {}

    @staticmethod
    def _entry_values(entry: Any) -> tuple[int, int]:
        """Return (planned, done) from a raw entry, absent/negative as 0."""
        if not isinstance(entry, dict):
            return 0, 0
        return (
            coerce_int(entry.get(const.DATA_LEDGER_PLANNED), default=0, minimum=0),
            coerce_int(entry.get(const.DATA_LEDGER_DONE), default=0, minimum=0),
        )

    @staticmethod
    def _exercise_id(exercise: dict[str, Any]) -> str:
        return str(exercise.get(const.DATA_EXERCISE_ID, ""))

    # ────────────────────────────────────────────────────────────────
    # Completion
    # ────────────────────────────────────────────────────────────────

    def is_completed(self, exercise: dict[str, Any], day: str) -> bool:
        """Return True if `day` met its quota.

        ``planned > 0 and done >= planned * threshold`` with the threshold
        clamped to [0.5, 1.0]. A day with nothing planned is never completed.
        """
        planned, done = self._entry_values(self._history(exercise).get(day))
        if planned <= 0:
            return False
        threshold = clamp_threshold(
            exercise.get(
                const.DATA_EXERCISE_COMPLETION_THRESHOLD,
                const.DEFAULT_COMPLETION_THRESHOLD,
            )
        )
        return done >= planned * threshold

    def is_perfect(self, exercise: dict[str, Any], day: str) -> bool:
        """Return True if `day` met its full quota regardless of threshold."""
        planned, done = self._entry_values(self._history(exercise).get(day))
        return planned > 0 and done >= planned

    # ────────────────────────────────────────────────────────────────
    # Streaks
    # ────────────────────────────────────────────────────────────────

    def current_streak(self, exercise: dict[str, Any], today: str | None = None) -> int:
        """Return the number of consecutive completed days ending today.

        The scan anchors at today: if today is not yet completed the streak
        is 0, even after a long run ending yesterday. Looks back at most
        365 days.
        """
        today = today or dt_utils.dt_today_iso()
        exercise_id = self._exercise_id(exercise)
        cached = self.cache.get_current(exercise_id, today)
        if cached is not None:
            return cached

        count = 0
        for day in reversed(dt_utils.recent_days(const.STREAK_LOOKBACK_DAYS, today)):
            if not self.is_completed(exercise, day):
                break
            count += 1

        self.cache.set_current(exercise_id, today, count)
        return count

    def longest_streak(self, exercise: dict[str, Any]) -> int:
        """Return the longest run of consecutive completed days in history.

        Keys are scanned in lexical (chronological) order. The run resets
        whenever a day is not completed or the gap to the previous key is not
        exactly one day.
        """
        exercise_id = self._exercise_id(exercise)
        cached = self.cache.get_longest(exercise_id)
        if cached is not None:
            return cached

        best = 0
        run = 0
        previous: str | None = None
        for day in sorted(self._history(exercise)):
            if not self.is_completed(exercise, day):
                run = 0
            elif previous is not None and dt_utils.day_diff(previous, day) == 1:
                run += 1
            else:
                run = 1
            best = max(best, run)
            previous = day

        self.cache.set_longest(exercise_id, best)
        return best

    # ────────────────────────────────────────────────────────────────
    # Totals
    # ────────────────────────────────────────────────────────────────

    def lifetime_done(self, exercise: dict[str, Any]) -> int:
        """Return the sum of logged repetitions across the whole ledger."""
        return sum(
            self._entry_values(entry)[1] for entry in self._history(exercise).values()
        )

    def personal_best(self, exercise: dict[str, Any]) -> tuple[str | None, int]:
        """Return ``(day, done)`` of the best single day.

        Ties keep the earliest day in key order. Returns ``(None, 0)`` when no
        day has any repetitions logged.
        """
        best_day: str | None = None
        best_value = 0
        history = self._history(exercise)
        for day in sorted(history):
            done = self._entry_values(history[day])[1]
            if done > best_value:
                best_day = day
                best_value = done
        return best_day, best_value

    def perfect_days(self, exercise: dict[str, Any]) -> int:
        """Return how many days met their full planned quota."""
        return sum(1 for day in self._history(exercise) if self.is_perfect(exercise, day))

    # ────────────────────────────────────────────────────────────────
    # Windows
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def weekly_goal_for(exercise: dict[str, Any]) -> int:
        """Return the weekly goal, defaulting to ``daily_target * 7`` when unset or <= 0."""
        goal = coerce_int(exercise.get(const.DATA_EXERCISE_WEEKLY_GOAL), default=0)
        if goal > 0:
            return goal
        daily_target = coerce_int(
            exercise.get(const.DATA_EXERCISE_DAILY_TARGET), default=0, minimum=0
        )
        return daily_target * const.DAYS_PER_WEEK

    def range_summary(
        self, exercise: dict[str, Any], days: int, today: str | None = None
    ) -> RangeSummary:
        """Return planned/done totals over the `days` most recent days."""
        history = self._history(exercise)
        planned_total = 0
        done_total = 0
        for day in dt_utils.recent_days(days, today):
            planned, done = self._entry_values(history.get(day))
            planned_total += planned
            done_total += done
        return {"days": days, "planned": planned_total, "done": done_total}

    def weekly_progress(
        self, exercise: dict[str, Any], today: str | None = None
    ) -> WeeklyProgress:
        """Return trailing-7-day done against the weekly goal.

        ``fraction`` is clamped to [0, 1]; it is 0.0 when the goal is 0.
        """
        done = self.range_summary(exercise, const.DAYS_PER_WEEK, today)["done"]
        goal = self.weekly_goal_for(exercise)
        fraction = clamp(done / goal, 0.0, 1.0) if goal > 0 else 0.0
        return {"done": done, "goal": goal, "fraction": fraction}

    def daily_rows(
        self, exercise: dict[str, Any], days: int, today: str | None = None
    ) -> list[DailyRow]:
        """Return one row per day for the `days` most recent days, oldest first."""
        history = self._history(exercise)
        rows: list[DailyRow] = []
        for day in dt_utils.recent_days(days, today):
            planned, done = self._entry_values(history.get(day))
            rows.append(
                {
                    "day": day,
                    "planned": planned,
                    "done": done,
                    "completed": self.is_completed(exercise, day),
                }
            )
        return rows

    # ────────────────────────────────────────────────────────────────
    # Snapshot
    # ────────────────────────────────────────────────────────────────

    def snapshot(
        self, exercise: dict[str, Any], today: str | None = None
    ) -> MetricsSnapshot:
        """Return every derived metric for `exercise` in one dict."""
        today = today or dt_utils.dt_today_iso()
        best_day, best_value = self.personal_best(exercise)
        weekly = self.weekly_progress(exercise, today)
        return {
            const.METRIC_CURRENT_STREAK: self.current_streak(exercise, today),
            const.METRIC_LONGEST_STREAK: self.longest_streak(exercise),
            const.METRIC_LIFETIME_DONE: self.lifetime_done(exercise),
            const.METRIC_PERSONAL_BEST_DAY: best_day,
            const.METRIC_PERSONAL_BEST_VALUE: best_value,
            const.METRIC_WEEKLY_DONE: weekly["done"],
            const.METRIC_WEEKLY_GOAL: weekly["goal"],
            const.METRIC_WEEKLY_FRACTION: weekly["fraction"],
            const.METRIC_PERFECT_DAYS: self.perfect_days(exercise),
            const.METRIC_TODAY_COMPLETED: self.is_completed(exercise, today),
        }  # type: ignore[return-value]

"""Rollover Engine - Catch an exercise up to the current UTC day.

There is no background scheduler. Rollover is applied lazily at the start of
every session and before every counter read or write, and it is idempotent
within a UTC day: a second call on the same day is a no-op.

For N elapsed days since ``last_applied_date`` the engine:
    1. adds ``daily_target`` to the planned quota of each of the N days
    2. adds ``daily_target * N`` to ``remaining``
    3. moves ``last_applied_date`` to today
    4. prunes history past the retention horizon
    5. invalidates cached streaks
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import coerce_int

if TYPE_CHECKING:
    from .ledger_engine import LedgerEngine


class RolloverEngine:
    """Apply missed-day quotas to an exercise exactly once per elapsed day."""

    def __init__(self, ledger: LedgerEngine) -> None:
        """Initialize with the ledger engine used for planned-quota writes."""
        self._ledger = ledger

    def apply_rollover(
        self, exercise: dict[str, Any], today: str | None = None
    ) -> bool:
        """Advance `exercise` to `today`.

        An exercise without ``last_applied_date`` (fresh record) is left
        untouched; the creation flow seeds today's entry itself.

        Args:
            exercise: Exercise dict, mutated in place.
            today: Day-string to treat as today. Defaults to the UTC day.

        Returns:
            True if anything changed ("changed"), False otherwise ("unchanged").
        """
        today = today or dt_utils.dt_today_iso()
        last_applied = exercise.get(const.DATA_EXERCISE_LAST_APPLIED_DATE)
        days_passed = dt_utils.day_diff(last_applied, today)
        if days_passed <= 0:
            return False

        daily_target = coerce_int(
            exercise.get(const.DATA_EXERCISE_DAILY_TARGET), default=0, minimum=0
        )
        for offset in range(1, days_passed + 1):
            self._ledger.add_planned(
                exercise, dt_utils.add_days(last_applied, offset), daily_target
            )

        remaining = coerce_int(
            exercise.get(const.DATA_EXERCISE_REMAINING), default=0, minimum=0
        )
        exercise[const.DATA_EXERCISE_REMAINING] = remaining + daily_target * days_passed
        exercise[const.DATA_EXERCISE_LAST_APPLIED_DATE] = today

        self._ledger.prune(exercise, reference_date=today)
        self._ledger.invalidate(exercise)

        const.LOGGER.debug(
            "DEBUG: Rollover applied %s day(s) to exercise '%s' (remaining=%s)",
            days_passed,
            exercise.get(const.DATA_EXERCISE_NAME),
            exercise[const.DATA_EXERCISE_REMAINING],
        )
        return True

"""Ledger Engine - Sparse date-keyed history for one exercise.

Each exercise carries ``history: {day: {"planned": int, "done": int}}``.
Keys are zero-padded ``YYYY-MM-DD`` UTC day-strings, so lexical order is
chronological order and range queries need no parsing.

Design Principles:
    - Stateless over data: every method operates on the exercise dict passed in
    - Add-only: planned/done only grow through this engine, amounts clamp to >= 0
    - Cache coupling: each mutating primitive invalidates the exercise's
      derived-metric cache itself, so callers can not forget to
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..utils import dt_utils
from ..utils.math_utils import coerce_int

if TYPE_CHECKING:
    from ..type_defs import LedgerEntry
    from .metrics_engine import MetricsCache


class LedgerEngine:
    """Mutation primitives and pruning for the history ledger.

    Malformed day keys are not rejected: they are treated as opaque lexical
    keys. Callers inside the integration only ever pass well-formed keys.

    Example:
        ledger = LedgerEngine(cache)
        ledger.add_planned(exercise, "2026-01-19", 50)
        ledger.add_done(exercise, "2026-01-19", 20)
        ledger.prune(exercise)
    """

    def __init__(
        self,
        cache: MetricsCache | None = None,
        horizon_days: int = const.DEFAULT_RETENTION_DAYS,
    ) -> None:
        """Initialize the ledger engine.

        Args:
            cache: Derived-metric cache to invalidate on mutation (optional).
            horizon_days: Default retention horizon used by prune().
        """
        self._cache = cache
        self.horizon_days = horizon_days

    # ────────────────────────────────────────────────────────────────
    # Read helpers
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def get_history(exercise: dict[str, Any]) -> dict[str, Any]:
        """Return the exercise's history mapping, replacing a malformed one."""
        history = exercise.get(const.DATA_EXERCISE_HISTORY)
        if not isinstance(history, dict):
            history = {}
            exercise[const.DATA_EXERCISE_HISTORY] = history
        return history

    @staticmethod
    def read_entry(exercise: dict[str, Any], day: str) -> LedgerEntry:
        """Return a sanitized copy of the entry for `day` without inserting it.

        Absent entries and absent/negative fields read as zero.
        """
        history = exercise.get(const.DATA_EXERCISE_HISTORY)
        raw = history.get(day) if isinstance(history, dict) else None
        if not isinstance(raw, dict):
            return {const.DATA_LEDGER_PLANNED: 0, const.DATA_LEDGER_DONE: 0}
        return {
            const.DATA_LEDGER_PLANNED: coerce_int(
                raw.get(const.DATA_LEDGER_PLANNED), default=0, minimum=0
            ),
            const.DATA_LEDGER_DONE: coerce_int(
                raw.get(const.DATA_LEDGER_DONE), default=0, minimum=0
            ),
        }

    # ────────────────────────────────────────────────────────────────
    # Mutation primitives
    # ────────────────────────────────────────────────────────────────

    def ensure_entry(self, exercise: dict[str, Any], day: str) -> LedgerEntry:
        """Return the live entry for `day`, creating ``{planned: 0, done: 0}`` if absent.

        Existing entries are sanitized in place so both fields are
        non-negative integers.
        """
        history = self.get_history(exercise)
        entry = history.get(day)
        if not isinstance(entry, dict):
            entry = {const.DATA_LEDGER_PLANNED: 0, const.DATA_LEDGER_DONE: 0}
            history[day] = entry
        else:
            entry[const.DATA_LEDGER_PLANNED] = coerce_int(
                entry.get(const.DATA_LEDGER_PLANNED), default=0, minimum=0
            )
            entry[const.DATA_LEDGER_DONE] = coerce_int(
                entry.get(const.DATA_LEDGER_DONE), default=0, minimum=0
            )
        return entry  # type: ignore[return-value]

    def add_planned(
        self, exercise: dict[str, Any], day: str, amount: Any
    ) -> LedgerEntry:
        """Add `amount` (clamped to >= 0) to the planned quota of `day`."""
        return self._add(exercise, day, const.DATA_LEDGER_PLANNED, amount)

    def add_done(self, exercise: dict[str, Any], day: str, amount: Any) -> LedgerEntry:
        """Add `amount` (clamped to >= 0) to the logged repetitions of `day`."""
        return self._add(exercise, day, const.DATA_LEDGER_DONE, amount)

    def _add(
        self, exercise: dict[str, Any], day: str, field: str, amount: Any
    ) -> LedgerEntry:
        entry = self.ensure_entry(exercise, day)
        delta = coerce_int(amount, default=0, minimum=0)
        if delta:
            entry[field] += delta  # type: ignore[literal-required]
            self.invalidate(exercise)
        return entry

    # ────────────────────────────────────────────────────────────────
    # Retention
    # ────────────────────────────────────────────────────────────────

    def prune(
        self,
        exercise: dict[str, Any],
        horizon_days: int | None = None,
        reference_date: str | None = None,
    ) -> int:
        """Remove history keys strictly older than ``today - horizon_days``.

        Deterministic and idempotent; safe to call on every rollover.

        Args:
            exercise: Exercise whose history is pruned in place.
            horizon_days: Retention horizon. Defaults to the engine's horizon.
            reference_date: Day-string used as "today". Defaults to the UTC day.

        Returns:
            Number of entries removed.
        """
        horizon = self.horizon_days if horizon_days is None else horizon_days
        today = reference_date or dt_utils.dt_today_iso()
        cutoff = dt_utils.add_days(today, -horizon)

        history = self.get_history(exercise)
        stale = [day for day in history if day < cutoff]
        for day in stale:
            del history[day]

        if stale:
            const.LOGGER.debug(
                "DEBUG: Pruned %s ledger entries older than %s for exercise '%s'",
                len(stale),
                cutoff,
                exercise.get(const.DATA_EXERCISE_NAME),
            )
            self.invalidate(exercise)
        return len(stale)

    # ────────────────────────────────────────────────────────────────
    # Cache coupling
    # ────────────────────────────────────────────────────────────────

    def invalidate(self, exercise: dict[str, Any]) -> None:
        """Drop cached derived metrics for `exercise`."""
        if self._cache is not None:
            self._cache.invalidate(exercise.get(const.DATA_EXERCISE_ID, ""))

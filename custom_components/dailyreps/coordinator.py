# File: coordinator.py
"""Coordinator for the Daily Reps integration.

Owns the in-memory exercise collection and is the only writer of it. Every
entry point that reads or writes an exercise's counters first catches the
exercise up to today (rollover), then mutates the ledger, then persists.

There is no polling interval: rollover is lazy and happens at the start of a
session (first refresh, manual refresh) and before every counter access.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import functools
from typing import Any, Concatenate, ParamSpec, TypeVar

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from . import data_builders as db
from .engines import (
    AchievementEngine,
    LedgerEngine,
    MetricsCache,
    MetricsEngine,
    RolloverEngine,
)
from .helpers import quick_action_helpers as qah
from .storage_manager import DailyRepsStorageManager
from .type_defs import ExerciseData, MetricsSnapshot
from .utils import dt_utils
from .utils.math_utils import calculate_percentage, coerce_int

_P = ParamSpec("_P")
_R = TypeVar("_R")


def with_rollover(
    func: Callable[Concatenate[DailyRepsCoordinator, ExerciseData, _P], Awaitable[_R]],
) -> Callable[Concatenate[DailyRepsCoordinator, str, _P], Awaitable[_R]]:
    """Catch the addressed exercise up to today before running `func`.

    The wrapped method is called with the exercise dict in place of the
    exercise id. If rollover changed the exercise and `func` did not persist
    it, the collection is saved afterwards.
    """

    @functools.wraps(func)
    async def wrapper(
        self: DailyRepsCoordinator, exercise_id: str, *args: _P.args, **kwargs: _P.kwargs
    ) -> _R:
        exercise = self.get_exercise(exercise_id)
        if self.rollover_engine.apply_rollover(exercise, dt_utils.dt_today_iso()):
            self._dirty = True
        result = await func(self, exercise, *args, **kwargs)
        if self._dirty:
            await self._async_commit()
        return result

    return wrapper


class DailyRepsCoordinator(DataUpdateCoordinator[list[ExerciseData]]):
    """Coordinator for the Daily Reps integration.

    Manages exercises by id; services resolve names to ids first.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        storage_manager: DailyRepsStorageManager,
    ) -> None:
        """Initialize the DailyRepsCoordinator."""
        super().__init__(
            hass,
            const.LOGGER,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=None,
        )
        self.config_entry = config_entry
        self.storage_manager = storage_manager
        self._exercises: list[ExerciseData] = []
        self._dirty = False

        retention_days = config_entry.options.get(
            const.CONF_RETENTION_DAYS, const.DEFAULT_RETENTION_DAYS
        )
        self.metrics_cache = MetricsCache()
        self.ledger_engine = LedgerEngine(self.metrics_cache, retention_days)
        self.rollover_engine = RolloverEngine(self.ledger_engine)
        self.metrics_engine = MetricsEngine(self.metrics_cache)

    # -------------------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------------------

    async def async_config_entry_first_refresh(self) -> None:
        """Load exercises from storage, then run the first session refresh."""
        self._exercises = await self.storage_manager.async_load_exercises()
        const.LOGGER.info(
            "INFO: Loaded %s exercise(s) from storage", len(self._exercises)
        )
        await super().async_config_entry_first_refresh()

    async def _async_update_data(self) -> list[ExerciseData]:
        """Start a session: roll every exercise over to today."""
        try:
            if self._rollover_all():
                await self.storage_manager.async_save_exercises(self._exercises)
            return self._exercises
        except Exception as err:  # pylint: disable=broad-exception-caught
            raise UpdateFailed(f"Error updating Daily Reps data: {err}") from err

    def _rollover_all(self) -> bool:
        """Roll every exercise over to today; return True if any changed."""
        today = dt_utils.dt_today_iso()
        changed = False
        for exercise in self._exercises:
            if self.rollover_engine.apply_rollover(exercise, today):
                changed = True
        return changed

    async def _async_commit(self) -> None:
        """Persist the collection and notify listeners."""
        self._dirty = False
        await self.storage_manager.async_save_exercises(self._exercises)
        self.async_set_updated_data(self._exercises)

    # -------------------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------------------

    @property
    def exercises(self) -> list[ExerciseData]:
        """Return the live exercise collection (read-only by convention)."""
        return self._exercises

    def get_exercise(self, exercise_id: str) -> ExerciseData:
        """Return the exercise with `exercise_id`.

        Raises:
            HomeAssistantError: If no exercise has that id.
        """
        for exercise in self._exercises:
            if exercise[const.DATA_EXERCISE_ID] == exercise_id:
                return exercise
        raise HomeAssistantError(const.ERROR_EXERCISE_NOT_FOUND_FMT.format(exercise_id))

    def find_exercise_by_name(self, name: str) -> ExerciseData | None:
        """Return the exercise whose trimmed name matches case-insensitively."""
        wanted = str(name).strip().casefold()
        for exercise in self._exercises:
            if exercise[const.DATA_EXERCISE_NAME].strip().casefold() == wanted:
                return exercise
        return None

    # -------------------------------------------------------------------------------------
    # Exercise CRUD
    # -------------------------------------------------------------------------------------

    async def async_create_exercise(self, user_input: dict[str, Any]) -> ExerciseData:
        """Create an exercise seeded with today's quota.

        Raises:
            EntityValidationError: On invalid name, target or step.
        """
        exercise = db.build_exercise(user_input, today=dt_utils.dt_today_iso())
        self._exercises.append(exercise)
        const.LOGGER.info(
            "INFO: Created exercise '%s' (daily target %s)",
            exercise[const.DATA_EXERCISE_NAME],
            exercise[const.DATA_EXERCISE_DAILY_TARGET],
        )
        await self._async_commit()
        return exercise

    @with_rollover
    async def async_update_exercise(
        self, exercise: ExerciseData, user_input: dict[str, Any]
    ) -> ExerciseData:
        """Update exercise settings; counters and history are preserved.

        Raises:
            EntityValidationError: On invalid name, target or step.
        """
        updated = db.build_exercise(user_input, existing=exercise)
        threshold_changed = (
            updated[const.DATA_EXERCISE_COMPLETION_THRESHOLD]
            != exercise[const.DATA_EXERCISE_COMPLETION_THRESHOLD]
        )
        exercise.update(updated)
        if threshold_changed:
            self.metrics_cache.invalidate(exercise[const.DATA_EXERCISE_ID])
        const.LOGGER.debug(
            "DEBUG: Updated exercise '%s'", exercise[const.DATA_EXERCISE_NAME]
        )
        await self._async_commit()
        return exercise

    async def async_delete_exercise(self, exercise_id: str) -> None:
        """Remove an exercise and its cached metrics."""
        exercise = self.get_exercise(exercise_id)
        self._exercises.remove(exercise)
        self.metrics_cache.invalidate(exercise_id)
        const.LOGGER.info(
            "INFO: Deleted exercise '%s'", exercise[const.DATA_EXERCISE_NAME]
        )
        await self._async_commit()

    # -------------------------------------------------------------------------------------
    # Logging actions
    # -------------------------------------------------------------------------------------

    @with_rollover
    async def async_log_done(self, exercise: ExerciseData, amount: int) -> ExerciseData:
        """Log `amount` repetitions for today.

        ``remaining`` drops by `amount` but never below 0; today's ``done``
        grows by the full amount. Newly earned badges are appended.
        """
        delta = coerce_int(amount, default=0, minimum=0)
        today = dt_utils.dt_today_iso()
        remaining = coerce_int(
            exercise.get(const.DATA_EXERCISE_REMAINING), default=0, minimum=0
        )
        exercise[const.DATA_EXERCISE_REMAINING] = max(0, remaining - delta)
        self.ledger_engine.add_done(exercise, today, delta)

        AchievementEngine.evaluate(exercise, self.metrics_engine.snapshot(exercise, today))
        const.LOGGER.debug(
            "DEBUG: Logged %s rep(s) for '%s' (remaining=%s)",
            delta,
            exercise[const.DATA_EXERCISE_NAME],
            exercise[const.DATA_EXERCISE_REMAINING],
        )
        await self._async_commit()
        return exercise

    @with_rollover
    async def async_add_target(self, exercise: ExerciseData, times: int = 1) -> ExerciseData:
        """Add `times` daily targets to ``remaining`` and today's planned quota."""
        multiplier = coerce_int(times, default=1, minimum=1)
        amount = exercise[const.DATA_EXERCISE_DAILY_TARGET] * multiplier
        exercise[const.DATA_EXERCISE_REMAINING] = (
            coerce_int(exercise.get(const.DATA_EXERCISE_REMAINING), default=0, minimum=0)
            + amount
        )
        self.ledger_engine.add_planned(exercise, dt_utils.dt_today_iso(), amount)
        const.LOGGER.debug(
            "DEBUG: Added %s to target of '%s' (remaining=%s)",
            amount,
            exercise[const.DATA_EXERCISE_NAME],
            exercise[const.DATA_EXERCISE_REMAINING],
        )
        await self._async_commit()
        return exercise

    @with_rollover
    async def async_get_metrics(self, exercise: ExerciseData) -> dict[str, Any]:
        """Return the metrics snapshot plus the short history views."""
        today = dt_utils.dt_today_iso()
        snapshot: MetricsSnapshot = self.metrics_engine.snapshot(exercise, today)
        today_entry = self.ledger_engine.read_entry(exercise, today)
        return {
            const.DATA_EXERCISE_NAME: exercise[const.DATA_EXERCISE_NAME],
            const.DATA_EXERCISE_REMAINING: exercise[const.DATA_EXERCISE_REMAINING],
            const.DATA_EXERCISE_BADGES: list(exercise[const.DATA_EXERCISE_BADGES]),
            **snapshot,
            "weekly_percent": calculate_percentage(
                snapshot[const.METRIC_WEEKLY_DONE], snapshot[const.METRIC_WEEKLY_GOAL]
            ),
            "today_percent": calculate_percentage(
                today_entry[const.DATA_LEDGER_DONE],
                today_entry[const.DATA_LEDGER_PLANNED],
            ),
            "summary_7d": self.metrics_engine.range_summary(
                exercise, const.SUMMARY_SHORT_DAYS, today
            ),
            "summary_30d": self.metrics_engine.range_summary(
                exercise, const.SUMMARY_LONG_DAYS, today
            ),
            "recent_days": self.metrics_engine.daily_rows(
                exercise, const.HISTORY_ROWS_DAYS, today
            ),
        }

    # -------------------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------------------

    async def async_export_exercises(self) -> list[ExerciseData]:
        """Return a deep copy of every exercise in storage format.

        Every exercise is caught up to today first, and the collection is
        saved if that changed anything.
        """
        if self._rollover_all():
            await self._async_commit()
        return db.export_exercises(self._exercises)

    async def async_import_exercises(self, payload: Any) -> int:
        """Replace the collection with an imported batch.

        The collection is swapped only after the whole payload normalized, so
        a rejected import leaves current data untouched.

        Raises:
            ImportFormatError: If the payload is not a JSON array.
        """
        today = dt_utils.dt_today_iso()
        imported = db.normalize_exercise_list(payload, today)
        for exercise in imported:
            self.rollover_engine.apply_rollover(exercise, today)

        self._exercises = imported
        self.metrics_cache.clear()
        const.LOGGER.info("INFO: Imported %s exercise(s)", len(imported))
        await self._async_commit()
        return len(imported)

    # -------------------------------------------------------------------------------------
    # Quick actions
    # -------------------------------------------------------------------------------------

    async def async_apply_quick_action(
        self, query: dict[str, Any] | str
    ) -> dict[str, Any]:
        """Apply a URL quick action and return the query it should be replaced with.

        Returns:
            ``{"applied": bool, "exercise_name": str | None, "action": str | None,
            "amount": int, "query": <query without dec/add/exercise>}``
        """
        stripped = qah.strip_quick_action_params(query)
        action = qah.parse_quick_action(query)
        result: dict[str, Any] = {
            "applied": False,
            "exercise_name": None,
            "action": None,
            "amount": 0,
            const.FIELD_QUERY: stripped,
        }
        if action is None:
            return result

        exercise = qah.resolve_exercise(self._exercises, action["exercise_name"])
        if exercise is None:
            const.LOGGER.warning(
                "WARNING: Quick action ignored: %s", const.ERROR_NO_EXERCISES
            )
            return result

        exercise_id = exercise[const.DATA_EXERCISE_ID]
        if action["action"] == const.QUICK_ACTION_DECREMENT:
            await self.async_log_done(exercise_id, action["amount"])
        else:
            await self.async_add_target(exercise_id, action["amount"])

        result.update(
            applied=True,
            exercise_name=exercise[const.DATA_EXERCISE_NAME],
            action=action["action"],
            amount=action["amount"],
        )
        return result

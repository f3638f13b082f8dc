# File: storage_manager.py
"""Handles persistent data storage for the Daily Reps integration.

Uses Home Assistant's Storage helper to save and load the exercise collection
as one blob under a single key, so counters and history survive restarts:

    {"meta": {"schema_version": 1}, "exercises": [ ... ]}

Loading never raises: a missing or corrupt blob yields an empty collection.
Saving never raises either: failures are logged and the in-memory state the
coordinator holds stays untouched.
"""

from __future__ import annotations

from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from . import const
from .data_builders import normalize_exercise
from .type_defs import ExerciseData
from .utils import dt_utils


class DailyRepsStorageManager:
    """Loads and saves the exercise collection through Home Assistant's Store."""

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the storage manager.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).

        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)

    @staticmethod
    def _build_blob(exercises: list[ExerciseData]) -> dict[str, Any]:
        return {
            const.DATA_META: {const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION},
            const.DATA_EXERCISES: exercises,
        }

    async def async_load_exercises(self) -> list[ExerciseData]:
        """Load the exercise collection.

        Returns:
            Normalized exercises; an empty list when nothing is stored or the
            stored blob is unusable.
        """
        const.LOGGER.debug("DEBUG: DailyRepsStorageManager: Loading data from storage")
        stored = await self._store.async_load()

        if stored is None:
            const.LOGGER.info("INFO: No existing storage found. Starting empty")
            return []

        if not isinstance(stored, dict):
            const.LOGGER.warning(
                "WARNING: Ignoring corrupt storage blob of type %s",
                type(stored).__name__,
            )
            return []

        raw_exercises = stored.get(const.DATA_EXERCISES)
        if not isinstance(raw_exercises, list):
            const.LOGGER.warning(
                "WARNING: Stored '%s' is not a list, starting with no exercises",
                const.DATA_EXERCISES,
            )
            return []

        today = dt_utils.dt_today_iso()
        exercises: list[ExerciseData] = []
        for index, record in enumerate(raw_exercises):
            if not isinstance(record, dict):
                const.LOGGER.warning(
                    "WARNING: Dropping stored exercise #%s: expected object, got %s",
                    index,
                    type(record).__name__,
                )
                continue
            exercises.append(normalize_exercise(record, today))

        const.LOGGER.debug(
            "DEBUG: Loaded %s exercise(s) from storage (schema version %s)",
            len(exercises),
            (stored.get(const.DATA_META) or {}).get(const.DATA_META_SCHEMA_VERSION),
        )
        return exercises

    async def async_save_exercises(self, exercises: list[ExerciseData]) -> bool:
        """Save the exercise collection to storage asynchronously.

        Returns:
            True on success, False if the write failed. Errors are logged and
            never raised:
            OSError: Logged when file system issues prevent saving.
            TypeError: Logged when data contains non-serializable types.
            ValueError: Logged when data is invalid for JSON serialization.
        """
        try:
            await self._store.async_save(self._build_blob(exercises))
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
            return False
        except TypeError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s. "
                "Data contains types that cannot be converted to JSON",
                err,
            )
            return False
        except ValueError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to invalid data format: %s. "
                "Data structure may be corrupted",
                err,
            )
            return False

        const.LOGGER.debug("DEBUG: Saved %s exercise(s) to storage", len(exercises))
        return True

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )

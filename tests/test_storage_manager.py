"""Tests for DailyRepsStorageManager.

Tests cover:
- Loading missing, corrupt and partially malformed blobs
- Saving the versioned blob
- Save failures logged without raising
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from custom_components.dailyreps import const
from custom_components.dailyreps.storage_manager import DailyRepsStorageManager
from tests.helpers import create_mock_exercise_data


@pytest.fixture
def mock_store() -> Iterator[MagicMock]:
    """Patch the Store class used by the storage manager."""
    with patch("custom_components.dailyreps.storage_manager.Store") as store_cls:
        store = store_cls.return_value
        store.async_load = AsyncMock(return_value=None)
        store.async_save = AsyncMock()
        store.async_remove = AsyncMock()
        yield store


@pytest.fixture
def storage_manager(mock_store: MagicMock) -> DailyRepsStorageManager:
    """Return a storage manager backed by the mocked Store."""
    # pylint: disable=unused-argument
    return DailyRepsStorageManager(MagicMock(), const.STORAGE_KEY)


class TestLoad:
    """Tests for async_load_exercises."""

    async def test_missing_storage(
        self, storage_manager: DailyRepsStorageManager
    ) -> None:
        """No stored blob yields an empty collection."""
        assert await storage_manager.async_load_exercises() == []

    @pytest.mark.parametrize(
        "blob",
        [
            ["not", "a", "dict"],
            "garbage",
            {const.DATA_EXERCISES: "not a list"},
            {const.DATA_META: {}},
        ],
    )
    async def test_corrupt_blob(
        self,
        storage_manager: DailyRepsStorageManager,
        mock_store: MagicMock,
        blob: Any,
    ) -> None:
        """Unusable blobs yield an empty collection without raising."""
        mock_store.async_load.return_value = blob

        assert await storage_manager.async_load_exercises() == []

    async def test_malformed_entries(
        self,
        storage_manager: DailyRepsStorageManager,
        mock_store: MagicMock,
    ) -> None:
        """Non-object entries are dropped, objects get defaults."""
        mock_store.async_load.return_value = {
            const.DATA_META: {const.DATA_META_SCHEMA_VERSION: 1},
            const.DATA_EXERCISES: [
                42,
                {"name": "Plank", "remaining": -5},
                None,
            ],
        }

        exercises = await storage_manager.async_load_exercises()

        assert len(exercises) == 1
        assert exercises[0]["name"] == "Plank"
        assert exercises[0]["remaining"] == 0
        assert exercises[0]["history"] == {}

    async def test_valid_blob(
        self,
        storage_manager: DailyRepsStorageManager,
        mock_store: MagicMock,
    ) -> None:
        """Valid records load unchanged."""
        record = create_mock_exercise_data(
            name="Push-ups",
            daily_target=50,
            remaining=20,
            last_applied_date="2026-01-19",
            history={"2026-01-19": {"planned": 50, "done": 30}},
            weekly_goal=350,
        )
        mock_store.async_load.return_value = {
            const.DATA_META: {const.DATA_META_SCHEMA_VERSION: 1},
            const.DATA_EXERCISES: [record],
        }

        exercises = await storage_manager.async_load_exercises()

        assert exercises == [record]


class TestSave:
    """Tests for async_save_exercises."""

    async def test_saves_versioned_blob(
        self,
        storage_manager: DailyRepsStorageManager,
        mock_store: MagicMock,
    ) -> None:
        """The blob carries the schema version and the exercises."""
        exercises = [create_mock_exercise_data()]

        assert await storage_manager.async_save_exercises(exercises) is True

        mock_store.async_save.assert_awaited_once_with(
            {
                const.DATA_META: {
                    const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION
                },
                const.DATA_EXERCISES: exercises,
            }
        )

    @pytest.mark.parametrize("error", [OSError("disk full"), TypeError("x"), ValueError("y")])
    async def test_failure_is_logged(
        self,
        storage_manager: DailyRepsStorageManager,
        mock_store: MagicMock,
        error: Exception,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Write errors return False and are logged, never raised."""
        mock_store.async_save.side_effect = error

        assert await storage_manager.async_save_exercises([]) is False
        assert "Failed to save storage" in caplog.text

    async def test_delete_storage(
        self,
        storage_manager: DailyRepsStorageManager,
        mock_store: MagicMock,
    ) -> None:
        """Deleting removes the file through the Store API."""
        await storage_manager.async_delete_storage()

        mock_store.async_remove.assert_awaited_once()

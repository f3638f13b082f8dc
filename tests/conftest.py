"""Shared fixtures for Daily Reps tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.dailyreps.const import (
    CONF_RETENTION_DAYS,
    COORDINATOR,
    DAILYREPS_TITLE,
    DATA_EXERCISES,
    DATA_META,
    DATA_META_SCHEMA_VERSION,
    DEFAULT_RETENTION_DAYS,
    DOMAIN,
    SCHEMA_VERSION,
)
from custom_components.dailyreps.coordinator import DailyRepsCoordinator
from custom_components.dailyreps.utils import dt_utils
from tests.helpers import create_mock_exercise_data

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry."""
    return MockConfigEntry(
        domain=DOMAIN,
        title=DAILYREPS_TITLE,
        data={},
        options={CONF_RETENTION_DAYS: DEFAULT_RETENTION_DAYS},
        entry_id="test_entry_id",
        unique_id="test_unique_id",
    )


@pytest.fixture
def mock_exercises() -> list[dict[str, Any]]:
    """Return two exercises already applied up to today."""
    today = dt_utils.dt_today_iso()
    return [
        create_mock_exercise_data(
            name="Push-ups",
            daily_target=50,
            remaining=50,
            last_applied_date=today,
            history={today: {"planned": 50, "done": 0}},
        ),
        create_mock_exercise_data(
            name="Squats",
            daily_target=30,
            remaining=30,
            last_applied_date=today,
            history={today: {"planned": 30, "done": 0}},
        ),
    ]


@pytest.fixture
def mock_storage_data(
    mock_exercises: list[dict[str, Any]],  # pylint: disable=redefined-outer-name
) -> dict[str, Any]:
    """Return mock storage data structure."""
    return {
        DATA_META: {DATA_META_SCHEMA_VERSION: SCHEMA_VERSION},
        DATA_EXERCISES: mock_exercises,
    }


@pytest.fixture
async def init_integration(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,  # pylint: disable=redefined-outer-name
    mock_storage_data: dict[str, Any],  # pylint: disable=redefined-outer-name
) -> MockConfigEntry:
    """Set up the Daily Reps integration for testing with mocked storage."""
    mock_config_entry.add_to_hass(hass)

    # Mock the Store's async_load to return our test data
    with patch(
        "homeassistant.helpers.storage.Store.async_load",
        return_value=mock_storage_data,
    ):
        assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
        await hass.async_block_till_done()

    return mock_config_entry


@pytest.fixture
def coordinator(
    hass: HomeAssistant,
    init_integration: MockConfigEntry,  # pylint: disable=redefined-outer-name
) -> DailyRepsCoordinator:
    """Return the coordinator of the set-up entry."""
    return hass.data[DOMAIN][init_integration.entry_id][COORDINATOR]


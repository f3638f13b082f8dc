# File: services.py
"""Defines custom services for the Daily Reps integration.

These services are the logging action surface: dashboards, scripts,
automations and phone shortcuts use them to manage exercises, log
repetitions and read metrics. Exercises are addressed by name.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from .coordinator import DailyRepsCoordinator
from .data_builders import EntityValidationError, ImportFormatError

# --- Service Schemas ---
CREATE_EXERCISE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_EXERCISE_NAME): cv.string,
        vol.Required(const.FIELD_DAILY_TARGET): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(const.FIELD_DECREMENT_STEP): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(const.FIELD_COMPLETION_THRESHOLD): vol.All(
            vol.Coerce(float),
            vol.Range(
                min=const.MIN_COMPLETION_THRESHOLD, max=const.MAX_COMPLETION_THRESHOLD
            ),
        ),
        vol.Optional(const.FIELD_WEEKLY_GOAL): cv.positive_int,
        vol.Optional(const.FIELD_QUICK_STEPS): vol.Any(
            cv.string, vol.All(cv.ensure_list, [cv.positive_int])
        ),
    }
)

UPDATE_EXERCISE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_EXERCISE_NAME): cv.string,
        vol.Optional(const.FIELD_NEW_NAME): cv.string,
        vol.Optional(const.FIELD_DAILY_TARGET): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(const.FIELD_DECREMENT_STEP): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
        vol.Optional(const.FIELD_COMPLETION_THRESHOLD): vol.All(
            vol.Coerce(float),
            vol.Range(
                min=const.MIN_COMPLETION_THRESHOLD, max=const.MAX_COMPLETION_THRESHOLD
            ),
        ),
        vol.Optional(const.FIELD_WEEKLY_GOAL): cv.positive_int,
        vol.Optional(const.FIELD_QUICK_STEPS): vol.Any(
            cv.string, vol.All(cv.ensure_list, [cv.positive_int])
        ),
    }
)

DELETE_EXERCISE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_EXERCISE_NAME): cv.string,
    }
)

LOG_DONE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_EXERCISE_NAME): cv.string,
        vol.Required(const.FIELD_AMOUNT): vol.All(vol.Coerce(int), vol.Range(min=1)),
    }
)

ADD_TARGET_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_EXERCISE_NAME): cv.string,
        vol.Optional(const.FIELD_TIMES, default=1): vol.All(
            vol.Coerce(int), vol.Range(min=1)
        ),
    }
)

IMPORT_EXERCISES_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_PAYLOAD): vol.Any(cv.string, list),
    }
)

EXPORT_EXERCISES_SCHEMA = vol.Schema({})

GET_METRICS_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_EXERCISE_NAME): cv.string,
    }
)

QUICK_ACTION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_QUERY): vol.Any(cv.string, dict),
    }
)

# Service field → storage key, for the optional exercise settings
_SETTING_FIELDS: dict[str, str] = {
    const.FIELD_DAILY_TARGET: const.DATA_EXERCISE_DAILY_TARGET,
    const.FIELD_DECREMENT_STEP: const.DATA_EXERCISE_DECREMENT_STEP,
    const.FIELD_COMPLETION_THRESHOLD: const.DATA_EXERCISE_COMPLETION_THRESHOLD,
    const.FIELD_WEEKLY_GOAL: const.DATA_EXERCISE_WEEKLY_GOAL,
    const.FIELD_QUICK_STEPS: const.DATA_EXERCISE_QUICK_STEPS,
}


def _get_coordinator(hass: HomeAssistant) -> DailyRepsCoordinator:
    """Return the coordinator of the loaded entry.

    Raises:
        HomeAssistantError: If no Daily Reps entry is loaded.
    """
    entries = hass.data.get(const.DOMAIN, {})
    for entry_data in entries.values():
        return entry_data[const.COORDINATOR]
    const.LOGGER.warning("WARNING: %s", const.MSG_NO_ENTRY_FOUND)
    raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)


def _get_exercise_id(coordinator: DailyRepsCoordinator, name: str) -> str:
    """Map an exercise name to its id.

    Raises:
        HomeAssistantError: If no exercise has that name.
    """
    exercise = coordinator.find_exercise_by_name(name)
    if exercise is None:
        const.LOGGER.warning("WARNING: Exercise '%s' not found", name)
        raise HomeAssistantError(const.ERROR_EXERCISE_NOT_FOUND_FMT.format(name))
    return exercise[const.DATA_EXERCISE_ID]


def _settings_from_call(data: dict[str, Any]) -> dict[str, Any]:
    return {
        data_key: data[field]
        for field, data_key in _SETTING_FIELDS.items()
        if field in data
    }


def async_setup_services(hass: HomeAssistant) -> None:
    """Register Daily Reps services."""

    async def handle_create_exercise(call: ServiceCall) -> None:
        """Handle creating an exercise."""
        coordinator = _get_coordinator(hass)
        name = call.data[const.FIELD_EXERCISE_NAME]
        if coordinator.find_exercise_by_name(name) is not None:
            raise HomeAssistantError(f"Exercise '{name}' already exists")

        user_input = _settings_from_call(call.data)
        user_input[const.DATA_EXERCISE_NAME] = name
        try:
            await coordinator.async_create_exercise(user_input)
        except EntityValidationError as err:
            const.LOGGER.warning(
                "WARNING: Create Exercise: invalid %s: %s", err.field, err.reason
            )
            raise HomeAssistantError(err.reason) from err

    async def handle_update_exercise(call: ServiceCall) -> None:
        """Handle updating exercise settings."""
        coordinator = _get_coordinator(hass)
        exercise_id = _get_exercise_id(coordinator, call.data[const.FIELD_EXERCISE_NAME])

        user_input = _settings_from_call(call.data)
        if const.FIELD_NEW_NAME in call.data:
            new_name = call.data[const.FIELD_NEW_NAME]
            other = coordinator.find_exercise_by_name(new_name)
            if other is not None and other[const.DATA_EXERCISE_ID] != exercise_id:
                raise HomeAssistantError(f"Exercise '{new_name}' already exists")
            user_input[const.DATA_EXERCISE_NAME] = new_name
        try:
            await coordinator.async_update_exercise(exercise_id, user_input)
        except EntityValidationError as err:
            const.LOGGER.warning(
                "WARNING: Update Exercise: invalid %s: %s", err.field, err.reason
            )
            raise HomeAssistantError(err.reason) from err

    async def handle_delete_exercise(call: ServiceCall) -> None:
        """Handle deleting an exercise."""
        coordinator = _get_coordinator(hass)
        exercise_id = _get_exercise_id(coordinator, call.data[const.FIELD_EXERCISE_NAME])
        await coordinator.async_delete_exercise(exercise_id)

    async def handle_log_done(call: ServiceCall) -> None:
        """Handle logging completed repetitions."""
        coordinator = _get_coordinator(hass)
        name = call.data[const.FIELD_EXERCISE_NAME]
        exercise_id = _get_exercise_id(coordinator, name)
        await coordinator.async_log_done(exercise_id, call.data[const.FIELD_AMOUNT])
        const.LOGGER.info(
            "INFO: Logged %s rep(s) for exercise '%s'",
            call.data[const.FIELD_AMOUNT],
            name,
        )

    async def handle_add_target(call: ServiceCall) -> None:
        """Handle adding extra daily targets."""
        coordinator = _get_coordinator(hass)
        exercise_id = _get_exercise_id(coordinator, call.data[const.FIELD_EXERCISE_NAME])
        await coordinator.async_add_target(exercise_id, call.data[const.FIELD_TIMES])

    async def handle_import_exercises(call: ServiceCall) -> None:
        """Handle replacing all exercises from an exported payload."""
        coordinator = _get_coordinator(hass)
        try:
            await coordinator.async_import_exercises(call.data[const.FIELD_PAYLOAD])
        except ImportFormatError as err:
            const.LOGGER.error("ERROR: Import Exercises: %s", err)
            raise HomeAssistantError(str(err)) from err

    async def handle_export_exercises(call: ServiceCall) -> ServiceResponse:
        """Return every exercise in the import/export format."""
        coordinator = _get_coordinator(hass)
        return {const.DATA_EXERCISES: await coordinator.async_export_exercises()}

    async def handle_get_metrics(call: ServiceCall) -> ServiceResponse:
        """Return derived metrics for one exercise."""
        coordinator = _get_coordinator(hass)
        exercise_id = _get_exercise_id(coordinator, call.data[const.FIELD_EXERCISE_NAME])
        return await coordinator.async_get_metrics(exercise_id)

    async def handle_quick_action(call: ServiceCall) -> ServiceResponse:
        """Apply a URL quick action (``dec``/``add``/``exercise``)."""
        coordinator = _get_coordinator(hass)
        result = await coordinator.async_apply_quick_action(call.data[const.FIELD_QUERY])
        if not call.return_response:
            return None
        return result

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_CREATE_EXERCISE,
        handle_create_exercise,
        schema=CREATE_EXERCISE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_EXERCISE,
        handle_update_exercise,
        schema=UPDATE_EXERCISE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_EXERCISE,
        handle_delete_exercise,
        schema=DELETE_EXERCISE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_LOG_DONE,
        handle_log_done,
        schema=LOG_DONE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_TARGET,
        handle_add_target,
        schema=ADD_TARGET_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_IMPORT_EXERCISES,
        handle_import_exercises,
        schema=IMPORT_EXERCISES_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_EXPORT_EXERCISES,
        handle_export_exercises,
        schema=EXPORT_EXERCISES_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_METRICS,
        handle_get_metrics,
        schema=GET_METRICS_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_QUICK_ACTION,
        handle_quick_action,
        schema=QUICK_ACTION_SCHEMA,
        supports_response=SupportsResponse.OPTIONAL,
    )

    const.LOGGER.info("INFO: Daily Reps services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister Daily Reps services when unloading the integration."""
    services = [
        const.SERVICE_CREATE_EXERCISE,
        const.SERVICE_UPDATE_EXERCISE,
        const.SERVICE_DELETE_EXERCISE,
        const.SERVICE_LOG_DONE,
        const.SERVICE_ADD_TARGET,
        const.SERVICE_IMPORT_EXERCISES,
        const.SERVICE_EXPORT_EXERCISES,
        const.SERVICE_GET_METRICS,
        const.SERVICE_QUICK_ACTION,
    ]

    for service in services:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: Daily Reps services have been unregistered")

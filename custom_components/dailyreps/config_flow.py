# File: config_flow.py
"""Config flow for the Daily Reps integration.

Daily Reps keeps one exercise collection per Home Assistant instance, so the
flow only confirms the single entry. Exercises themselves are managed through
services; tunables live in the options flow.
"""

from typing import Any, Optional

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback

from . import const
from .options_flow import DailyRepsOptionsFlowHandler


class DailyRepsConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Single-instance config flow for Daily Reps."""

    VERSION = 1

    async def async_step_user(self, user_input: Optional[dict[str, Any]] = None):
        """Confirm creation of the Daily Reps entry."""

        # Check if there's an existing Daily Reps entry
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            return self.async_create_entry(
                title=const.DAILYREPS_TITLE,
                data={},
                options={const.CONF_RETENTION_DAYS: const.DEFAULT_RETENTION_DAYS},
            )

        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER, data_schema=vol.Schema({})
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return DailyRepsOptionsFlowHandler(config_entry)

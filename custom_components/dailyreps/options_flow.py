# File: options_flow.py
"""Options Flow for the Daily Reps integration.

Exposes the history retention horizon. Saving new options reloads the entry
(see the update listener in __init__.py) so the coordinator picks them up.
"""

import voluptuous as vol
from homeassistant import config_entries

from . import const


class DailyRepsOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for Daily Reps settings."""

    def __init__(self, _config_entry: config_entries.ConfigEntry):
        """Initialize the options flow."""
        self._entry_options = {}

    async def async_step_init(self, user_input=None):
        """Edit the retention horizon."""
        self._entry_options = dict(self.config_entry.options)

        if user_input is not None:
            self._entry_options[const.CONF_RETENTION_DAYS] = user_input[
                const.CONF_RETENTION_DAYS
            ]
            const.LOGGER.debug(
                "DEBUG: Options updated: retention_days=%s",
                self._entry_options[const.CONF_RETENTION_DAYS],
            )
            return self.async_create_entry(title="", data=self._entry_options)

        schema = vol.Schema(
            {
                vol.Required(
                    const.CONF_RETENTION_DAYS,
                    default=self._entry_options.get(
                        const.CONF_RETENTION_DAYS, const.DEFAULT_RETENTION_DAYS
                    ),
                ): vol.All(
                    vol.Coerce(int),
                    vol.Range(
                        min=const.MIN_RETENTION_DAYS, max=const.MAX_RETENTION_DAYS
                    ),
                ),
            }
        )
        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT, data_schema=schema
        )

# File: options_flow.py
"""Options Flow for the PetQuest integration.

Only the remote refresh interval is configurable. Saving the options reloads
the entry through the update listener registered in __init__.py.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.helpers import selector

from . import const


def build_general_options_schema(default: dict[str, Any] | None = None) -> vol.Schema:
    """Build schema for general options (update interval)."""
    default = default or {}
    default_interval = default.get(
        const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
    )
    return vol.Schema(
        {
            vol.Required(
                const.CONF_UPDATE_INTERVAL, default=default_interval
            ): selector.NumberSelector(
                selector.NumberSelectorConfig(
                    mode=selector.NumberSelectorMode.BOX,
                    min=1,
                    step=1,
                )
            ),
        }
    )


class PetQuestOptionsFlowHandler(config_entries.OptionsFlow):
    """Options Flow for PetQuest settings."""

    async def async_step_init(self, user_input: dict[str, Any] | None = None):
        """Manage general options."""
        if user_input is not None:
            options = dict(self.config_entry.options)
            options[const.CONF_UPDATE_INTERVAL] = int(
                user_input[const.CONF_UPDATE_INTERVAL]
            )
            const.LOGGER.debug(
                "DEBUG: General Options Updated: Update Interval=%s",
                options[const.CONF_UPDATE_INTERVAL],
            )
            return self.async_create_entry(title="", data=options)

        return self.async_show_form(
            step_id=const.OPTIONS_FLOW_STEP_INIT,
            data_schema=build_general_options_schema(dict(self.config_entry.options)),
        )

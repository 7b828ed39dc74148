# File: config_flow.py
"""Config flow for the PetQuest integration.

One config entry per user. The user id is the opaque identity every remote
document is stored under; it defaults to the Home Assistant user running
the flow.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.const import CONF_NAME
from homeassistant.core import callback

from . import const
from .options_flow import PetQuestOptionsFlowHandler

# pylint: disable=abstract-method


class PetQuestConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for PetQuest."""

    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        """Ask for the user id and entry title."""
        errors: dict[str, str] = {}

        if user_input is not None:
            user_id = str(user_input.get(const.CONF_USER_ID, "")).strip()
            if not user_id:
                errors[const.CONF_USER_ID] = const.TRANS_KEY_ERROR_USER_ID_REQUIRED
            else:
                await self.async_set_unique_id(user_id)
                self._abort_if_unique_id_configured()
                title = user_input.get(CONF_NAME) or const.PETQUEST_TITLE
                const.LOGGER.debug("DEBUG: Creating PetQuest entry for user %s", user_id)
                return self.async_create_entry(
                    title=title, data={const.CONF_USER_ID: user_id}
                )

        default_user_id = self.context.get("user_id") or ""
        schema = vol.Schema(
            {
                vol.Required(const.CONF_USER_ID, default=default_user_id): str,
                vol.Optional(CONF_NAME, default=const.PETQUEST_TITLE): str,
            }
        )
        return self.async_show_form(
            step_id=const.CONFIG_FLOW_STEP_USER, data_schema=schema, errors=errors
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return PetQuestOptionsFlowHandler()

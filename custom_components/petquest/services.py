# File: services.py
"""Defines custom services for the PetQuest integration.

These services allow pet actions through scripts, automations and
dashboards. Every service accepts an optional config_entry_id; without it
the first loaded PetQuest entry is used.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall, ServiceResponse, SupportsResponse
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from .coordinator import PetQuestCoordinator
from .engines.economy_engine import InsufficientBalanceError
from .helpers.entity_helpers import get_coordinator

# --- Service Schemas ---
_ENTRY_FIELD = {vol.Optional(const.FIELD_CONFIG_ENTRY_ID): cv.string}

ADOPT_PET_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_SPECIES): cv.string,
        vol.Optional(const.FIELD_DISPLAY_NAME): cv.string,
        vol.Optional(const.FIELD_PET_ID): cv.string,
    }
)

RENAME_PET_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_PET_ID): cv.string,
        vol.Required(const.FIELD_DISPLAY_NAME): cv.string,
    }
)

PET_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_PET_ID): cv.string,
    }
)

EARN_ADVENTURE_COINS_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_PET_ID): cv.string,
        vol.Required(const.FIELD_AMOUNT): vol.All(vol.Coerce(int), vol.Range(min=0)),
        vol.Optional(const.FIELD_ACTIVITY): cv.string,
    }
)

PURCHASE_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_ITEM_ID): cv.string,
        vol.Required(const.FIELD_COST): vol.All(vol.Coerce(int), vol.Range(min=0)),
    }
)

EQUIP_ACCESSORY_SCHEMA = vol.Schema(
    {
        **_ENTRY_FIELD,
        vol.Required(const.FIELD_PET_ID): cv.string,
        vol.Optional(const.FIELD_ACCESSORY): cv.string,
    }
)

SYNC_NOW_SCHEMA = vol.Schema(_ENTRY_FIELD)

SERVICES = (
    const.SERVICE_ADOPT_PET,
    const.SERVICE_RENAME_PET,
    const.SERVICE_FEED,
    const.SERVICE_EARN_ADVENTURE_COINS,
    const.SERVICE_INTERACT_SLEEP,
    const.SERVICE_PURCHASE,
    const.SERVICE_SYNC_NOW,
    const.SERVICE_GET_PET_STATUS,
    const.SERVICE_EQUIP_ACCESSORY,
)


def _get_coordinator(hass: HomeAssistant, call: ServiceCall, label: str) -> PetQuestCoordinator:
    """Resolve the coordinator a service call targets.

    Raises:
        HomeAssistantError: If no PetQuest entry is loaded
    """
    coordinator = get_coordinator(hass, call.data.get(const.FIELD_CONFIG_ENTRY_ID))
    if coordinator is None:
        const.LOGGER.warning("WARNING: %s: %s", label, const.ERROR_NO_ENTRY_FOUND)
        raise HomeAssistantError(const.ERROR_NO_ENTRY_FOUND)
    return coordinator


def async_setup_services(hass: HomeAssistant) -> None:
    """Register PetQuest services."""
    if hass.services.has_service(const.DOMAIN, const.SERVICE_ADOPT_PET):
        return

    async def handle_adopt_pet(call: ServiceCall) -> None:
        """Handle adopting a pet."""
        coordinator = _get_coordinator(hass, call, "Adopt Pet")
        try:
            pet_id = coordinator.adopt_pet(
                call.data[const.FIELD_SPECIES],
                call.data.get(const.FIELD_DISPLAY_NAME),
                call.data.get(const.FIELD_PET_ID),
            )
        except ValueError as err:
            raise HomeAssistantError(str(err)) from err

        const.LOGGER.info("INFO: Pet '%s' adopted", pet_id)
        await coordinator.async_request_refresh()

    async def handle_rename_pet(call: ServiceCall) -> None:
        """Handle renaming a pet."""
        coordinator = _get_coordinator(hass, call, "Rename Pet")
        try:
            coordinator.rename_pet(
                call.data[const.FIELD_PET_ID], call.data[const.FIELD_DISPLAY_NAME]
            )
        except ValueError as err:
            raise HomeAssistantError(str(err)) from err
        await coordinator.async_request_refresh()

    async def handle_feed(call: ServiceCall) -> None:
        """Handle feeding a pet."""
        coordinator = _get_coordinator(hass, call, "Feed")
        pet_id = call.data[const.FIELD_PET_ID]
        try:
            feeding_count = coordinator.feed(pet_id)
        except ValueError as err:
            raise HomeAssistantError(str(err)) from err

        const.LOGGER.info("INFO: Pet '%s' fed (%s today)", pet_id, feeding_count)
        await coordinator.async_request_refresh()

    async def handle_earn_adventure_coins(call: ServiceCall) -> None:
        """Handle coins earned during an adventure."""
        coordinator = _get_coordinator(hass, call, "Earn Adventure Coins")
        pet_id = call.data[const.FIELD_PET_ID]
        amount = call.data[const.FIELD_AMOUNT]
        try:
            total = coordinator.earn_adventure_coins(
                pet_id, amount, call.data.get(const.FIELD_ACTIVITY)
            )
        except ValueError as err:
            raise HomeAssistantError(str(err)) from err

        if total is not None:
            const.LOGGER.info(
                "INFO: Pet '%s' earned %s coins (lifetime %s)", pet_id, amount, total
            )
        await coordinator.async_request_refresh()

    async def handle_interact_sleep(call: ServiceCall) -> None:
        """Handle a sleep interaction."""
        coordinator = _get_coordinator(hass, call, "Interact Sleep")
        try:
            coordinator.interact_sleep(call.data[const.FIELD_PET_ID])
        except ValueError as err:
            raise HomeAssistantError(str(err)) from err
        await coordinator.async_request_refresh()

    async def handle_purchase(call: ServiceCall) -> None:
        """Handle buying an item with spendable coins."""
        coordinator = _get_coordinator(hass, call, "Purchase")
        item_id = call.data[const.FIELD_ITEM_ID]
        cost = call.data[const.FIELD_COST]
        try:
            balance = coordinator.purchase(item_id, cost)
        except InsufficientBalanceError as err:
            const.LOGGER.warning(
                "WARNING: Purchase: %s",
                const.ERROR_INSUFFICIENT_BALANCE_FMT.format(err.current_balance, cost),
            )
            raise HomeAssistantError(
                const.ERROR_INSUFFICIENT_BALANCE_FMT.format(err.current_balance, cost)
            ) from err
        except ValueError as err:
            raise HomeAssistantError(str(err)) from err

        const.LOGGER.info("INFO: Purchased '%s' for %s, balance %s", item_id, cost, balance)
        await coordinator.async_request_refresh()

    async def handle_equip_accessory(call: ServiceCall) -> None:
        """Handle dressing a pet; no accessory takes the current one off."""
        coordinator = _get_coordinator(hass, call, "Equip Accessory")
        try:
            coordinator.equip_accessory(
                call.data[const.FIELD_PET_ID], call.data.get(const.FIELD_ACCESSORY)
            )
        except ValueError as err:
            raise HomeAssistantError(str(err)) from err
        await coordinator.async_request_refresh()

    async def handle_sync_now(call: ServiceCall) -> None:
        """Handle an immediate remote refresh."""
        coordinator = _get_coordinator(hass, call, "Sync Now")
        await coordinator.async_sync_now()

    async def handle_get_pet_status(call: ServiceCall) -> ServiceResponse:
        """Return a pet's combined status."""
        coordinator = _get_coordinator(hass, call, "Get Pet Status")
        try:
            status: dict[str, Any] = coordinator.get_pet_status(call.data[const.FIELD_PET_ID])
        except ValueError as err:
            raise HomeAssistantError(str(err)) from err
        return status

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADOPT_PET,
        handle_adopt_pet,
        schema=ADOPT_PET_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RENAME_PET,
        handle_rename_pet,
        schema=RENAME_PET_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_FEED,
        handle_feed,
        schema=PET_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_EARN_ADVENTURE_COINS,
        handle_earn_adventure_coins,
        schema=EARN_ADVENTURE_COINS_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_INTERACT_SLEEP,
        handle_interact_sleep,
        schema=PET_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_PURCHASE,
        handle_purchase,
        schema=PURCHASE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SYNC_NOW,
        handle_sync_now,
        schema=SYNC_NOW_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_PET_STATUS,
        handle_get_pet_status,
        schema=PET_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_EQUIP_ACCESSORY,
        handle_equip_accessory,
        schema=EQUIP_ACCESSORY_SCHEMA,
    )

    const.LOGGER.info("INFO: PetQuest services have been registered")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister PetQuest services when unloading the integration."""
    for service in SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: PetQuest services have been unregistered")

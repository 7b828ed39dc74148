# File: helpers/device_helpers.py
"""DeviceInfo construction for PetQuest entities."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceEntryType, DeviceInfo

from .. import const

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


def create_pet_device_info(
    pet_id: str,
    pet_name: str,
    species: str,
    config_entry: ConfigEntry,
) -> DeviceInfo:
    """Create device info for one pet.

    Args:
        pet_id: Internal ID of the pet
        pet_name: Display name of the pet
        species: Pet species, shown as the device model
        config_entry: Config entry for this integration instance

    Returns:
        DeviceInfo dict for the pet device
    """
    return DeviceInfo(
        identifiers={(const.DOMAIN, f"{config_entry.entry_id}_{pet_id}")},
        name=f"{pet_name} ({config_entry.title})",
        manufacturer=const.PETQUEST_TITLE,
        model=species.capitalize() if species else "Pet",
        entry_type=DeviceEntryType.SERVICE,
    )


def create_user_device_info(config_entry: ConfigEntry) -> DeviceInfo:
    """Create device info for the user profile (streak, coins, hearts)."""
    return DeviceInfo(
        identifiers={(const.DOMAIN, config_entry.entry_id)},
        name=config_entry.title,
        manufacturer=const.PETQUEST_TITLE,
        model="User Profile",
        entry_type=DeviceEntryType.SERVICE,
    )

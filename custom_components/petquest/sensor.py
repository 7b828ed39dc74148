# File: sensor.py
"""Sensors for the PetQuest integration.

Sensors Defined in This File (8):

# Pet-Specific Sensors (5)
01. PetMoodSensor
02. PetQuestSensor
03. PetSleepSensor
04. PetLevelSensor
05. PetHeartFillSensor

# User-Level Sensors (3)
06. UserStreakSensor
07. UserCoinsSensor
08. UserWeeklyHeartsSensor

Pet sensors for pets adopted after setup, here or on another device, are
added when the pet_adopted signal fires.
"""

from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE
from homeassistant.core import HomeAssistant, callback
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from . import const
from .coordinator import PetQuestCoordinator
from .engines.economy_engine import EconomyEngine
from .entity import PetQuestCoordinatorEntity
from .helpers.device_helpers import create_pet_device_info, create_user_device_info
from .helpers.entity_helpers import get_event_signal


def _pet_sensors(
    coordinator: PetQuestCoordinator, entry: ConfigEntry, pet_id: str
) -> list[SensorEntity]:
    """Build every sensor for one pet."""
    pet = coordinator.pet_manager.get_pet(pet_id) or {}
    pet_name = pet.get(const.DATA_PET_DISPLAY_NAME, const.DEFAULT_PET_NAME)
    species = pet.get(const.DATA_PET_SPECIES, "")
    return [
        sensor_cls(coordinator, entry, pet_id, pet_name, species)
        for sensor_cls in (
            PetMoodSensor,
            PetQuestSensor,
            PetSleepSensor,
            PetLevelSensor,
            PetHeartFillSensor,
        )
    ]


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up sensors for PetQuest integration."""
    coordinator: PetQuestCoordinator = hass.data[const.DOMAIN][entry.entry_id][
        const.COORDINATOR
    ]

    entities: list[SensorEntity] = [
        UserStreakSensor(coordinator, entry),
        UserCoinsSensor(coordinator, entry),
        UserWeeklyHeartsSensor(coordinator, entry),
    ]
    for pet_id in coordinator.owned_pet_ids:
        entities.extend(_pet_sensors(coordinator, entry, pet_id))
    async_add_entities(entities)

    @callback
    def _on_pet_adopted(payload: dict[str, Any]) -> None:
        """Add sensors for a newly adopted pet."""
        pet_id = payload.get("pet_id")
        if pet_id:
            async_add_entities(_pet_sensors(coordinator, entry, pet_id))

    entry.async_on_unload(
        async_dispatcher_connect(
            hass,
            get_event_signal(entry.entry_id, const.SIGNAL_SUFFIX_PET_ADOPTED),
            _on_pet_adopted,
        )
    )


# ------------------------------------------------------------------------------------------
class PetSensorBase(PetQuestCoordinatorEntity, SensorEntity):
    """Common wiring for per-pet sensors."""

    _attr_has_entity_name = True
    _uid_suffix = ""

    def __init__(
        self,
        coordinator: PetQuestCoordinator,
        entry: ConfigEntry,
        pet_id: str,
        pet_name: str,
        species: str,
    ) -> None:
        """Initialize the sensor.

        Args:
            coordinator: PetQuestCoordinator instance for data access.
            entry: ConfigEntry for this integration instance.
            pet_id: Unique identifier for the pet.
            pet_name: Display name of the pet.
            species: Pet species.
        """
        super().__init__(coordinator)
        self._pet_id = pet_id
        self._pet_name = pet_name
        self._attr_unique_id = f"{entry.entry_id}_{pet_id}{self._uid_suffix}"
        self._attr_translation_placeholders = {
            const.TRANS_KEY_SENSOR_ATTR_PET_NAME: pet_name,
        }
        self._attr_device_info = create_pet_device_info(pet_id, pet_name, species, entry)

    @property
    def available(self) -> bool:
        """Return True while the pet exists."""
        return (
            super().available
            and self.coordinator.pet_manager.get_pet(self._pet_id) is not None
        )

    def _base_attributes(self) -> dict[str, Any]:
        return {
            const.ATTR_PET_ID: self._pet_id,
            const.ATTR_PET_NAME: self._pet_name,
        }


class PetMoodSensor(PetSensorBase):
    """Derived mood of a pet for the active mood period."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_MOOD
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [
        const.MOOD_VERY_HAPPY,
        const.MOOD_HAPPY,
        const.MOOD_SAD,
        const.MOOD_NEUTRAL,
        const.MOOD_UNKNOWN,
    ]
    _uid_suffix = const.SENSOR_UID_SUFFIX_MOOD

    @property
    def native_value(self) -> str:
        """Return the pet's mood."""
        return self.coordinator.get_mood(self._pet_id)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the active period."""
        period = self.coordinator.mood_manager.get_period() or {}
        return {
            **self._base_attributes(),
            const.DATA_PERIOD_ID: period.get(const.DATA_PERIOD_ID),
            const.DATA_PERIOD_ANCHOR_AT: period.get(const.DATA_PERIOD_ANCHOR_AT),
            const.DATA_PERIOD_NEXT_RESET_AT: period.get(const.DATA_PERIOD_NEXT_RESET_AT),
            const.DATA_PERIOD_ASSIGNMENT_REASON: period.get(
                const.DATA_PERIOD_ASSIGNMENT_REASON
            ),
            "sad_at_period_start": self._pet_id in period.get(const.DATA_PERIOD_SAD_PET_IDS, []),
        }


class PetQuestSensor(PetSensorBase):
    """The activity a pet is working on (pinned to the finished one in cooldown)."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_QUEST
    _uid_suffix = const.SENSOR_UID_SUFFIX_QUEST

    @property
    def native_value(self) -> str:
        """Return the displayed activity."""
        return self.coordinator.get_quest_display(self._pet_id)["activity"]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose quest progress."""
        return {**self._base_attributes(), **self.coordinator.get_quest_display(self._pet_id)}


class PetSleepSensor(PetSensorBase):
    """Sleep state of a pet."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_SLEEP
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [const.SLEEP_STATE_AWAKE, const.SLEEP_STATE_ASLEEP]
    _uid_suffix = const.SENSOR_UID_SUFFIX_SLEEP

    @property
    def native_value(self) -> str:
        """Return awake or asleep."""
        return self.coordinator.get_sleep_state(self._pet_id)["state"]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose clicks and remaining sleep."""
        return {**self._base_attributes(), **self.coordinator.get_sleep_state(self._pet_id)}


class PetLevelSensor(PetSensorBase):
    """Level derived from the pet's lifetime coins."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_LEVEL
    _attr_state_class = SensorStateClass.MEASUREMENT
    _uid_suffix = const.SENSOR_UID_SUFFIX_LEVEL

    @property
    def native_value(self) -> int:
        """Return the pet's level."""
        return self.coordinator.get_level(self._pet_id)["level"]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose level progress, unlocks and milestones."""
        level_info = self.coordinator.get_level(self._pet_id)
        progress = self.coordinator.pet_manager.get_progress(self._pet_id)
        return {
            **self._base_attributes(),
            **level_info,
            "unlocks": EconomyEngine.unlocks_for_level(level_info["level"]),
            const.DATA_PROGRESS_CURRENT_ACCESSORY: progress[
                const.DATA_PROGRESS_CURRENT_ACCESSORY
            ],
            const.DATA_PROGRESS_MILESTONES: list(progress[const.DATA_PROGRESS_MILESTONES]),
            const.DATA_PROGRESS_COINS_BY_ACTIVITY: dict(
                progress[const.DATA_PROGRESS_COINS_BY_ACTIVITY]
            ),
        }


class PetHeartFillSensor(PetSensorBase):
    """How full the pet's heart meter is."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_HEART_FILL
    _attr_native_unit_of_measurement = PERCENTAGE
    _attr_state_class = SensorStateClass.MEASUREMENT
    _uid_suffix = const.SENSOR_UID_SUFFIX_HEART_FILL

    @property
    def native_value(self) -> int:
        """Return the heart fill percentage."""
        return self.coordinator.get_heart_fill(self._pet_id)

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the counters behind the meter."""
        progress = self.coordinator.pet_manager.get_progress(self._pet_id)
        return {
            **self._base_attributes(),
            const.DATA_PROGRESS_FEEDING_COUNT: progress[const.DATA_PROGRESS_FEEDING_COUNT],
            const.DATA_PROGRESS_ADVENTURE_COINS_TODAY: progress[
                const.DATA_PROGRESS_ADVENTURE_COINS_TODAY
            ],
            const.DATA_PROGRESS_SLEEP_COMPLETED_TODAY: progress[
                const.DATA_PROGRESS_SLEEP_COMPLETED_TODAY
            ],
            const.DATA_PROGRESS_NEXT_HEART_RESET_AT: progress[
                const.DATA_PROGRESS_NEXT_HEART_RESET_AT
            ],
        }


# ------------------------------------------------------------------------------------------
class UserSensorBase(PetQuestCoordinatorEntity, SensorEntity):
    """Common wiring for user-level sensors."""

    _attr_has_entity_name = True
    _uid_suffix = ""

    def __init__(self, coordinator: PetQuestCoordinator, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}{self._uid_suffix}"
        self._attr_device_info = create_user_device_info(entry)


class UserStreakSensor(UserSensorBase):
    """Consecutive weekdays with a qualifying sleep."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_STREAK
    _attr_state_class = SensorStateClass.MEASUREMENT
    _uid_suffix = const.SENSOR_UID_SUFFIX_STREAK

    @property
    def native_value(self) -> int:
        """Return the effective streak."""
        return self.coordinator.get_streak()["streak"]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose longest streak, recent dates and evolution stage."""
        return dict(self.coordinator.get_streak())


class UserCoinsSensor(UserSensorBase):
    """Spendable coin balance."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_COINS
    _attr_state_class = SensorStateClass.MEASUREMENT
    _uid_suffix = const.SENSOR_UID_SUFFIX_COINS

    @property
    def native_value(self) -> int:
        """Return the spendable balance."""
        return self.coordinator.get_balance()

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose lifetime coins, user level and owned items."""
        ledger = self.coordinator.economy_manager.get_ledger()
        level_info = self.coordinator.get_level()
        return {
            const.DATA_LEDGER_CUMULATIVE_COINS_EARNED: ledger[
                const.DATA_LEDGER_CUMULATIVE_COINS_EARNED
            ],
            const.DATA_LEDGER_OWNED_ITEMS: list(ledger[const.DATA_LEDGER_OWNED_ITEMS]),
            "level": level_info["level"],
            "coins_to_next_level": level_info["coins_to_next_level"],
            "progress_percent": level_info["progress_percent"],
        }


class UserWeeklyHeartsSensor(UserSensorBase):
    """Filled heart cells in the current week."""

    _attr_translation_key = const.TRANS_KEY_SENSOR_WEEKLY_HEARTS
    _attr_state_class = SensorStateClass.MEASUREMENT
    _uid_suffix = const.SENSOR_UID_SUFFIX_WEEKLY_HEARTS

    @property
    def native_value(self) -> int:
        """Return this week's heart count."""
        return self.coordinator.get_weekly_hearts()["count"]

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Expose the week key and its cells."""
        hearts = self.coordinator.get_weekly_hearts()
        return {"week_key": hearts["week_key"], "days": hearts["days"]}

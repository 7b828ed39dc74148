"""Pet manager for PetQuest integration.

Handles pet adoption, renaming and feeding, and owns the per-pet progress
document plus the user document that indexes owned pets.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.economy_engine import EconomyEngine
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import PetQuestCoordinator
    from ..type_defs import PetData, PetProgress, UserState


class PetManager(BaseManager):
    """Manages Pet documents and PetProgress lifecycle.

    Provides centralized methods for:
    - Pet adoption with progress, quest and sleep document creation
    - Display name updates
    - Feeding (heart counter plus lifetime feedings)
    - Equipping accessories unlocked by the pet's level
    - The user's owned pet index
    """

    def __init__(self, hass: HomeAssistant, coordinator: PetQuestCoordinator) -> None:
        """Initialize pet manager.

        Args:
            hass: Home Assistant instance
            coordinator: Parent coordinator managing this integration instance
        """
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Set up the pet manager.

        Loads the user document, creating it only when no device has one.
        """
        await self.sync.async_create_if_missing(
            const.ENTITY_KEY_USER,
            {
                const.DATA_USER_ID: self.sync.user_id,
                const.DATA_USER_ROTATION_POINTER: 0,
                const.DATA_USER_PET_IDS: [],
            },
        )
        const.LOGGER.debug("PetManager async_setup complete")

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_user(self) -> UserState:
        """Return the user document with defaults filled in."""
        user = self.sync.get(const.ENTITY_KEY_USER) or {}
        user.setdefault(const.DATA_USER_ID, self.sync.user_id)
        user.setdefault(const.DATA_USER_ROTATION_POINTER, 0)
        user.setdefault(const.DATA_USER_PET_IDS, [])
        return user  # type: ignore[return-value]

    def owned_pet_ids(self) -> list[str]:
        """Return the sorted ids of every pet the user owns.

        Pets listed in the user document but not yet fetched locally are
        skipped until the next refresh brings their documents in.
        """
        indexed = set(self.get_user()[const.DATA_USER_PET_IDS])
        local = {
            key.removeprefix(const.ENTITY_PREFIX_PET)
            for key in self.sync.keys(const.ENTITY_PREFIX_PET)
        }
        return sorted(indexed & local)

    def get_pet(self, pet_id: str) -> PetData | None:
        """Return a pet document, or None if unknown."""
        return self.sync.get(f"{const.ENTITY_PREFIX_PET}{pet_id}")  # type: ignore[return-value]

    def require_pet(self, pet_id: str, context: str) -> PetData:
        """Return a pet document or raise ValueError.

        Args:
            pet_id: Pet to look up
            context: Caller name for the log line

        Raises:
            ValueError: If the pet does not exist
        """
        pet = self.get_pet(pet_id)
        if pet is None:
            const.LOGGER.warning("WARNING: %s: Unknown pet '%s'", context, pet_id)
            raise ValueError(const.ERROR_PET_NOT_FOUND_FMT.format(pet_id))
        return pet

    def get_progress(self, pet_id: str) -> PetProgress:
        """Return a pet's progress document with defaults filled in."""
        progress = self.sync.get(f"{const.ENTITY_PREFIX_PROGRESS}{pet_id}") or {}
        for key, default in self._progress_defaults(None).items():
            progress.setdefault(key, default)
        return progress  # type: ignore[return-value]

    @staticmethod
    def _progress_defaults(next_heart_reset_at: int | None) -> dict[str, Any]:
        """Return a fresh PetProgress document."""
        return {
            const.DATA_PROGRESS_FEEDING_COUNT: 0,
            const.DATA_PROGRESS_ADVENTURE_COINS_TODAY: 0,
            const.DATA_PROGRESS_SLEEP_COMPLETED_TODAY: False,
            const.DATA_PROGRESS_NEXT_HEART_RESET_AT: next_heart_reset_at,
            const.DATA_PROGRESS_TOTAL_COINS_EARNED: 0,
            const.DATA_PROGRESS_CURRENT_LEVEL: 1,
            const.DATA_PROGRESS_LEVEL_UP_AT: None,
            const.DATA_PROGRESS_COINS_BY_ACTIVITY: {},
            const.DATA_PROGRESS_DAILY_COINS: {},
            const.DATA_PROGRESS_TOTAL_FEEDINGS: 0,
            const.DATA_PROGRESS_TOTAL_ADVENTURES: 0,
            const.DATA_PROGRESS_TOTAL_SLEEPS: 0,
            const.DATA_PROGRESS_MILESTONES: [],
            const.DATA_PROGRESS_CURRENT_ACCESSORY: None,
        }

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def adopt_pet(
        self,
        species: str,
        display_name: str | None = None,
        pet_id: str | None = None,
    ) -> str:
        """Adopt a new pet.

        Args:
            species: Pet species (e.g. "dog")
            display_name: Name to show; the species default when omitted
            pet_id: Optional id to use instead of a generated one

        Returns:
            The id of the adopted pet

        Raises:
            ValueError: If pet_id is already owned
        """
        pet_id = pet_id or uuid.uuid4().hex
        if self.get_pet(pet_id) is not None:
            raise ValueError(f"Pet '{pet_id}' already exists")

        now = self.now_ms()
        name = display_name or const.SPECIES_DEFAULT_NAMES.get(
            species.lower(), const.DEFAULT_PET_NAME
        )
        self.sync.write(
            f"{const.ENTITY_PREFIX_PET}{pet_id}",
            {
                const.DATA_PET_ID: pet_id,
                const.DATA_PET_SPECIES: species,
                const.DATA_PET_OWNER_ID: self.sync.user_id,
                const.DATA_PET_DISPLAY_NAME: name,
                const.DATA_PET_OWNED_AT: now,
            },
        )
        self.sync.write(
            f"{const.ENTITY_PREFIX_PROGRESS}{pet_id}",
            self._progress_defaults(now + const.HEART_RESET_FALLBACK_MS),
        )
        self.coordinator.quest_manager.ensure_quest(pet_id)
        self.coordinator.sleep_manager.ensure_state(pet_id)

        pet_ids = [*self.get_user()[const.DATA_USER_PET_IDS], pet_id]
        self.sync.write(const.ENTITY_KEY_USER, {const.DATA_USER_PET_IDS: pet_ids})

        const.LOGGER.info("Adopted pet '%s' (ID: %s, species=%s)", name, pet_id, species)
        self._emit_pet_adopted(pet_id, name, species)
        return pet_id

    def announce_pet(self, pet_id: str) -> None:
        """Announce a pet that a refresh brought in from another device."""
        pet = self.require_pet(pet_id, "PetManager.announce_pet")
        name = pet.get(const.DATA_PET_DISPLAY_NAME, const.DEFAULT_PET_NAME)
        const.LOGGER.info("Pet '%s' (ID: %s) arrived from another device", name, pet_id)
        self._emit_pet_adopted(pet_id, name, pet.get(const.DATA_PET_SPECIES, ""))

    def _emit_pet_adopted(self, pet_id: str, display_name: str, species: str) -> None:
        self.emit(
            const.SIGNAL_SUFFIX_PET_ADOPTED,
            pet_id=pet_id,
            display_name=display_name,
            species=species,
        )

    def rename_pet(self, pet_id: str, display_name: str) -> None:
        """Change a pet's display name.

        Raises:
            ValueError: If the pet does not exist or the name is empty
        """
        self.require_pet(pet_id, "PetManager.rename_pet")
        name = display_name.strip()
        if not name:
            raise ValueError("Display name must not be empty")
        self.sync.write(
            f"{const.ENTITY_PREFIX_PET}{pet_id}", {const.DATA_PET_DISPLAY_NAME: name}
        )
        const.LOGGER.debug("Renamed pet %s to '%s'", pet_id, name)

    def feed(self, pet_id: str) -> int:
        """Feed a pet.

        Returns:
            The pet's feeding count since the last heart reset

        Raises:
            ValueError: If the pet does not exist
        """
        self.require_pet(pet_id, "PetManager.feed")
        updated = self.sync.increment(
            f"{const.ENTITY_PREFIX_PROGRESS}{pet_id}",
            {
                const.DATA_PROGRESS_FEEDING_COUNT: 1,
                const.DATA_PROGRESS_TOTAL_FEEDINGS: 1,
            },
        )
        feeding_count = int(updated.get(const.DATA_PROGRESS_FEEDING_COUNT, 0))
        const.LOGGER.debug("PetManager.feed: pet=%s feeding_count=%s", pet_id, feeding_count)
        self.coordinator.economy_manager.evaluate_milestones(pet_id)
        return feeding_count

    def equip_accessory(self, pet_id: str, accessory: str | None) -> str | None:
        """Put an unlocked accessory on a pet, or take it off with None.

        Returns:
            The accessory now worn

        Raises:
            ValueError: If the pet does not exist or the accessory is not
                unlocked at the pet's level
        """
        self.require_pet(pet_id, "PetManager.equip_accessory")
        if accessory is not None:
            level = self.coordinator.economy_manager.get_level(pet_id)["level"]
            if accessory not in EconomyEngine.accessories_for_level(level):
                const.LOGGER.warning(
                    "WARNING: PetManager.equip_accessory: '%s' locked for pet %s (level %s)",
                    accessory,
                    pet_id,
                    level,
                )
                raise ValueError(const.ERROR_ACCESSORY_LOCKED_FMT.format(accessory, pet_id))
        self.sync.write(
            f"{const.ENTITY_PREFIX_PROGRESS}{pet_id}",
            {const.DATA_PROGRESS_CURRENT_ACCESSORY: accessory},
        )
        const.LOGGER.debug("Pet %s now wears %s", pet_id, accessory)
        return accessory

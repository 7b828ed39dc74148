# File: coordinator.py
"""Coordinator for the PetQuest integration.

Owns the synchronization layer and the domain managers, exposes the query and
command functions used by services and entities, and periodically pulls the
remote copy of the user's documents.

Time-based transitions (period rollover, quest cooldown, wake-up, heart
reset) are applied lazily by the query functions and on every refresh.
"""

# pylint: disable=too-many-public-methods

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .engines.quest_engine import InvalidActivityError
from .managers import (
    EconomyManager,
    MoodManager,
    PetManager,
    QuestManager,
    SleepManager,
    StreakManager,
    SyncManager,
)
from .utils import dt_utils

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .remote_store import RemoteDocumentClient
    from .storage_manager import PetQuestStorageManager
    from .type_defs import LevelInfo, QuestDisplay, SleepDisplay


class PetQuestCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for the PetQuest integration.

    One coordinator per config entry (one user).
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        storage_manager: PetQuestStorageManager,
        remote: RemoteDocumentClient,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """Initialize the PetQuestCoordinator.

        Args:
            hass: Home Assistant instance
            config_entry: Entry holding the user id and options
            storage_manager: Local document cache for this entry
            remote: Remote document store client
            clock: Millisecond clock; dt_utils.now_ms when omitted
        """
        update_interval_minutes = config_entry.options.get(
            const.CONF_UPDATE_INTERVAL, const.DEFAULT_UPDATE_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(minutes=update_interval_minutes),
        )
        self.storage_manager = storage_manager
        self.user_id: str = config_entry.data[const.CONF_USER_ID]
        self._clock = clock or dt_utils.now_ms

        self.sync_manager = SyncManager(
            hass, storage_manager, remote, self.user_id, clock=self.now_ms
        )
        self.pet_manager = PetManager(hass, self)
        self.economy_manager = EconomyManager(hass, self)
        self.quest_manager = QuestManager(hass, self)
        self.mood_manager = MoodManager(hass, self)
        self.sleep_manager = SleepManager(hass, self)
        self.streak_manager = StreakManager(hass, self)

    def now_ms(self) -> int:
        """Return the current time in epoch milliseconds."""
        return self._clock()

    async def async_setup_managers(self) -> None:
        """Run every manager's async_setup (event subscriptions, defaults)."""
        for manager in (
            self.pet_manager,
            self.economy_manager,
            self.quest_manager,
            self.mood_manager,
            self.sleep_manager,
            self.streak_manager,
        ):
            await manager.async_setup()

    # -------------------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------------------

    async def _async_update_data(self) -> dict[str, Any]:
        """Pull remote documents, then apply elapsed transitions."""
        try:
            await self.async_pull_remote()
            self._apply_lazy_transitions()
            return self._build_snapshot()
        except Exception as err:  # pylint: disable=broad-exception-caught
            raise UpdateFailed(f"Error updating PetQuest data: {err}") from err

    async def async_pull_remote(self) -> None:
        """Read every known document through the sync layer.

        The user document is read first so pets adopted on another device
        are fetched as well; each such pet is announced with pet_adopted.
        """
        sync = self.sync_manager
        known = set(self.owned_pet_ids)
        await sync.async_flush_pending()
        await sync.async_read(const.ENTITY_KEY_USER)

        keys = set(sync.keys())
        keys.update(
            (const.ENTITY_KEY_MOOD_PERIOD, const.ENTITY_KEY_STREAK, const.ENTITY_KEY_LEDGER)
        )
        for pet_id in self.pet_manager.get_user()[const.DATA_USER_PET_IDS]:
            keys.update(
                f"{prefix}{pet_id}"
                for prefix in (
                    const.ENTITY_PREFIX_PET,
                    const.ENTITY_PREFIX_PROGRESS,
                    const.ENTITY_PREFIX_QUEST,
                    const.ENTITY_PREFIX_SLEEP,
                )
            )
        keys.discard(const.ENTITY_KEY_USER)
        await sync.async_refresh(sorted(keys))

        for pet_id in self.owned_pet_ids:
            if pet_id not in known:
                self.pet_manager.announce_pet(pet_id)

    def _apply_lazy_transitions(self) -> None:
        """Apply every deadline that has passed."""
        owned = self.owned_pet_ids
        for pet_id in owned:
            self.sleep_manager.tick(pet_id)
            self.quest_manager.get_quest(pet_id)
        self.mood_manager.ensure_current_period(owned)

    def _build_snapshot(self) -> dict[str, Any]:
        """Return coordinator data for entities."""
        return {
            "pets": {pet_id: self.get_pet_status(pet_id) for pet_id in self.owned_pet_ids},
            "balance": self.get_balance(),
            "streak": self.get_streak(),
        }

    async def async_sync_now(self) -> None:
        """Refresh immediately from the remote store."""
        await self.async_refresh()

    # -------------------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------------------

    @property
    def owned_pet_ids(self) -> list[str]:
        """Return the ids of every owned pet."""
        return self.pet_manager.owned_pet_ids()

    def get_mood(self, pet_id: str) -> str:
        """Return the pet's derived mood."""
        self.pet_manager.require_pet(pet_id, "get_mood")
        self.sleep_manager.tick(pet_id)
        return self.mood_manager.get_mood(pet_id)

    def get_quest_display(self, pet_id: str) -> QuestDisplay:
        """Return the pet's quest as shown in the UI."""
        self.pet_manager.require_pet(pet_id, "get_quest_display")
        return self.quest_manager.get_quest_display(pet_id)

    def get_sleep_state(self, pet_id: str) -> SleepDisplay:
        """Return the pet's sleep state."""
        self.pet_manager.require_pet(pet_id, "get_sleep_state")
        return self.sleep_manager.get_sleep_display(pet_id)

    def get_level(self, pet_id: str | None = None) -> LevelInfo:
        """Return the pet's level, or the user's level when pet_id is None."""
        if pet_id is not None:
            self.pet_manager.require_pet(pet_id, "get_level")
        return self.economy_manager.get_level(pet_id)

    def get_heart_fill(self, pet_id: str) -> int:
        """Return the pet's heart meter fill (0-100)."""
        self.pet_manager.require_pet(pet_id, "get_heart_fill")
        self.sleep_manager.tick(pet_id)
        return self.mood_manager.get_heart_fill(pet_id)

    def get_balance(self) -> int:
        """Return the user's spendable balance."""
        return self.economy_manager.get_balance()

    def get_streak(self) -> dict[str, Any]:
        """Return the user's streak details."""
        return self.streak_manager.get_streak()

    def get_weekly_hearts(self, week_key: str | None = None) -> dict[str, Any]:
        """Return one week's heart grid (the current week by default)."""
        return self.streak_manager.get_weekly_hearts(week_key)

    def get_pet_status(self, pet_id: str) -> dict[str, Any]:
        """Return a combined snapshot of one pet."""
        pet = self.pet_manager.require_pet(pet_id, "get_pet_status")
        sleep = self.get_sleep_state(pet_id)
        progress = self.pet_manager.get_progress(pet_id)
        return {
            const.DATA_PET_ID: pet_id,
            const.DATA_PET_DISPLAY_NAME: pet.get(const.DATA_PET_DISPLAY_NAME),
            const.DATA_PET_SPECIES: pet.get(const.DATA_PET_SPECIES),
            "mood": self.mood_manager.get_mood(pet_id),
            "quest": self.get_quest_display(pet_id),
            "sleep": sleep,
            "level": self.get_level(pet_id),
            "heart_fill": self.mood_manager.get_heart_fill(pet_id),
            const.DATA_PROGRESS_FEEDING_COUNT: progress[const.DATA_PROGRESS_FEEDING_COUNT],
            const.DATA_PROGRESS_ADVENTURE_COINS_TODAY: progress[
                const.DATA_PROGRESS_ADVENTURE_COINS_TODAY
            ],
            const.DATA_PROGRESS_TOTAL_COINS_EARNED: progress[
                const.DATA_PROGRESS_TOTAL_COINS_EARNED
            ],
            const.DATA_PROGRESS_COINS_BY_ACTIVITY: dict(
                progress[const.DATA_PROGRESS_COINS_BY_ACTIVITY]
            ),
            const.DATA_PROGRESS_MILESTONES: list(progress[const.DATA_PROGRESS_MILESTONES]),
            const.DATA_PROGRESS_CURRENT_ACCESSORY: progress[
                const.DATA_PROGRESS_CURRENT_ACCESSORY
            ],
        }

    # -------------------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------------------

    def _prepare_pet(self, pet_id: str) -> None:
        """Apply pending transitions before a command touches the pet."""
        self.pet_manager.require_pet(pet_id, "command")
        self.sleep_manager.tick(pet_id)
        self.mood_manager.ensure_current_period()

    def adopt_pet(
        self,
        species: str,
        display_name: str | None = None,
        pet_id: str | None = None,
    ) -> str:
        """Adopt a pet and return its id."""
        new_pet_id = self.pet_manager.adopt_pet(species, display_name, pet_id)
        self.mood_manager.ensure_current_period()
        self.async_update_listeners()
        return new_pet_id

    def rename_pet(self, pet_id: str, display_name: str) -> None:
        """Rename a pet."""
        self.pet_manager.rename_pet(pet_id, display_name)
        self.async_update_listeners()

    def feed(self, pet_id: str) -> int:
        """Feed a pet and return its feeding count since the last heart reset."""
        self._prepare_pet(pet_id)
        feeding_count = self.pet_manager.feed(pet_id)
        self.async_update_listeners()
        return feeding_count

    def earn_adventure_coins(
        self, pet_id: str, amount: int, activity: str | None = None
    ) -> int | None:
        """Credit coins earned by a pet during an activity.

        The activity defaults to the pet's current quest activity. An unknown
        activity is logged and the command ignored.

        Returns:
            The pet's new lifetime coin total, or None when ignored
        """
        self._prepare_pet(pet_id)
        activity = activity or self.quest_manager.current_activity(pet_id)
        try:
            total = self.economy_manager.earn_coins(pet_id, amount, activity)
        except InvalidActivityError as err:
            const.LOGGER.warning(
                "WARNING: Ignoring %s coins for pet %s: %s", amount, pet_id, err
            )
            return None
        self.async_update_listeners()
        return total

    def interact_sleep(self, pet_id: str) -> bool:
        """Register a sleep interaction; True if it counted."""
        self._prepare_pet(pet_id)
        counted = self.sleep_manager.interact(pet_id)
        self.async_update_listeners()
        return counted

    def purchase(self, item_id: str, cost: int) -> int:
        """Buy an item; returns the new spendable balance."""
        balance = self.economy_manager.purchase(item_id, cost)
        self.async_update_listeners()
        return balance

    def equip_accessory(self, pet_id: str, accessory: str | None) -> str | None:
        """Dress a pet in an unlocked accessory (None takes it off)."""
        worn = self.pet_manager.equip_accessory(pet_id, accessory)
        self.async_update_listeners()
        return worn

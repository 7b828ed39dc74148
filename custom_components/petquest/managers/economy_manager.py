"""Economy Manager - Coin ledger, levels and purchases.

This manager handles all coin-related operations:
- Earning coins for a pet (per-pet and per-user monotonic counters)
- Spending from the user's spendable balance (NSF checks)
- Purchases and owned items
- Pet and user level derivation, level-up events
- Milestone evaluation on lifetime counters

ARCHITECTURE:
- EconomyManager = STATEFUL coin operations through the sync layer
- EconomyEngine = Pure level math and ledger entries (STATELESS)
- QuestManager listens to COINS_EARNED to correlate coins with quest progress

Counters are changed with SyncManager.increment() so concurrent devices add
to, rather than overwrite, each other's earnings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.economy_engine import EconomyEngine, InsufficientBalanceError
from ..engines.quest_engine import QuestEngine
from ..utils.dt_utils import today_local
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import PetQuestCoordinator
    from ..type_defs import CoinLedger, LevelInfo

# Re-export exception for external use
__all__ = ["EconomyManager", "InsufficientBalanceError"]


class EconomyManager(BaseManager):
    """Manager for coin earnings, spending and levels.

    Responsibilities:
    - Maintain PetProgress coin counters and the user CoinLedger
    - Emit COINS_EARNED, COINS_SPENT, LEVEL_UP and MILESTONE_REACHED events
    - Record purchases

    NOT responsible for:
    - Quest progress (QuestManager listens to COINS_EARNED)
    - Heart resets (SleepManager)
    """

    def __init__(self, hass: HomeAssistant, coordinator: PetQuestCoordinator) -> None:
        """Initialize the EconomyManager.

        Args:
            hass: Home Assistant instance
            coordinator: The main PetQuest coordinator
        """
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Set up the EconomyManager.

        The ledger document is created lazily on the first earn or spend.
        """
        const.LOGGER.debug("EconomyManager async_setup complete for entry %s", self.entry_id)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_ledger(self) -> CoinLedger:
        """Return the user's coin ledger with defaults filled in."""
        ledger = self.sync.get(const.ENTITY_KEY_LEDGER) or {}
        ledger.setdefault(const.DATA_LEDGER_CUMULATIVE_COINS_EARNED, 0)
        ledger.setdefault(const.DATA_LEDGER_SPENDABLE_BALANCE, 0)
        ledger.setdefault(const.DATA_LEDGER_PURCHASES, [])
        ledger.setdefault(const.DATA_LEDGER_OWNED_ITEMS, [])
        return ledger  # type: ignore[return-value]

    def get_balance(self) -> int:
        """Return the user's spendable balance."""
        return int(self.get_ledger()[const.DATA_LEDGER_SPENDABLE_BALANCE])

    def get_cumulative_coins(self) -> int:
        """Return the user's lifetime coins earned."""
        return int(self.get_ledger()[const.DATA_LEDGER_CUMULATIVE_COINS_EARNED])

    def get_pet_total(self, pet_id: str) -> int:
        """Return a pet's lifetime coins earned."""
        progress = self.coordinator.pet_manager.get_progress(pet_id)
        return int(progress.get(const.DATA_PROGRESS_TOTAL_COINS_EARNED, 0))

    def get_level(self, pet_id: str | None = None) -> LevelInfo:
        """Return level details for a pet, or for the user when pet_id is None."""
        if pet_id is None:
            return EconomyEngine.level_info(self.get_cumulative_coins())
        return EconomyEngine.level_info(self.get_pet_total(pet_id))

    # =========================================================================
    # Earning
    # =========================================================================

    def earn_coins(self, pet_id: str, amount: int, activity: str) -> int:
        """Credit `amount` coins earned by `pet_id` during `activity`.

        Args:
            pet_id: The pet that earned the coins
            amount: Coins earned (must be >= 0)
            activity: Activity the coins came from

        Returns:
            The pet's new lifetime coin total

        Raises:
            ValueError: If the pet is unknown or amount is negative
            InvalidActivityError: If activity is not a known activity
        """
        pet_manager = self.coordinator.pet_manager
        pet_manager.require_pet(pet_id, "EconomyManager.earn_coins")
        EconomyEngine.validate_amount(amount)
        QuestEngine.validate_activity(activity)

        progress_key = f"{const.ENTITY_PREFIX_PROGRESS}{pet_id}"
        progress = pet_manager.get_progress(pet_id)
        old_pet_total = int(progress.get(const.DATA_PROGRESS_TOTAL_COINS_EARNED, 0))
        old_user_total = self.get_cumulative_coins()
        if amount == 0:
            return old_pet_total

        now = self.now_ms()
        today_iso = today_local(now).isoformat()
        increments = {
            const.DATA_PROGRESS_TOTAL_COINS_EARNED: amount,
            const.DATA_PROGRESS_ADVENTURE_COINS_TODAY: amount,
            f"{const.DATA_PROGRESS_COINS_BY_ACTIVITY}.{activity}": amount,
            const.DATA_PROGRESS_TOTAL_ADVENTURES: 1,
        }
        patch: dict[str, Any] = {}
        daily = progress.get(const.DATA_PROGRESS_DAILY_COINS) or {}
        if daily.get(const.DATA_PROGRESS_DAILY_COINS_DATE) == today_iso:
            increments[
                f"{const.DATA_PROGRESS_DAILY_COINS}.{const.DATA_PROGRESS_DAILY_COINS_AMOUNT}"
            ] = amount
        else:
            patch[const.DATA_PROGRESS_DAILY_COINS] = {
                const.DATA_PROGRESS_DAILY_COINS_DATE: today_iso,
                const.DATA_PROGRESS_DAILY_COINS_AMOUNT: amount,
            }

        new_pet_total = old_pet_total + amount
        old_pet_level = EconomyEngine.level_for(old_pet_total)
        new_pet_level = EconomyEngine.level_for(new_pet_total)
        patch[const.DATA_PROGRESS_CURRENT_LEVEL] = new_pet_level
        if new_pet_level > old_pet_level:
            patch[const.DATA_PROGRESS_LEVEL_UP_AT] = now

        self.sync.increment(progress_key, increments, patch)
        self.sync.increment(
            const.ENTITY_KEY_LEDGER,
            {
                const.DATA_LEDGER_CUMULATIVE_COINS_EARNED: amount,
                const.DATA_LEDGER_SPENDABLE_BALANCE: amount,
            },
        )

        const.LOGGER.debug(
            "EconomyManager.earn_coins: pet=%s amount=%s activity=%s total=%s",
            pet_id,
            amount,
            activity,
            new_pet_total,
        )

        self.emit(
            const.SIGNAL_SUFFIX_COINS_EARNED,
            pet_id=pet_id,
            amount=amount,
            activity=activity,
            total=new_pet_total,
        )

        if new_pet_level > old_pet_level:
            self._emit_level_up(pet_id, old_pet_level, new_pet_level)

        new_user_total = old_user_total + amount
        old_user_level = EconomyEngine.level_for(old_user_total)
        new_user_level = EconomyEngine.level_for(new_user_total)
        if new_user_level > old_user_level:
            self._emit_level_up(None, old_user_level, new_user_level)

        self.evaluate_milestones(pet_id)
        return new_pet_total

    def _emit_level_up(self, pet_id: str | None, old_level: int, new_level: int) -> None:
        """Log and emit a level-up for a pet (or the user when pet_id is None)."""
        const.LOGGER.info(
            "INFO: Level up for %s: %s -> %s",
            pet_id or "user",
            old_level,
            new_level,
        )
        self.emit(
            const.SIGNAL_SUFFIX_LEVEL_UP,
            pet_id=pet_id,
            old_level=old_level,
            new_level=new_level,
            unlocks=EconomyEngine.unlocks_for_level(new_level),
        )

    # =========================================================================
    # Spending
    # =========================================================================

    def spend(self, amount: int) -> int:
        """Remove `amount` coins from the spendable balance.

        Args:
            amount: Coins to spend (must be >= 0)

        Returns:
            The new spendable balance

        Raises:
            ValueError: If amount is negative
            InsufficientBalanceError: If amount exceeds the balance
        """
        return self._debit(amount)

    def purchase(self, item_id: str, cost: int) -> int:
        """Buy `item_id` for `cost` coins and record it in the ledger.

        Returns:
            The new spendable balance

        Raises:
            ValueError: If cost is negative
            InsufficientBalanceError: If cost exceeds the balance
        """
        return self._debit(cost, item_id=item_id)

    def _debit(self, amount: int, item_id: str | None = None) -> int:
        """Apply a spend, optionally recording it as a purchase."""
        EconomyEngine.validate_amount(amount)
        ledger = self.get_ledger()
        balance = int(ledger[const.DATA_LEDGER_SPENDABLE_BALANCE])
        try:
            EconomyEngine.validate_sufficient_balance(balance, amount)
        except InsufficientBalanceError:
            const.LOGGER.warning(
                "WARNING: EconomyManager: Insufficient balance %s for spend of %s",
                balance,
                amount,
            )
            raise

        new_balance = balance - amount
        patch: dict[str, Any] | None = None
        if item_id is not None:
            entry = EconomyEngine.create_purchase_entry(
                item_id, amount, new_balance, self.now_ms()
            )
            purchases = EconomyEngine.prune_purchases(
                [*ledger[const.DATA_LEDGER_PURCHASES], entry]
            )
            patch = {
                const.DATA_LEDGER_PURCHASES: purchases,
                const.DATA_LEDGER_OWNED_ITEMS: [
                    *ledger[const.DATA_LEDGER_OWNED_ITEMS],
                    item_id,
                ],
            }

        self.sync.increment(
            const.ENTITY_KEY_LEDGER,
            {const.DATA_LEDGER_SPENDABLE_BALANCE: -amount},
            patch,
        )
        const.LOGGER.debug(
            "EconomyManager: Spent %s (item=%s), balance %s -> %s",
            amount,
            item_id,
            balance,
            new_balance,
        )
        self.emit(
            const.SIGNAL_SUFFIX_COINS_SPENT,
            amount=amount,
            item_id=item_id,
            new_balance=new_balance,
        )
        return new_balance

    # =========================================================================
    # Milestones
    # =========================================================================

    def evaluate_milestones(self, pet_id: str) -> list[str]:
        """Record and announce milestones newly reached by a pet.

        Returns:
            The milestone ids reached by this call
        """
        progress = self.coordinator.pet_manager.get_progress(pet_id)
        metrics = {
            const.MILESTONE_METRIC_FEEDINGS: progress.get(const.DATA_PROGRESS_TOTAL_FEEDINGS, 0),
            const.MILESTONE_METRIC_ADVENTURES: progress.get(
                const.DATA_PROGRESS_TOTAL_ADVENTURES, 0
            ),
            const.MILESTONE_METRIC_COINS: progress.get(
                const.DATA_PROGRESS_TOTAL_COINS_EARNED, 0
            ),
            const.MILESTONE_METRIC_SLEEPS: progress.get(const.DATA_PROGRESS_TOTAL_SLEEPS, 0),
        }
        reached = list(progress.get(const.DATA_PROGRESS_MILESTONES, []))
        new = EconomyEngine.new_milestones(metrics, reached)
        if not new:
            return []

        self.sync.write(
            f"{const.ENTITY_PREFIX_PROGRESS}{pet_id}",
            {const.DATA_PROGRESS_MILESTONES: reached + new},
        )
        for milestone_id in new:
            const.LOGGER.info("INFO: Pet %s reached milestone '%s'", pet_id, milestone_id)
            self.emit(
                const.SIGNAL_SUFFIX_MILESTONE_REACHED,
                pet_id=pet_id,
                milestone_id=milestone_id,
            )
        return new

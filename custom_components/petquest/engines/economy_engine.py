"""Economy Engine - Pure logic for coins, levels and the purchase ledger.

This engine provides stateless, pure Python functions for:
- Level derivation from monotonic coin totals
- Level progress (threshold, next threshold, percent)
- Spendable balance validation (NSF checks)
- Purchase entry creation and pruning
- Milestone evaluation

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in EconomyManager.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const

if TYPE_CHECKING:
    from ..type_defs import LevelInfo, PurchaseEntry


class InsufficientBalanceError(Exception):
    """Raised when a spend would exceed the spendable balance.

    Attributes:
        current_balance: Spendable balance at the time of the request
        requested_amount: Amount the caller tried to spend
        shortfall: How much more is needed (requested - current)
    """

    def __init__(self, current_balance: int, requested_amount: int) -> None:
        """Initialize InsufficientBalanceError.

        Args:
            current_balance: Spendable balance at the time of the request
            requested_amount: Amount the caller tried to spend
        """
        self.current_balance = current_balance
        self.requested_amount = requested_amount
        self.shortfall = requested_amount - current_balance
        super().__init__(
            f"Insufficient balance: balance={current_balance}, "
            f"requested={requested_amount}, shortfall={self.shortfall}"
        )


class EconomyEngine:
    """Pure logic engine for coin and level calculations.

    All methods are static - no instance state. This enables easy unit testing
    without any Home Assistant mocking.

    Level table:
        level 1 at 0 coins, level 2 at 50, level 3 at 120, level 4 at 200,
        level n > 4 at 200 + 150 * (n - 4).
    """

    @staticmethod
    def coins_for_level(level: int) -> int:
        """Return the coin total at which `level` is reached.

        Args:
            level: Level number (values below 1 are treated as 1)

        Returns:
            Minimum total coins for that level
        """
        if level <= 1:
            return 0
        if level <= len(const.LEVEL_THRESHOLDS):
            return const.LEVEL_THRESHOLDS[level - 1]
        top = len(const.LEVEL_THRESHOLDS)
        return const.LEVEL_THRESHOLDS[-1] + const.LEVEL_STEP_AFTER_FOUR * (level - top)

    @staticmethod
    def level_for(total_coins: int) -> int:
        """Return the level for a non-negative coin total.

        Monotonic non-decreasing step function; level_for(0) == 1.

        Raises:
            ValueError: If total_coins is negative
        """
        if total_coins < 0:
            raise ValueError(f"Coin total must be non-negative, got {total_coins}")

        top = len(const.LEVEL_THRESHOLDS)
        if total_coins >= const.LEVEL_THRESHOLDS[-1]:
            extra = (total_coins - const.LEVEL_THRESHOLDS[-1]) // const.LEVEL_STEP_AFTER_FOUR
            return top + extra

        level = 1
        for index, threshold in enumerate(const.LEVEL_THRESHOLDS):
            if total_coins >= threshold:
                level = index + 1
        return level

    @staticmethod
    def level_info(total_coins: int) -> LevelInfo:
        """Build level progress details for a coin total.

        Returns:
            LevelInfo with the current level, surrounding thresholds, coins
            remaining and percent progress toward the next level.
        """
        level = EconomyEngine.level_for(total_coins)
        current_threshold = EconomyEngine.coins_for_level(level)
        next_threshold = EconomyEngine.coins_for_level(level + 1)
        span = next_threshold - current_threshold
        progress = (total_coins - current_threshold) / span * 100 if span else 100.0
        return {
            "level": level,
            "total_coins": total_coins,
            "current_threshold": current_threshold,
            "next_threshold": next_threshold,
            "coins_to_next_level": next_threshold - total_coins,
            "progress_percent": round(progress, 1),
        }

    @staticmethod
    def unlocks_for_level(level: int) -> list[str]:
        """Return every unlock earned at or below `level`, lowest level first."""
        unlocked: list[str] = []
        for unlock_level in sorted(const.LEVEL_UNLOCKS):
            if unlock_level <= level:
                unlocked.extend(const.LEVEL_UNLOCKS[unlock_level])
        return unlocked

    @staticmethod
    def accessories_for_level(level: int) -> list[str]:
        """Return the wearable unlocks earned at or below `level`."""
        return [
            unlock
            for unlock in EconomyEngine.unlocks_for_level(level)
            if unlock in const.ACCESSORIES
        ]

    @staticmethod
    def validate_amount(amount: int) -> None:
        """Reject negative coin amounts.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Coin amount must be non-negative, got {amount}")

    @staticmethod
    def validate_sufficient_balance(balance: int, cost: int) -> None:
        """Check that `balance` covers `cost`.

        Raises:
            InsufficientBalanceError: If cost exceeds balance
        """
        if cost > balance:
            raise InsufficientBalanceError(balance, cost)

    @staticmethod
    def create_purchase_entry(
        item_id: str, cost: int, balance_after: int, timestamp: int
    ) -> PurchaseEntry:
        """Create a purchase ledger entry."""
        return {
            "item_id": item_id,
            "cost": cost,
            "balance_after": balance_after,
            "timestamp": timestamp,
        }

    @staticmethod
    def prune_purchases(
        purchases: list[PurchaseEntry],
        max_entries: int = const.LEDGER_MAX_PURCHASES,
    ) -> list[PurchaseEntry]:
        """Keep only the newest `max_entries` purchases."""
        if len(purchases) <= max_entries:
            return purchases
        return purchases[-max_entries:]

    @staticmethod
    def new_milestones(
        metrics: dict[str, int], already_reached: list[str]
    ) -> list[str]:
        """Return milestone ids newly satisfied by `metrics`.

        Args:
            metrics: Lifetime counters keyed by MILESTONE_METRIC_* names
            already_reached: Milestone ids recorded earlier

        Returns:
            Milestone ids in definition order that are met and not yet recorded
        """
        reached = set(already_reached)
        return [
            milestone_id
            for metric, threshold, milestone_id in const.MILESTONES
            if milestone_id not in reached and metrics.get(metric, 0) >= threshold
        ]

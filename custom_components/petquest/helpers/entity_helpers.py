# File: helpers/entity_helpers.py
"""Entity and signal helper functions for PetQuest."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import PetQuestCoordinator

# ==============================================================================
# Event Signal Helpers (Manager Communication)
# ==============================================================================


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Each config entry gets its own signal namespace so two users configured
    on the same Home Assistant instance never see each other's events.

    Format: 'petquest_{entry_id}_{suffix}'

    Args:
        entry_id: ConfigEntry.entry_id from coordinator
        suffix: Signal suffix constant from const.py (e.g., SIGNAL_SUFFIX_COINS_EARNED)

    Returns:
        Fully qualified signal name scoped to this integration instance

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_COINS_EARNED)
        'petquest_abc123_coins_earned'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"


# ==============================================================================
# Entry Lookup (Services)
# ==============================================================================


def get_loaded_entry_ids(hass: HomeAssistant) -> list[str]:
    """Return ids of every loaded PetQuest entry.

    hass.data[DOMAIN] also holds the shared remote store, which is skipped.
    """
    domain_data = hass.data.get(const.DOMAIN) or {}
    return [
        entry_id
        for entry_id, entry_data in domain_data.items()
        if isinstance(entry_data, dict) and const.COORDINATOR in entry_data
    ]


def get_coordinator(
    hass: HomeAssistant, entry_id: str | None = None
) -> PetQuestCoordinator | None:
    """Return the coordinator for `entry_id`, or the first loaded entry's.

    Returns None when no matching entry is loaded.
    """
    entry_ids = get_loaded_entry_ids(hass)
    if entry_id is None:
        entry_id = next(iter(entry_ids), None)
    if entry_id is None or entry_id not in entry_ids:
        return None
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]

"""Base entity classes for PetQuest integration."""

from __future__ import annotations

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import PetQuestCoordinator


class PetQuestCoordinatorEntity(CoordinatorEntity[PetQuestCoordinator]):
    """Base entity class for PetQuest sensors with typed coordinator access."""

    @property
    def coordinator(self) -> PetQuestCoordinator:
        """Return typed coordinator.

        Uses object.__getattribute__ to access the private _coordinator attribute
        set by the parent CoordinatorEntity class.
        """
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: PetQuestCoordinator) -> None:
        """Set coordinator with proper typing."""
        object.__setattr__(self, "_coordinator", value)

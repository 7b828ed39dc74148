# File: helpers/__init__.py
"""Home Assistant-bound helper functions for PetQuest.

This module contains functions that REQUIRE Home Assistant dependencies or
the integration's own constants.

NOTE: Pure functions with no Home Assistant dependency belong in utils/.

Submodules:
    - entity_helpers: Instance-scoped dispatcher signal names
    - device_helpers: DeviceInfo construction for pets and the user profile

Usage:
    from .helpers.entity_helpers import get_event_signal
    from .helpers import device_helpers
"""

from . import device_helpers, entity_helpers

__all__ = ["device_helpers", "entity_helpers"]

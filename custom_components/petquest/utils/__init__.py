# File: utils/__init__.py
"""Pure Python utilities for PetQuest.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Millisecond clock, local calendar dates, weekday and week keys
    - merge_utils: Deep merge and dotted-path counter helpers for documents

Usage:
    from . import dt_utils
    from .merge_utils import deep_merge
"""

from . import dt_utils, merge_utils

__all__ = ["dt_utils", "merge_utils"]

# File: utils/merge_utils.py
"""Document merge helpers for PetQuest.

Pure Python functions with ZERO Home Assistant dependencies. Both the local
cache and the remote document store use these so "merge" means the same
thing on each side: nested dicts merge key by key, everything else
(including lists) is replaced.
"""

from __future__ import annotations

import copy
from typing import Any


def deep_merge(base: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict with `patch` merged over `base`.

    Args:
        base: Existing document (not modified)
        patch: Fields to apply; nested dicts are merged recursively

    Returns:
        Merged copy of the document
    """
    merged = copy.deepcopy(base)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_path(doc: dict[str, Any], path: str, default: Any = None) -> Any:
    """Read a dotted path ("coins_by_activity.house") from a document."""
    node: Any = doc
    for part in path.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def apply_increments(
    doc: dict[str, Any],
    increments: dict[str, int],
    non_negative: frozenset[str] = frozenset(),
) -> dict[str, Any]:
    """Return a copy of `doc` with numeric increments added at dotted paths.

    Missing counters start at 0. Paths whose final segment is listed in
    `non_negative` are clamped at 0.

    Example:
        apply_increments({"a": {"b": 1}}, {"a.b": 2, "c": 5})
        -> {"a": {"b": 3}, "c": 5}
    """
    result = copy.deepcopy(doc)
    for path, delta in increments.items():
        parts = path.split(".")
        node = result
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        leaf = parts[-1]
        new_value = int(node.get(leaf, 0) or 0) + delta
        if leaf in non_negative:
            new_value = max(0, new_value)
        node[leaf] = new_value
    return result


def merge_increments(
    existing: dict[str, int], increments: dict[str, int]
) -> dict[str, int]:
    """Sum two increment maps path by path."""
    merged = dict(existing)
    for path, delta in increments.items():
        merged[path] = merged.get(path, 0) + delta
    return merged

"""Dot-path access into price records."""

from __future__ import annotations

from typing import Any


def get_nested_value(record: Any, path: str) -> Any:
    """Read ``path`` (e.g. ``machine.title``) from ``record``.

    Returns ``""`` as soon as a segment is missing, ``None`` or not a mapping.
    """
    current = record
    for segment in path.split("."):
        if not isinstance(current, dict):
            return ""
        current = current.get(segment)
        if current is None:
            return ""
    return current


def set_nested_value(record: dict, path: str, value: Any) -> None:
    """Write ``value`` at ``path``, creating intermediate dicts as needed."""
    *parents, leaf = path.split(".")
    target = record
    for segment in parents:
        if not isinstance(target.get(segment), dict):
            target[segment] = {}
        target = target[segment]
    target[leaf] = value

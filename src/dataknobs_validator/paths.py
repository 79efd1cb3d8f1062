"""Dotted and wildcard path helpers for nested input bags.

A path such as ``user.profile.age`` descends nested mappings and, for
numeric segments, sequences. A ``*`` segment stands for every element of
the container at that point and is expanded against the data before a run.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .values import MISSING, is_sequence

WILDCARD = "*"


def split_path(path: str) -> list[str]:
    """Split a dotted path into its segments."""
    return path.split(".") if path else []


def has_wildcard(path: str) -> bool:
    """Check whether a path contains a ``*`` segment."""
    return WILDCARD in split_path(path)


def _step(container: Any, segment: str) -> Any:
    """Descend one segment, returning MISSING when it does not exist."""
    if isinstance(container, Mapping):
        if segment in container:
            return container[segment]
        if segment.isdigit() and int(segment) in container:
            return container[int(segment)]
        return MISSING
    if is_sequence(container) and segment.isdigit():
        index = int(segment)
        if index < len(container):
            return container[index]
    return MISSING


def lookup(data: Mapping[str, Any], path: str) -> tuple[bool, Any]:
    """Resolve a path against the data.

    A literal key equal to the whole path wins over nested traversal so flat
    bags with dotted keys keep working.

    Args:
        data: Input bag
        path: Field name, possibly dotted

    Returns:
        Tuple of (found, value); value is MISSING when not found
    """
    if path in data:
        return True, data[path]

    current: Any = data
    for segment in split_path(path):
        current = _step(current, segment)
        if current is MISSING:
            return False, MISSING
    return True, current


def _children(container: Any) -> list[str]:
    if isinstance(container, Mapping):
        return [str(key) for key in container]
    if is_sequence(container):
        return [str(index) for index in range(len(container))]
    return []


def expand(data: Mapping[str, Any], pattern: str) -> list[str]:
    """Expand every ``*`` segment of a pattern against the data.

    Segments after the last wildcard are kept even when the leaf does not
    exist, so ``users.*.email`` yields ``users.0.email`` for an element
    that has no email.

    Args:
        data: Input bag
        pattern: Field pattern

    Returns:
        Concrete paths in data order; the pattern itself when it has no
        wildcard; an empty list when a wildcard container is absent
    """
    if not has_wildcard(pattern):
        return [pattern]
    return _expand(data, [], split_path(pattern))


def _expand(data: Mapping[str, Any], prefix: list[str], remaining: list[str]) -> list[str]:
    if WILDCARD not in remaining:
        return [".".join(prefix + remaining)]

    index = remaining.index(WILDCARD)
    head = prefix + remaining[:index]
    found, container = lookup(data, ".".join(head)) if head else (True, data)
    if not found:
        return []

    paths: list[str] = []
    for key in _children(container):
        paths.extend(_expand(data, head + [key], remaining[index + 1:]))
    return paths

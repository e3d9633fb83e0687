"""Dot-path addressing into nested records.

A field path is a dot-separated list of keys where any key may carry one or
more bracketed list indices, e.g. ``"address.city"``, ``"items[2].label"``
or ``"grid[0][1]"``. Paths are parsed into :class:`PathSegment` tuples once
and cached, then used for both reading and writing.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from .exceptions import PathError

_SEGMENT = re.compile(r"^([^\[\]]*)((?:\[\d+\])*)$")
_INDEX = re.compile(r"\[(\d+)\]")

_MISSING = object()


@dataclass(frozen=True)
class PathSegment:
    """One dot-separated component of a field path."""

    key: str
    indices: tuple[int, ...] = ()

    def __str__(self) -> str:
        return self.key + "".join(f"[{i}]" for i in self.indices)


@lru_cache(maxsize=1024)
def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Parse a field path into segments.

    Args:
        path: Path such as ``"items[0].name"``

    Returns:
        Tuple of PathSegment objects

    Raises:
        PathError: If the path is empty, has an empty component, unbalanced
            brackets or a non-integer index
    """
    if not path:
        raise PathError(path, "path is empty")

    segments = []
    for part in path.split("."):
        match = _SEGMENT.match(part)
        if match is None:
            raise PathError(path, f"malformed component '{part}'")
        key, index_text = match.groups()
        indices = tuple(int(i) for i in _INDEX.findall(index_text))
        if not key and not indices:
            raise PathError(path, "empty component")
        segments.append(PathSegment(key, indices))
    return tuple(segments)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _get_key(current: Any, key: str) -> Any:
    if isinstance(current, Mapping):
        return current.get(key, _MISSING)
    if _is_sequence(current) and key.isdigit():
        return _get_index(current, int(key))
    if current is None or isinstance(current, (str, bytes, int, float, bool)):
        return _MISSING
    return getattr(current, key, _MISSING)


def _get_index(current: Any, index: int) -> Any:
    if _is_sequence(current) and 0 <= index < len(current):
        return current[index]
    return _MISSING


def get_nested_value(obj: Any, path: str, default: Any = None) -> Any:
    """Read the value at ``path``.

    Mappings are read by key, lists and tuples by index (bracketed or as a
    purely numeric key) and other objects by attribute.

    Args:
        obj: Record to read from
        path: Field path
        default: Returned when any step of the path is missing

    Returns:
        The value at the path or ``default``
    """
    current = obj
    for segment in parse_path(path):
        if segment.key:
            current = _get_key(current, segment.key)
            if current is _MISSING:
                return default
        for index in segment.indices:
            current = _get_index(current, index)
            if current is _MISSING:
                return default
    return current


def _steps(path: str) -> list[str | int]:
    steps: list[str | int] = []
    for segment in parse_path(path):
        if segment.key:
            steps.append(segment.key)
        steps.extend(segment.indices)
    return steps


def _child(container: Any, step: str | int, next_step: str | int, path: str) -> Any:
    """Return the child at ``step``, creating it to hold ``next_step``."""
    empty: Any = [] if isinstance(next_step, int) else {}
    if isinstance(step, int):
        if not isinstance(container, MutableSequence):
            raise PathError(path, f"cannot index into {type(container).__name__}")
        while len(container) <= step:
            container.append(None)
        if container[step] is None:
            container[step] = empty
        return container[step]

    if not isinstance(container, MutableMapping):
        raise PathError(path, f"cannot set key '{step}' on {type(container).__name__}")
    if container.get(step) is None:
        container[step] = empty
    return container[step]


def set_nested_value(obj: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Write ``value`` at ``path``, creating intermediate containers.

    Missing dict keys become dicts, or lists when the next step is an
    index; lists are padded with None up to the requested index.

    Raises:
        PathError: If an existing value on the path cannot hold the next step
    """
    steps = _steps(path)
    current: Any = obj
    for step, next_step in zip(steps, steps[1:]):
        current = _child(current, step, next_step, path)

    last = steps[-1]
    if isinstance(last, int):
        if not isinstance(current, MutableSequence):
            raise PathError(path, f"cannot index into {type(current).__name__}")
        while len(current) <= last:
            current.append(None)
        current[last] = value
    else:
        if not isinstance(current, MutableMapping):
            raise PathError(path, f"cannot set key '{last}' on {type(current).__name__}")
        current[last] = value

"""Value transforms applied to fields that passed validation.

A rule's ``transform`` entry is a sequence of transform references, applied
in order. A reference is either a callable taking the value, a
:class:`Transform` member, or a name. Names are looked up in the
validator's transform registry first and then among the built-ins, so a
registered transform can shadow a built-in of the same name.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any

from formcheck_common import Registry

from .rules import is_empty

logger = logging.getLogger(__name__)

TransformFn = Callable[[Any], Any]
TransformRef = str | Enum | TransformFn

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_TRUE_STRINGS = {"true", "yes", "1", "on"}
_FALSE_STRINGS = {"false", "no", "0", "off", ""}


def generate_slug(title: str | None) -> str:
    """Build a URL slug, e.g. ``"Hello, World!"`` -> ``"hello-world"``."""
    if not title:
        return ""
    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def sanitize_value(value: Any) -> Any:
    """Clean a single form value before it is stored.

    Strings are trimmed and stripped of control characters (newlines and
    tabs are kept), and blank strings become None. Lists lose their blank
    and falsy items. Other values are returned unchanged.
    """
    if isinstance(value, str):
        cleaned = _CONTROL_CHARS.sub("", value.strip())
        return cleaned or None
    if isinstance(value, list):
        return [item for item in value if item and str(item).strip()]
    return value


def sanitize_record(data: Mapping[str, Any]) -> dict[str, Any]:
    """Apply :func:`sanitize_value` to every top-level value of a record."""
    return {key: sanitize_value(value) for key, value in data.items()}


def _to_number(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    text = value.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return value


def _to_integer(value: Any) -> Any:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return value


def _to_boolean(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        return value
    return bool(value)


def _string_op(op: Callable[[str], str]) -> TransformFn:
    return lambda value: op(value) if isinstance(value, str) else value


class Transform(Enum):
    """Built-in transforms."""

    TRIM = "trim"
    LOWERCASE = "lowercase"
    UPPERCASE = "uppercase"
    CAPITALIZE = "capitalize"
    SLUGIFY = "slugify"
    SANITIZE = "sanitize"
    TO_NUMBER = "to_number"
    TO_INTEGER = "to_integer"
    TO_BOOLEAN = "to_boolean"
    NULL_IF_EMPTY = "null_if_empty"

    def __call__(self, value: Any) -> Any:
        return _BUILTINS[self](value)


_BUILTINS: dict[Transform, TransformFn] = {
    Transform.TRIM: _string_op(str.strip),
    Transform.LOWERCASE: _string_op(str.lower),
    Transform.UPPERCASE: _string_op(str.upper),
    Transform.CAPITALIZE: _string_op(str.capitalize),
    Transform.SLUGIFY: _string_op(generate_slug),
    Transform.SANITIZE: sanitize_value,
    Transform.TO_NUMBER: _to_number,
    Transform.TO_INTEGER: _to_integer,
    Transform.TO_BOOLEAN: _to_boolean,
    Transform.NULL_IF_EMPTY: lambda value: None if is_empty(value) else value,
}


def resolve_transform(
    ref: TransformRef, registry: Registry[TransformFn] | None = None
) -> TransformFn | None:
    """Resolve a transform reference to a callable, or None if unknown."""
    if isinstance(ref, Transform):
        return ref
    if isinstance(ref, str):
        if registry is not None:
            registered = registry.get_optional(ref)
            if registered is not None:
                return registered
        try:
            return Transform(ref)
        except ValueError:
            return None
    if callable(ref):
        return ref
    return None


def apply_transforms(
    value: Any,
    transforms: Iterable[TransformRef] | None,
    registry: Registry[TransformFn] | None = None,
) -> Any:
    """Run ``value`` through each transform in order.

    Unknown transform names are skipped with a warning.
    """
    if not transforms:
        return value

    result = value
    for ref in transforms:
        fn = resolve_transform(ref, registry)
        if fn is None:
            logger.warning(f"Unknown transform '{ref}', leaving value unchanged")
            continue
        result = fn(result)
    return result

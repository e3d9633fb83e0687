"""Rule descriptors: the constraints applied to a single field.

A :class:`Rule` is immutable and normalized when it is built: regex
patterns are compiled, type names become :class:`FieldType` members, date
bounds are parsed and scalar ``custom``/``transform`` entries become tuples.
Malformed definitions therefore fail when the schema is created rather
than in the middle of a validation run.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, fields
from datetime import date, datetime
from enum import Enum
from typing import Any

from .exceptions import SchemaError
from .formats import to_datetime

logger = logging.getLogger(__name__)


class FieldType(Enum):
    """Runtime shapes a rule can require."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    DATE = "date"

    @property
    def article(self) -> str:
        """Indefinite article used in messages ("an array", "a number")."""
        return "an" if self.value[0] in "aeiou" else "a"


# camelCase spellings used by front-end schema definitions
KEY_ALIASES = {
    "validateEmpty": "validate_empty",
    "minLength": "min_length",
    "maxLength": "max_length",
    "patternMessage": "pattern_message",
    "minItems": "min_items",
    "maxItems": "max_items",
    "uniqueItems": "unique_items",
    "minDate": "min_date",
    "maxDate": "max_date",
    "allowFuture": "allow_future",
    "allowPast": "allow_past",
    "oneOf": "one_of",
    "validateAsync": "validate_async",
}


def is_empty(value: Any) -> bool:
    """Check whether a value counts as "not provided".

    None, blank strings, empty lists/tuples/sets and empty mappings are
    empty. Numbers (including 0), booleans (including False) and dates
    never are.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset, Mapping)):
        return len(value) == 0
    return False


def _as_tuple(value: Any) -> tuple:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class Rule:
    """Validation rule for one field.

    Constraint groups only apply to values of the matching shape: string
    constraints to strings, numeric constraints to numbers, array
    constraints to lists and date constraints when ``date`` is set or the
    type is ``date``.
    """

    required: bool | str = False
    validate_empty: bool = False
    type: FieldType | None = None

    # strings
    min_length: int | None = None
    max_length: int | None = None
    pattern: re.Pattern[str] | None = None
    pattern_message: str | None = None
    email: bool = False
    url: bool = False

    # numbers
    min: float | None = None
    max: float | None = None
    integer: bool = False
    positive: bool = False
    negative: bool = False

    # arrays
    min_items: int | None = None
    max_items: int | None = None
    unique_items: bool = False
    items: Rule | None = None

    # dates
    date: bool = False
    min_date: datetime | None = None
    max_date: datetime | None = None
    allow_future: bool | None = None
    allow_past: bool | None = None

    one_of: Sequence[Any] | Callable[[Any], Sequence[Any]] | None = None
    validate: Callable[[Any, Any], Any] | None = None
    validate_async: Callable[[Any, Any], Any] | None = None
    custom: tuple[str, ...] = ()
    transform: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        def set_(name: str, value: Any) -> None:
            object.__setattr__(self, name, value)

        if not isinstance(self.required, (bool, str)):
            set_("required", bool(self.required))

        if isinstance(self.type, str):
            try:
                set_("type", FieldType(self.type.lower()))
            except ValueError as e:
                raise SchemaError(
                    f"Unknown field type: {self.type}",
                    context={"type": self.type, "allowed": [t.value for t in FieldType]},
                ) from e

        if isinstance(self.pattern, str):
            try:
                set_("pattern", re.compile(self.pattern))
            except re.error as e:
                raise SchemaError(
                    f"Invalid pattern '{self.pattern}': {e}",
                    context={"pattern": self.pattern},
                ) from e

        for name in ("min_date", "max_date"):
            bound = getattr(self, name)
            if bound is not None and not isinstance(bound, datetime):
                set_(name, _parse_bound(name, bound))

        if isinstance(self.items, Mapping):
            set_("items", Rule.from_dict(self.items))

        if self.one_of is not None and not callable(self.one_of):
            set_("one_of", _as_tuple(self.one_of))

        for name in ("validate", "validate_async"):
            fn = getattr(self, name)
            if fn is not None and not callable(fn):
                raise SchemaError(f"Rule '{name}' must be callable", context={"rule": name})

        custom = _as_tuple(self.custom)
        if not all(isinstance(name, str) for name in custom):
            raise SchemaError("Rule 'custom' must name registered validators", context={"custom": custom})
        set_("custom", custom)

        set_("transform", _as_tuple(self.transform) if not callable(self.transform) else (self.transform,))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Rule:
        """Build a rule from a mapping.

        Keys may be snake_case or the camelCase spellings in
        :data:`KEY_ALIASES`. Unknown keys are ignored with a warning.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            name = KEY_ALIASES.get(key, key)
            if name not in known:
                logger.warning(f"Ignoring unknown rule key: {key}")
                continue
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Describe the rule, listing only attributes that differ from defaults."""
        described: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value == f.default:
                continue
            if isinstance(value, re.Pattern):
                value = value.pattern
            elif isinstance(value, Enum):
                value = value.value
            elif isinstance(value, Rule):
                value = value.to_dict()
            elif isinstance(value, datetime):
                value = value.isoformat()
            elif callable(value):
                value = getattr(value, "__name__", repr(value))
            elif isinstance(value, tuple):
                value = [
                    getattr(v, "value", None) or getattr(v, "__name__", None) or v
                    for v in value
                ]
            described[f.name] = value
        return described


def _parse_bound(name: str, bound: Any) -> datetime:
    if not isinstance(bound, (str, date)):
        raise SchemaError(f"Rule '{name}' must be a date or date string", context={name: bound})
    try:
        return to_datetime(bound)
    except ValueError as e:
        raise SchemaError(f"Invalid {name}: {bound}", context={name: bound}) from e

"""Schema: an ordered, immutable mapping of field path to rule.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Union

from .exceptions import SchemaError
from .paths import parse_path
from .rules import Rule

SchemaLike = Union["Schema", Mapping[str, Union[Rule, Mapping[str, Any]]]]


class Schema(Mapping[str, Rule]):
    """Declarative description of a record.

    Keys are field paths (``"email"``, ``"address.city"``,
    ``"items[0].name"``); values are :class:`Rule` objects. Iteration order
    is declaration order, which is also the order fields are validated in.

    Example:
        ```python
        schema = Schema({
            "email": {"required": True, "email": True},
            "age": {"type": "number", "min": 0, "max": 120},
        })
        ```
    """

    def __init__(self, fields: Mapping[str, Rule | Mapping[str, Any]] | None = None):
        """Initialize schema.

        Args:
            fields: Mapping of field path to Rule or rule dictionary

        Raises:
            SchemaError: If a path or rule is malformed
        """
        self._fields: dict[str, Rule] = {}
        for path, rule in (fields or {}).items():
            parse_path(path)
            self._fields[path] = _as_rule(path, rule)

    def __getitem__(self, path: str) -> Rule:
        return self._fields[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Schema({list(self._fields)})"

    def merge(self, *others: SchemaLike) -> Schema:
        """Return a new schema with ``others`` merged over this one.

        The merge is shallow: a field defined by a later schema replaces
        the earlier rule entirely.
        """
        return combine_schemas(self, *others)

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Describe the schema as plain dictionaries."""
        return {path: rule.to_dict() for path, rule in self._fields.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Rule | Mapping[str, Any]]) -> Schema:
        """Create a schema from a mapping of field path to rule definition."""
        return cls(data)


def _as_rule(path: str, rule: Any) -> Rule:
    if isinstance(rule, Rule):
        return rule
    if isinstance(rule, Mapping):
        return Rule.from_dict(rule)
    raise SchemaError(
        f"Rule for field '{path}' must be a Rule or a mapping, got {type(rule).__name__}",
        context={"field": path},
    )


def as_schema(schema: SchemaLike) -> Schema:
    """Return ``schema`` as a Schema, converting plain mappings."""
    if isinstance(schema, Schema):
        return schema
    if isinstance(schema, Mapping):
        return Schema(schema)
    raise SchemaError(f"Expected a schema mapping, got {type(schema).__name__}")


def combine_schemas(*schemas: SchemaLike) -> Schema:
    """Shallow right-biased merge of schemas.

    A field present in several schemas takes the rule from the last one;
    rules are never merged attribute by attribute.
    """
    combined: dict[str, Rule] = {}
    for schema in schemas:
        combined.update(as_schema(schema))
    return Schema(combined)

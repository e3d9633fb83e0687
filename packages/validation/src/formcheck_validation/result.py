"""Validation result type.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from formcheck_common import ValidationError

from .paths import set_nested_value

FieldErrors = str | list[str]


@dataclass
class ValidationResult:
    """Outcome of validating one record against a schema.

    ``errors`` maps each failing field to its messages: a list, or a single
    string when validation stopped at the first error or the failure came
    from an async rule. ``validated`` holds the transformed values of the
    fields that passed, keyed by field path, and is None whenever the
    record is invalid.
    """

    is_valid: bool
    errors: dict[str, FieldErrors] = field(default_factory=dict)
    validated: dict[str, Any] | None = None

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.is_valid

    @classmethod
    def from_fields(cls, errors: dict[str, FieldErrors], validated: dict[str, Any]) -> ValidationResult:
        """Build a result, dropping the projection when any field failed.

        Args:
            errors: Per-field errors collected during validation
            validated: Values of the fields that passed

        Returns:
            ValidationResult whose validity follows from ``errors``
        """
        is_valid = not errors
        return cls(is_valid=is_valid, errors=errors, validated=validated if is_valid else None)

    def error_for(self, field_name: str) -> str | None:
        """First error message for a field, or None if it passed."""
        errors = self.errors.get(field_name)
        if not errors:
            return None
        return errors if isinstance(errors, str) else errors[0]

    def nested(self) -> dict[str, Any]:
        """Validated projection with dotted field paths expanded into nested dicts.

        Returns:
            Nested dictionary, empty when the record is invalid
        """
        expanded: dict[str, Any] = {}
        for path, value in (self.validated or {}).items():
            set_nested_value(expanded, path, copy.deepcopy(value))
        return expanded

    def raise_for_errors(self) -> None:
        """Raise ValidationError if the record is invalid.

        Raises:
            ValidationError: With the per-field errors in its context
        """
        if not self.is_valid:
            fields = ", ".join(self.errors)
            raise ValidationError(
                f"Validation failed for: {fields}",
                context={"errors": dict(self.errors)},
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary (e.g. for a JSON response)."""
        return {
            "is_valid": self.is_valid,
            "errors": dict(self.errors),
            "validated": dict(self.validated) if self.validated is not None else None,
        }

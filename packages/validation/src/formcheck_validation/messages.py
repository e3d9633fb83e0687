"""Error message templates.

Templates use ``{name}`` placeholders that are substituted textually, so a
template may mention only some of the parameters it is given.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

DEFAULT_MESSAGES: dict[str, str] = {
    "required": "This field is required",
    "email": "Please enter a valid email address",
    "url": "Please enter a valid URL",
    "type": "Must be {type}",
    "min": "Must be at least {min}",
    "max": "Must be no more than {max}",
    "min_length": "Must be at least {min_length} characters",
    "max_length": "Must be no more than {max_length} characters",
    "pattern": "Invalid format",
    "one_of": "Must be one of: {values}",
    "integer": "Must be an integer",
    "positive": "Must be a positive number",
    "negative": "Must be a negative number",
    "custom": "Validation failed",
    "timeout": "Validation timed out",
}

# camelCase names accepted when overriding messages
MESSAGE_ALIASES = {
    "minLength": "min_length",
    "maxLength": "max_length",
    "oneOf": "one_of",
}


def build_message_table(overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    """Merge message overrides over the defaults."""
    table = dict(DEFAULT_MESSAGES)
    for key, template in (overrides or {}).items():
        table[MESSAGE_ALIASES.get(key, key)] = template
    return table


def render(template: str, params: Mapping[str, Any]) -> str:
    """Replace ``{name}`` placeholders with the matching parameter values."""
    message = template
    for key, value in params.items():
        message = message.replace(f"{{{key}}}", str(value))
    return message

"""Validator options and YAML configuration.

A configuration document has two optional sections:

```yaml
options:
  stop_on_first_error: false
  async_timeout: 2.5
  custom_messages:
    required: "{field} is required"
schemas:
  signup:
    email:
      required: true
      email: true
    age:
      type: number
      max: "${MAX_AGE:120}"
```

String values may reference environment variables as ``${VAR}``,
``${VAR:default}`` or ``${VAR:-default}``. A value that consists of a
single reference is converted to bool/int/float when it looks like one, so
``"${MAX_AGE:120}"`` becomes the integer 120.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from formcheck_common import ConfigurationError

from .schema import Schema

logger = logging.getLogger(__name__)

VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::(-)?([^}]*))?\}")

OPTION_ALIASES = {
    "stopOnFirstError": "stop_on_first_error",
    "customMessages": "custom_messages",
    "asyncTimeout": "async_timeout",
    "strictAsync": "strict_async",
}


@dataclass
class ValidatorOptions:
    """Settings for a SchemaValidator.

    Attributes:
        stop_on_first_error: Stop at the first failing field and keep only
            its first message
        custom_messages: Message templates overriding the defaults
        transforms: Named transforms available to rules
        debug: Log every field outcome at DEBUG level
        async_timeout: Seconds allowed for each async rule; None waits forever
        strict_async: Raise instead of warning when a rule with an async
            check is validated synchronously
    """

    stop_on_first_error: bool = False
    custom_messages: dict[str, str] = field(default_factory=dict)
    transforms: dict[str, Callable[[Any], Any]] = field(default_factory=dict)
    debug: bool = False
    async_timeout: float | None = None
    strict_async: bool = False

    def __post_init__(self) -> None:
        if self.async_timeout is not None and self.async_timeout <= 0:
            raise ConfigurationError(
                f"async_timeout must be positive, got {self.async_timeout}",
                context={"async_timeout": self.async_timeout},
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ValidatorOptions:
        """Create options from a mapping; unknown keys are ignored with a warning."""
        known = {f.name for f in dataclasses.fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                logger.warning(f"Ignoring unknown validator option: {key}")
                continue
            kwargs[name] = value
        return cls(**kwargs)

    def replace(self, **overrides: Any) -> ValidatorOptions:
        """Copy with the given non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **changes) if changes else self


@dataclass
class ValidatorConfig:
    """Parsed configuration document."""

    options: ValidatorOptions = field(default_factory=ValidatorOptions)
    schemas: dict[str, Schema] = field(default_factory=dict)


def _convert_type(value: str) -> str | int | float | bool:
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _lookup(match: re.Match[str]) -> str:
    name, dash, default = match.groups()
    if name in os.environ:
        return os.environ[name]
    if dash is not None or default is not None:
        return default or ""
    raise ConfigurationError(
        f"Environment variable '{name}' not found",
        context={"variable": name},
    )


def substitute_env_vars(value: Any) -> Any:
    """Recursively replace ``${VAR}`` references in strings, dicts and lists.

    Raises:
        ConfigurationError: If a referenced variable is unset and has no default
    """
    if isinstance(value, str):
        whole = VAR_PATTERN.fullmatch(value)
        if whole:
            return _convert_type(_lookup(whole))
        return VAR_PATTERN.sub(_lookup, value)
    if isinstance(value, dict):
        return {key: substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    return value


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file: {path}", context={"path": str(path)}) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}", context={"path": str(path)}) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration root must be a mapping, got {type(data).__name__}",
            context={"path": str(path)},
        )
    return data


class SchemaFactory:
    """Builds Schema objects from configuration.

    Configuration Options:
        name (str): Schema name, used in log messages
        fields: Either a mapping of field path to rule definition, or a
            list of rule definitions that each carry a ``name`` key

    Example Configuration:
        ```yaml
        name: profile
        fields:
          - name: email
            required: true
            email: true
          - name: role
            oneOf: [admin, contributor, standard]
        ```
    """

    def create(self, **config: Any) -> Schema:
        """Create a Schema instance from configuration.

        Raises:
            SchemaError: If a rule is malformed
            ConfigurationError: If ``fields`` has the wrong shape
        """
        name = config.get("name", "unnamed_schema")
        raw_fields = config.get("fields") or {}

        logger.info(f"Creating schema: {name}")

        if isinstance(raw_fields, Mapping):
            return Schema(raw_fields)

        if not isinstance(raw_fields, list):
            raise ConfigurationError(
                f"Schema '{name}' fields must be a mapping or a list",
                context={"schema": name},
            )

        fields_by_path: dict[str, Any] = {}
        for field_config in raw_fields:
            rule = dict(field_config)
            field_name = rule.pop("name", None)
            if not field_name:
                logger.warning(f"Field configuration in schema '{name}' missing 'name', skipping")
                continue
            fields_by_path[field_name] = rule
        return Schema(fields_by_path)


schema_factory = SchemaFactory()


def load_config(source: str | Path | Mapping[str, Any]) -> ValidatorConfig:
    """Load validator options and named schemas.

    Args:
        source: Path to a YAML file, or an already-parsed mapping

    Returns:
        ValidatorConfig with options and schemas

    Raises:
        ConfigurationError: If the file cannot be read or is malformed
    """
    if isinstance(source, Mapping):
        data = dict(source)
    else:
        data = _read_yaml(Path(source))
        logger.info(f"Loaded validator configuration from {source}")

    data = substitute_env_vars(data)

    options = ValidatorOptions.from_dict(data.get("options"))

    schemas_config = data.get("schemas") or {}
    if not isinstance(schemas_config, Mapping):
        raise ConfigurationError("'schemas' must be a mapping of schema name to fields")

    schemas = {
        name: schema_factory.create(name=name, fields=fields)
        for name, fields in schemas_config.items()
    }
    return ValidatorConfig(options=options, schemas=schemas)

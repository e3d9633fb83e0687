"""Schema validator: applies a Schema to a record field by field.

Example:
    ```python
    from formcheck_validation import SchemaValidator

    validator = SchemaValidator()
    result = validator.validate(
        {"email": "ok@x.com", "age": 30},
        {
            "email": {"required": True, "email": True},
            "age": {"type": "number", "min": 0, "max": 120},
        },
    )
    result.is_valid    # True
    result.validated   # {"email": "ok@x.com", "age": 30}
    ```

Invalid input never raises: failures are reported in
``ValidationResult.errors``. Exceptions are reserved for misuse such as an
unregistered schema name or registering a non-callable validator.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import date
from numbers import Integral, Real
from pathlib import Path
from typing import Any

from formcheck_common import ConfigurationError, Registry

from . import formats
from .config import ValidatorOptions, load_config
from .exceptions import InvalidValidatorError, SchemaNotFoundError
from .messages import build_message_table, render
from .paths import get_nested_value
from .result import FieldErrors, ValidationResult
from .rules import FieldType, Rule, is_empty
from .schema import Schema, SchemaLike, as_schema, combine_schemas
from .transforms import TransformFn, TransformRef, apply_transforms

logger = logging.getLogger(__name__)

CustomValidatorFn = Callable[[Any, Rule, Any], Any]


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _matches_type(value: Any, expected: FieldType) -> bool:
    if expected is FieldType.STRING:
        return isinstance(value, str)
    if expected is FieldType.NUMBER:
        return _is_number(value)
    if expected is FieldType.BOOLEAN:
        return isinstance(value, bool)
    if expected is FieldType.ARRAY:
        return isinstance(value, (list, tuple))
    if expected is FieldType.OBJECT:
        return isinstance(value, Mapping)
    return isinstance(value, date)


def _is_member(value: Any, allowed: Iterable[Any]) -> bool:
    """Membership where booleans only match booleans (True is not 1)."""
    return any(
        candidate == value and isinstance(candidate, bool) == isinstance(value, bool)
        for candidate in allowed
    )


class SchemaValidator:
    """Validates records against schemas.

    Each instance owns its own registries of custom validators, named
    schemas and named transforms, plus its message table. Registration is
    meant to happen while the validator is being set up; validation itself
    only reads this state.

    Args:
        options: Validator options; keyword overrides are applied on top
        **overrides: Individual option overrides, e.g.
            ``stop_on_first_error=True``
    """

    def __init__(self, options: ValidatorOptions | None = None, **overrides: Any):
        base = options or ValidatorOptions()
        self.options = base.replace(**overrides) if overrides else base
        self.messages = build_message_table(self.options.custom_messages)
        self.custom_validators: Registry[CustomValidatorFn] = Registry("custom_validators")
        self.schemas: Registry[Schema] = Registry("schemas")
        self.transforms: Registry[TransformFn] = Registry("transforms")
        for name, fn in self.options.transforms.items():
            self.register_transform(name, fn)

    @classmethod
    def from_config(cls, source: str | Path | Mapping[str, Any]) -> SchemaValidator:
        """Build a validator from a YAML file or mapping and register its schemas."""
        config = load_config(source)
        validator = cls(config.options)
        for name, schema in config.schemas.items():
            validator.register_schema(name, schema)
        return validator

    # ------------------------------------------------------------------
    # Whole-record validation
    # ------------------------------------------------------------------

    def validate(
        self,
        data: Any,
        schema: SchemaLike,
        stop_on_first_error: bool | None = None,
    ) -> ValidationResult:
        """Validate a record against a schema.

        Args:
            data: Record to validate, usually a (nested) mapping
            schema: Schema or mapping of field path to rule
            stop_on_first_error: Overrides the instance option for this call

        Returns:
            ValidationResult; ``validated`` is None when any field failed
        """
        stop = self._stop_on_first_error(stop_on_first_error)
        errors: dict[str, FieldErrors] = {}
        validated: dict[str, Any] = {}

        for field_name, rule in as_schema(schema).items():
            value = get_nested_value(data, field_name)
            field_errors = self.validate_field(value, rule, data, field_name)

            if field_errors:
                errors[field_name] = field_errors[0] if stop else field_errors
                self._debug(field_name, field_errors)
                if stop:
                    break
            else:
                validated[field_name] = self.apply_transforms(value, rule.transform)
                self._debug(field_name, None)

        return ValidationResult.from_fields(errors, validated)

    async def validate_async(
        self,
        data: Any,
        schema: SchemaLike,
        stop_on_first_error: bool | None = None,
    ) -> ValidationResult:
        """Validate a record, including each rule's ``validate_async`` check.

        Fields are processed one after another in schema order. A field's
        async check only runs when its synchronous checks passed, and its
        failure is reported as a single string. Exceptions and timeouts in
        async checks become field errors.
        """
        stop = self._stop_on_first_error(stop_on_first_error)
        errors: dict[str, FieldErrors] = {}
        validated: dict[str, Any] = {}

        for field_name, rule in as_schema(schema).items():
            value = get_nested_value(data, field_name)
            field_errors = self._check_field(value, rule, data, field_name)

            if field_errors:
                errors[field_name] = field_errors[0] if stop else field_errors
            elif rule.validate_async is not None:
                message = await self._run_async_check(rule, value, data, field_name)
                if message is None:
                    validated[field_name] = self.apply_transforms(value, rule.transform)
                else:
                    errors[field_name] = message
            else:
                validated[field_name] = self.apply_transforms(value, rule.transform)

            self._debug(field_name, errors.get(field_name))
            if stop and errors:
                break

        return ValidationResult.from_fields(errors, validated)

    def validate_many(
        self,
        records: Iterable[Any],
        schema: SchemaLike,
        stop_on_error: bool = False,
    ) -> list[ValidationResult]:
        """Validate several records against one schema.

        Args:
            records: Records to validate
            schema: Schema to apply
            stop_on_error: Stop after the first invalid record

        Returns:
            One ValidationResult per validated record
        """
        resolved = as_schema(schema)
        results = []
        for record in records:
            result = self.validate(record, resolved)
            results.append(result)
            if not result.is_valid and stop_on_error:
                break
        return results

    # ------------------------------------------------------------------
    # Single-field validation
    # ------------------------------------------------------------------

    def validate_field(
        self,
        value: Any,
        rule: Rule | Mapping[str, Any],
        full_record: Any = None,
        field_name: str = "",
    ) -> list[str]:
        """Run a rule's synchronous checks against one value.

        Args:
            value: Field value
            rule: Rule or rule dictionary
            full_record: Whole record, passed to ``one_of`` callables and
                custom validators
            field_name: Field path, available to the ``required`` message

        Returns:
            Error messages in check order; empty if the value passed

        Raises:
            ConfigurationError: If the rule has an async check and the
                ``strict_async`` option is set
        """
        if not isinstance(rule, Rule):
            rule = Rule.from_dict(rule)

        if rule.validate_async is not None:
            if self.options.strict_async:
                raise ConfigurationError(
                    f"Field '{field_name}' has an async rule; use validate_async",
                    context={"field": field_name},
                )
            logger.warning(
                f"Async validation detected for '{field_name}'. Use validate_async instead."
            )

        return self._check_field(value, rule, full_record, field_name)

    def _check_field(self, value: Any, rule: Rule, full_record: Any, field_name: str) -> list[str]:
        """Every synchronous check of a rule, shared by both entry points."""
        errors: list[str] = []
        empty = is_empty(value)

        if rule.required and empty:
            if isinstance(rule.required, str):
                errors.append(rule.required)
            else:
                errors.append(self.get_message("required", field=field_name))
            if not rule.validate_empty:
                return errors

        if not rule.required and empty:
            return errors

        if rule.type is not None and not _matches_type(value, rule.type):
            errors.append(
                self.get_message("type", type=f"{rule.type.article} {rule.type.value}")
            )

        if isinstance(value, str):
            errors.extend(self._string_errors(value, rule))

        if _is_number(value):
            errors.extend(self._number_errors(value, rule))

        if isinstance(value, (list, tuple)) or rule.type is FieldType.ARRAY:
            errors.extend(self._array_errors(value, rule, full_record, field_name))

        if rule.date or rule.type is FieldType.DATE:
            outcome = formats.validate_date(
                value,
                min_date=rule.min_date,
                max_date=rule.max_date,
                allow_future=rule.allow_future is not False,
                allow_past=rule.allow_past is not False,
            )
            if outcome is not True:
                errors.append(outcome)

        if rule.one_of is not None:
            allowed = rule.one_of(full_record) if callable(rule.one_of) else rule.one_of
            if not _is_member(value, allowed):
                errors.append(
                    self.get_message("one_of", values=", ".join(str(v) for v in allowed))
                )

        if rule.validate is not None:
            outcome = rule.validate(value, full_record)
            if outcome is not True:
                errors.append(self._failure_message(outcome))

        for name in rule.custom:
            check = self.custom_validators.get_optional(name)
            if check is None:
                logger.warning(f"Custom validator '{name}' is not registered, skipping")
                continue
            outcome = check(value, rule, full_record)
            if outcome is not True:
                errors.append(self._failure_message(outcome))

        return errors

    def _string_errors(self, value: str, rule: Rule) -> list[str]:
        errors = []
        if rule.min_length and len(value) < rule.min_length:
            errors.append(self.get_message("min_length", min_length=rule.min_length))
        if rule.max_length and len(value) > rule.max_length:
            errors.append(self.get_message("max_length", max_length=rule.max_length))
        if rule.pattern is not None and not rule.pattern.search(value):
            errors.append(rule.pattern_message or self.get_message("pattern"))
        if rule.email:
            outcome = formats.validate_email(value)
            if outcome is not True:
                errors.append(outcome)
        if rule.url:
            outcome = formats.validate_url(value)
            if outcome is not True:
                errors.append(outcome)
        return errors

    def _number_errors(self, value: Real, rule: Rule) -> list[str]:
        errors = []
        if rule.min is not None and value < rule.min:
            errors.append(self.get_message("min", min=rule.min))
        if rule.max is not None and value > rule.max:
            errors.append(self.get_message("max", max=rule.max))
        if rule.integer and not (isinstance(value, Integral) or float(value).is_integer()):
            errors.append(self.get_message("integer"))
        if rule.positive and value <= 0:
            errors.append(self.get_message("positive"))
        if rule.negative and value >= 0:
            errors.append(self.get_message("negative"))
        return errors

    def _array_errors(self, value: Any, rule: Rule, full_record: Any, field_name: str) -> list[str]:
        errors = []
        outcome = formats.validate_array(
            value,
            min_length=rule.min_items or 0,
            max_length=rule.max_items,
            unique_items=rule.unique_items,
        )
        if outcome is not True:
            errors.append(outcome)

        if rule.items is not None and isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                item_errors = self._check_field(item, rule.items, full_record, f"{field_name}[{index}]")
                if item_errors:
                    errors.append(f"Item {index + 1}: {', '.join(item_errors)}")
        return errors

    async def _run_async_check(self, rule: Rule, value: Any, data: Any, field_name: str) -> str | None:
        """Await a rule's async check; return its error message or None."""
        check = rule.validate_async
        if check is None:
            return None
        try:
            outcome = check(value, data)
            if inspect.isawaitable(outcome):
                if self.options.async_timeout is not None:
                    outcome = await asyncio.wait_for(outcome, self.options.async_timeout)
                else:
                    outcome = await outcome
        except asyncio.TimeoutError:
            logger.warning(
                f"Async validation of '{field_name}' timed out after {self.options.async_timeout}s"
            )
            return self.get_message("timeout")
        except Exception as e:
            logger.debug(f"Async validation of '{field_name}' raised {e!r}")
            return str(e) or self.get_message("custom")

        if outcome is True:
            return None
        return self._failure_message(outcome)

    def _failure_message(self, outcome: Any) -> str:
        if isinstance(outcome, str) and outcome:
            return outcome
        if outcome is False or outcome is None or outcome == "":
            return self.get_message("custom")
        return str(outcome)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def is_empty(value: Any) -> bool:
        """See :func:`formcheck_validation.rules.is_empty`."""
        return is_empty(value)

    def get_message(self, rule_name: str, **params: Any) -> str:
        """Render the message template for ``rule_name``."""
        template = self.messages.get(rule_name, f"Validation failed: {rule_name}")
        return render(template, params)

    def apply_transforms(self, value: Any, transforms: Iterable[TransformRef] | None) -> Any:
        """Apply transforms in order, resolving names against this validator."""
        return apply_transforms(value, transforms, self.transforms)

    def _stop_on_first_error(self, override: bool | None) -> bool:
        return self.options.stop_on_first_error if override is None else override

    def _debug(self, field_name: str, errors: FieldErrors | None) -> None:
        if self.options.debug:
            if errors:
                logger.debug(f"Field '{field_name}' failed: {errors}")
            else:
                logger.debug(f"Field '{field_name}' passed")

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_validator(self, name: str, validator: CustomValidatorFn) -> None:
        """Register a named validator usable through a rule's ``custom`` entry.

        The validator is called as ``validator(value, rule, full_record)``
        and returns True or an error message. Registering an existing name
        replaces it.

        Raises:
            InvalidValidatorError: If ``validator`` is not callable
        """
        if not callable(validator):
            raise InvalidValidatorError(
                "Validator must be a function",
                context={"name": name, "type": type(validator).__name__},
            )
        self.custom_validators.register(name, validator, allow_overwrite=True)

    def register_transform(self, name: str, transform: TransformFn) -> None:
        """Register a named transform usable in a rule's ``transform`` entry.

        Raises:
            InvalidValidatorError: If ``transform`` is not callable
        """
        if not callable(transform):
            raise InvalidValidatorError(
                "Transform must be a function",
                context={"name": name, "type": type(transform).__name__},
            )
        self.transforms.register(name, transform, allow_overwrite=True)

    def register_schema(self, name: str, schema: SchemaLike) -> Schema:
        """Register a schema for reuse by name.

        Returns:
            The registered Schema
        """
        resolved = as_schema(schema)
        self.schemas.register(name, resolved, allow_overwrite=True)
        logger.info(f"Registered schema '{name}' with {len(resolved)} fields")
        return resolved

    def get_schema(self, name: str) -> Schema:
        """Look up a registered schema.

        Raises:
            SchemaNotFoundError: If no schema is registered under ``name``
        """
        schema = self.schemas.get_optional(name)
        if schema is None:
            raise SchemaNotFoundError(name, self.schemas.list_keys())
        return schema

    def validate_with_schema(
        self, data: Any, schema_name: str, stop_on_first_error: bool | None = None
    ) -> ValidationResult:
        """Validate against a registered schema.

        Raises:
            SchemaNotFoundError: If the schema was never registered
        """
        return self.validate(data, self.get_schema(schema_name), stop_on_first_error)

    async def validate_with_schema_async(
        self, data: Any, schema_name: str, stop_on_first_error: bool | None = None
    ) -> ValidationResult:
        """Async counterpart of :meth:`validate_with_schema`."""
        return await self.validate_async(data, self.get_schema(schema_name), stop_on_first_error)

    # ------------------------------------------------------------------
    # Schema composition
    # ------------------------------------------------------------------

    def create_schema_validator(self, schema: SchemaLike) -> Callable[..., ValidationResult]:
        """Bind a schema, returning ``fn(data, stop_on_first_error=None)``."""
        resolved = as_schema(schema)

        def validate_bound(data: Any, stop_on_first_error: bool | None = None) -> ValidationResult:
            return self.validate(data, resolved, stop_on_first_error)

        return validate_bound

    @staticmethod
    def combine_schemas(*schemas: SchemaLike) -> Schema:
        """See :func:`formcheck_validation.schema.combine_schemas`."""
        return combine_schemas(*schemas)

    def conditional_schema(
        self,
        condition: Callable[[Any], bool],
        true_schema: SchemaLike,
        false_schema: SchemaLike | None = None,
    ) -> Callable[[Any], ValidationResult]:
        """Pick a schema per record.

        Returns:
            ``fn(data)`` validating ``data`` against ``true_schema`` when
            ``condition(data)`` is truthy and ``false_schema`` (default: no
            fields) otherwise
        """
        when_true = as_schema(true_schema)
        when_false = as_schema(false_schema or {})

        def validate_conditionally(data: Any) -> ValidationResult:
            return self.validate(data, when_true if condition(data) else when_false)

        return validate_conditionally

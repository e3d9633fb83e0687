"""Exception hierarchy shared by the formcheck packages.

Every error raised by formcheck derives from :class:`FormcheckError`, which
carries an optional ``context`` dictionary with structured details about the
failure (field names, schema names, offending values).

Only programmer mistakes are raised as exceptions. Records that fail
validation are reported through ``ValidationResult`` objects instead; the
:class:`ValidationError` below exists for callers that prefer to raise once
they have looked at a result.

Example:
    ```python
    from formcheck_common.exceptions import FormcheckError, NotFoundError

    try:
        validator.validate_with_schema(data, "signup")
    except NotFoundError as e:
        logger.error(f"{e} (available: {e.context.get('available_keys')})")
    ```

Package-Specific Extensions:
    ```python
    class SchemaError(ConfigurationError):
        '''Raised when a schema definition is malformed.'''
    ```
"""

from typing import Any, Dict


class FormcheckError(Exception):
    """Base exception for all formcheck packages.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context
        details: Alternative to context (takes precedence when both are given)
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class ValidationError(FormcheckError):
    """Raised when a record is rejected and the caller asked for an exception.

    The per-field errors are available as ``context["errors"]``.

    Example:
        ```python
        result = validator.validate(data, schema)
        result.raise_for_errors()  # raises ValidationError when invalid
        ```
    """

    @property
    def errors(self) -> Dict[str, Any]:
        """Per-field errors attached to this exception."""
        return self.context.get("errors", {})


class ConfigurationError(FormcheckError):
    """Raised when a schema, rule, option or configuration file is invalid.

    Common scenarios include:
    - Malformed regular expressions in a rule
    - Unknown field types
    - Non-callable objects registered as validators
    - Unreadable configuration files
    """


class NotFoundError(FormcheckError):
    """Raised when a named item is not registered.

    Example:
        ```python
        raise NotFoundError(
            "Schema 'signup' not found",
            context={"key": "signup", "available_keys": ["login"]}
        )
        ```
    """


class OperationError(FormcheckError):
    """Raised when an operation cannot be carried out in the current state.

    Used by :class:`~formcheck_common.registry.Registry` when a name is
    registered twice without ``allow_overwrite``.
    """


__all__ = [
    "FormcheckError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
]

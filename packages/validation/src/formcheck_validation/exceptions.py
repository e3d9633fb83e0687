"""Exceptions raised by the validation package.

Built on the common exception framework from formcheck_common. None of
these are raised for records that simply fail validation; they signal a
misconfigured schema or a misuse of the validator API.
"""

from formcheck_common import ConfigurationError, NotFoundError


class SchemaError(ConfigurationError):
    """Raised when a schema or rule definition is malformed."""

    pass


class PathError(SchemaError):
    """Raised when a field path cannot be parsed."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Invalid field path '{path}': {reason}",
            context={"path": path, "reason": reason},
        )


class InvalidValidatorError(ConfigurationError, TypeError):
    """Raised when a non-callable is registered as a validator or transform."""

    pass


class SchemaNotFoundError(NotFoundError):
    """Raised when validating against a schema name that was never registered."""

    def __init__(self, name: str, available: list[str]):
        super().__init__(
            f'Schema "{name}" not found',
            context={"key": name, "available_keys": available},
        )

"""Shared building blocks for the formcheck packages.

- **Exceptions**: exception hierarchy with context support
- **Registry**: thread-safe registry of named items

Example:
    ```python
    from formcheck_common import FormcheckError, Registry

    registry = Registry[str]("labels")
    registry.register("email", "E-mail address")
    ```
"""

from formcheck_common.exceptions import (
    ConfigurationError,
    FormcheckError,
    NotFoundError,
    OperationError,
    ValidationError,
)
from formcheck_common.registry import Registry

__version__ = "0.2.0"

__all__ = [
    "__version__",
    # Exceptions
    "FormcheckError",
    "ValidationError",
    "ConfigurationError",
    "NotFoundError",
    "OperationError",
    # Registry
    "Registry",
]

"""Schema validation for form and CRUD records.

A schema maps field paths to rules; a SchemaValidator applies it to a record
and returns a ValidationResult with per-field errors and a cleaned,
transformed projection of the fields that passed.

Example:
    ```python
    from formcheck_validation import SchemaValidator

    validator = SchemaValidator()
    result = validator.validate(form_data, {
        "email": {"required": True, "email": True},
        "tags": {"type": "array", "max_items": 5, "items": {"type": "string"}},
        "address.city": {"required": True, "transform": ["trim"]},
    })
    if not result:
        render_errors(result.errors)
    ```
"""

from .common_schemas import COMMON_SCHEMAS, ENTITY_SCHEMAS, register_common_schemas
from .config import (
    SchemaFactory,
    ValidatorConfig,
    ValidatorOptions,
    load_config,
    schema_factory,
    substitute_env_vars,
)
from .exceptions import (
    InvalidValidatorError,
    PathError,
    SchemaError,
    SchemaNotFoundError,
)
from .formats import (
    FileInfo,
    PasswordRule,
    combine_validators,
    create_validator,
    detect_card_type,
    format_file_size,
    validate_array,
    validate_credit_card,
    validate_date,
    validate_email,
    validate_file,
    validate_number,
    validate_password,
    validate_phone,
    validate_url,
    validate_username,
)
from .messages import DEFAULT_MESSAGES
from .paths import PathSegment, get_nested_value, parse_path, set_nested_value
from .result import ValidationResult
from .rules import FieldType, Rule, is_empty
from .schema import Schema, as_schema, combine_schemas
from .transforms import Transform, apply_transforms, generate_slug, sanitize_record, sanitize_value
from .validator import SchemaValidator

__version__ = "0.2.0"

__all__ = [
    # Core
    "SchemaValidator",
    "ValidationResult",
    "Schema",
    "Rule",
    "FieldType",
    "as_schema",
    "combine_schemas",
    "is_empty",
    # Paths
    "PathSegment",
    "parse_path",
    "get_nested_value",
    "set_nested_value",
    # Transforms
    "Transform",
    "apply_transforms",
    "generate_slug",
    "sanitize_value",
    "sanitize_record",
    # Format validators
    "FileInfo",
    "PasswordRule",
    "validate_email",
    "validate_url",
    "validate_phone",
    "validate_password",
    "validate_username",
    "validate_credit_card",
    "detect_card_type",
    "validate_date",
    "validate_file",
    "validate_array",
    "validate_number",
    "create_validator",
    "combine_validators",
    "format_file_size",
    # Schemas
    "COMMON_SCHEMAS",
    "ENTITY_SCHEMAS",
    "register_common_schemas",
    # Configuration
    "ValidatorOptions",
    "ValidatorConfig",
    "SchemaFactory",
    "schema_factory",
    "load_config",
    "substitute_env_vars",
    "DEFAULT_MESSAGES",
    # Errors
    "SchemaError",
    "PathError",
    "InvalidValidatorError",
    "SchemaNotFoundError",
]

"""Tests for ValidationResult."""

import pytest

from formcheck_common import ValidationError
from formcheck_validation import SchemaValidator
from formcheck_validation.result import ValidationResult


class TestValidationResult:
    """Test the result type."""

    def test_from_fields_valid(self):
        """Test a result without errors keeps its projection."""
        result = ValidationResult.from_fields({}, {"a": 1})
        assert result.is_valid
        assert bool(result) is True
        assert result.validated == {"a": 1}

    def test_from_fields_invalid(self):
        """Test any error drops the projection."""
        result = ValidationResult.from_fields({"b": ["Bad"]}, {"a": 1})
        assert not result
        assert result.validated is None

    def test_error_for(self):
        """Test reading a field's first message from either error shape."""
        result = ValidationResult.from_fields({"a": ["First", "Second"], "b": "Only"}, {})
        assert result.error_for("a") == "First"
        assert result.error_for("b") == "Only"
        assert result.error_for("c") is None

    def test_nested(self):
        """Test expanding dotted paths."""
        result = ValidationResult.from_fields({}, {"user.name": "Ann", "user.tags[1]": "x", "id": 3})
        assert result.nested() == {"user": {"name": "Ann", "tags": [None, "x"]}, "id": 3}
        assert ValidationResult(is_valid=False).nested() == {}

    def test_nested_does_not_modify_input(self):
        """Test expanding a container and a path inside it leaves the record untouched."""
        validator = SchemaValidator()
        data = {"tags": ["a"]}
        schema = {"tags": {"type": "array"}, "tags[0]": {"transform": ["uppercase"]}}

        nested = validator.validate(data, schema).nested()

        assert nested == {"tags": ["A"]}
        assert data == {"tags": ["a"]}

    def test_raise_for_errors(self):
        """Test converting an invalid result into an exception."""
        ValidationResult.from_fields({}, {}).raise_for_errors()

        result = ValidationResult.from_fields({"email": ["Invalid email address"]}, {})
        with pytest.raises(ValidationError) as exc_info:
            result.raise_for_errors()

        assert str(exc_info.value) == "Validation failed for: email"
        assert exc_info.value.errors == {"email": ["Invalid email address"]}

    def test_to_dict(self):
        """Test the plain dictionary form."""
        assert ValidationResult.from_fields({}, {"a": 1}).to_dict() == {
            "is_valid": True,
            "errors": {},
            "validated": {"a": 1},
        }

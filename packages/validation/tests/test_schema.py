"""Tests for Schema construction and composition."""

import pytest

from formcheck_validation.exceptions import PathError, SchemaError
from formcheck_validation.rules import Rule
from formcheck_validation.schema import Schema, as_schema, combine_schemas


class TestSchema:
    """Test the Schema mapping."""

    def test_converts_rule_dicts(self):
        """Test rule dictionaries become Rule objects."""
        schema = Schema({"email": {"required": True, "email": True}})
        assert isinstance(schema["email"], Rule)
        assert schema["email"].email is True

    def test_keeps_declaration_order(self):
        """Test fields iterate in declaration order."""
        schema = Schema({"b": {}, "a": {}, "c.d": {}})
        assert list(schema) == ["b", "a", "c.d"]
        assert len(schema) == 3

    def test_rejects_bad_path(self):
        """Test malformed field paths fail at construction."""
        with pytest.raises(PathError):
            Schema({"items[": {}})

    def test_rejects_non_mapping_rule(self):
        """Test rules must be Rule objects or mappings."""
        with pytest.raises(SchemaError):
            Schema({"email": "required"})

    def test_to_dict(self):
        """Test describing a schema."""
        schema = Schema({"age": {"type": "number", "max": 120}})
        assert schema.to_dict() == {"age": {"type": "number", "max": 120}}

    def test_as_schema(self):
        """Test conversion of mappings and passthrough of schemas."""
        schema = Schema({"a": {}})
        assert as_schema(schema) is schema
        assert list(as_schema({"x": {}})) == ["x"]
        with pytest.raises(SchemaError):
            as_schema(["a"])


class TestCombineSchemas:
    """Test schema merging."""

    def test_right_biased_shallow_merge(self):
        """Test a later rule replaces the earlier one entirely."""
        base = {"email": {"required": True, "email": True}, "name": {"required": True}}
        override = {"email": {"max_length": 10}}

        combined = combine_schemas(base, override)

        assert list(combined) == ["email", "name"]
        assert combined["email"].max_length == 10
        assert combined["email"].required is False
        assert combined["email"].email is False

    def test_merge_method(self):
        """Test Schema.merge adds new fields."""
        merged = Schema({"a": {}}).merge({"b": {"required": True}})
        assert list(merged) == ["a", "b"]

    def test_inputs_are_not_modified(self):
        """Test combining leaves the source schemas unchanged."""
        first = Schema({"a": {"required": True}})
        combine_schemas(first, {"a": {}})
        assert first["a"].required is True

"""Tests for rule construction and normalization."""

import logging
import re
from datetime import date, datetime

import pytest

from formcheck_validation.exceptions import SchemaError
from formcheck_validation.rules import FieldType, Rule, is_empty
from formcheck_validation.transforms import Transform


class TestIsEmpty:
    """Test the notion of an empty value."""

    @pytest.mark.parametrize("value", [None, "", "   ", [], (), {}, set()])
    def test_empty_values(self, value):
        """Test values that count as not provided."""
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, 0.0, False, "x", [0], {"a": None}, date(2024, 1, 1)])
    def test_non_empty_values(self, value):
        """Test zero, False and dates are real values."""
        assert not is_empty(value)


class TestRuleNormalization:
    """Test that rules are normalized when created."""

    def test_type_name_becomes_enum(self):
        """Test type strings are converted to FieldType members."""
        assert Rule(type="Number").type is FieldType.NUMBER

    def test_unknown_type_raises(self):
        """Test an unknown type name is rejected."""
        with pytest.raises(SchemaError) as exc_info:
            Rule(type="strin")
        assert "strin" in str(exc_info.value)

    def test_pattern_is_compiled(self):
        """Test pattern strings are compiled once."""
        rule = Rule(pattern=r"^\d+$")
        assert isinstance(rule.pattern, re.Pattern)
        assert rule.pattern.search("123")

    def test_invalid_pattern_raises(self):
        """Test a bad regex fails at construction."""
        with pytest.raises(SchemaError):
            Rule(pattern="[")

    def test_date_bounds_are_parsed(self):
        """Test date bound strings and dates become datetimes."""
        rule = Rule(min_date="2020-01-01", max_date=date(2021, 6, 30))
        assert rule.min_date == datetime(2020, 1, 1)
        assert rule.max_date == datetime(2021, 6, 30)

    def test_invalid_date_bound_raises(self):
        """Test an unparseable date bound is rejected."""
        with pytest.raises(SchemaError):
            Rule(min_date="not a date")

    def test_items_mapping_becomes_rule(self):
        """Test nested item rules are converted."""
        rule = Rule(items={"type": "number", "min": 0})
        assert isinstance(rule.items, Rule)
        assert rule.items.type is FieldType.NUMBER

    def test_scalar_custom_and_transform_become_tuples(self):
        """Test single custom and transform entries are wrapped."""
        rule = Rule(custom="even", transform="trim")
        assert rule.custom == ("even",)
        assert rule.transform == ("trim",)

    def test_callable_transform_is_wrapped(self):
        """Test a single callable transform is wrapped, not iterated."""
        rule = Rule(transform=Transform.TRIM)
        assert rule.transform == (Transform.TRIM,)

    def test_one_of_list_becomes_tuple(self):
        """Test static allowed values are stored as a tuple."""
        assert Rule(one_of=["a", "b"]).one_of == ("a", "b")

    def test_one_of_callable_is_kept(self):
        """Test an allowed-values function is kept as is."""
        def allowed(record):
            return ["a"]

        assert Rule(one_of=allowed).one_of is allowed

    def test_non_callable_validate_raises(self):
        """Test validate must be callable."""
        with pytest.raises(SchemaError):
            Rule(validate="not callable")

    def test_rule_is_immutable(self):
        """Test rules cannot be modified after creation."""
        rule = Rule(required=True)
        with pytest.raises(AttributeError):
            rule.required = False


class TestRuleFromDict:
    """Test building rules from dictionaries."""

    def test_camel_case_aliases(self):
        """Test camelCase keys map to rule attributes."""
        rule = Rule.from_dict({"minLength": 2, "maxItems": 3, "oneOf": ["x"], "validateEmpty": True})
        assert rule.min_length == 2
        assert rule.max_items == 3
        assert rule.one_of == ("x",)
        assert rule.validate_empty is True

    def test_unknown_keys_are_ignored(self, caplog):
        """Test unknown keys are dropped with a warning."""
        with caplog.at_level(logging.WARNING):
            rule = Rule.from_dict({"required": True, "colour": "blue"})

        assert rule.required is True
        assert "colour" in caplog.text

    def test_to_dict_lists_non_defaults(self):
        """Test describing a rule."""
        rule = Rule.from_dict({"required": True, "type": "string", "pattern": "^a"})
        assert rule.to_dict() == {"required": True, "type": "string", "pattern": "^a"}

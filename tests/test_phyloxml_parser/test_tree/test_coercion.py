"""Tests for scalar coercion."""

import math

import pytest

from phyloxml_parser.shared import MalformedScalarError
from phyloxml_parser.tree.coercion import (
    attribute_as_bool,
    attribute_as_float,
    attribute_as_int,
    parse_bool,
    parse_float,
    parse_int,
)


class TestParseInt:
    """Test integer coercion."""

    @pytest.mark.parametrize("text,expected", [
        ("0", 0),
        ("42", 42),
        ("-7", -7),
        ("+3", 3),
        ("  12\n", 12),
    ])
    def test_valid(self, text, expected):
        """Test valid integer forms."""
        assert parse_int(text, "length") == expected

    @pytest.mark.parametrize("text", ["", "1.5", "abc", "1e3", "--1", "0x10", "\u0661\u0662"])
    def test_invalid(self, text):
        """Test malformed integers raise with context."""
        with pytest.raises(MalformedScalarError) as exc_info:
            parse_int(text, "length")

        assert exc_info.value.field == "length"
        assert exc_info.value.target_type == "int"
        assert exc_info.value.text == text


class TestParseFloat:
    """Test float coercion."""

    @pytest.mark.parametrize("text,expected", [
        ("1.5", 1.5),
        ("-0.25", -0.25),
        ("3", 3.0),
        (".5", 0.5),
        ("5.", 5.0),
        ("1e-3", 0.001),
        ("+2.5E2", 250.0),
        (" 0.1 ", 0.1),
    ])
    def test_valid(self, text, expected):
        """Test decimal and scientific notation."""
        assert parse_float(text, "branch_length") == pytest.approx(expected)

    def test_special_values(self):
        """Test XML Schema special values."""
        assert parse_float("INF", "value") == math.inf
        assert parse_float("+INF", "value") == math.inf
        assert parse_float("-INF", "value") == -math.inf
        assert math.isnan(parse_float("NaN", "value"))

    @pytest.mark.parametrize("text", [
        "abc", "", "1.2.3", "inf", "nan", "Infinity", "1,5", "e5", "\u0661.5",
    ])
    def test_invalid(self, text):
        """Test malformed floats raise with context."""
        with pytest.raises(MalformedScalarError) as exc_info:
            parse_float(text, "branch_length")

        assert exc_info.value.field == "branch_length"
        assert exc_info.value.target_type == "float"


class TestParseBool:
    """Test boolean coercion."""

    def test_valid(self):
        """Test exactly true and false are accepted."""
        assert parse_bool("true", "rooted") is True
        assert parse_bool("false", "rooted") is False

    @pytest.mark.parametrize("text", ["True", "FALSE", "1", "0", "yes", "", " true", "false\n"])
    def test_invalid(self, text):
        """Test other spellings are rejected."""
        with pytest.raises(MalformedScalarError) as exc_info:
            parse_bool(text, "rooted")

        assert exc_info.value.target_type == "bool"


class TestAttributeHelpers:
    """Test attribute lookup helpers."""

    def test_absent_attributes_are_none(self):
        """Test missing attributes produce None, not defaults."""
        assert attribute_as_int({}, "length") is None
        assert attribute_as_float({}, "distance") is None
        assert attribute_as_bool({}, "collapse") is None

    def test_present_attributes_are_coerced(self):
        """Test present attributes are converted."""
        attributes = {"length": "120", "distance": "0.5", "collapse": "true"}

        assert attribute_as_int(attributes, "length") == 120
        assert attribute_as_float(attributes, "distance") == 0.5
        assert attribute_as_bool(attributes, "collapse") is True

    def test_malformed_attribute_names_field(self):
        """Test the attribute name is reported as the field."""
        with pytest.raises(MalformedScalarError) as exc_info:
            attribute_as_float({"branch_length": "abc"}, "branch_length")

        assert exc_info.value.field == "branch_length"

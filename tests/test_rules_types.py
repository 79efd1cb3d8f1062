"""
Tests for primitive type rules.
"""

from decimal import Decimal

import pytest

from dataknobs_validator.rules.types import BooleanRule, IntegerRule


def passes(make, value, rules):
    return make({"f": value}, {"f": rules}).passes()


class TestTypes:
    """Test string, integer and numeric."""

    @pytest.mark.parametrize("value,expected", [("text", True), ("", True), (5, False), (["a"], False)])
    def test_string(self, make, value, expected):
        """Test text detection."""
        assert passes(make, value, "string") is expected

    @pytest.mark.parametrize("value,expected", [
        (5, True),
        ("-12", True),
        (3.0, True),
        (Decimal("4"), True),
        ("3.5", False),
        ("1e3", False),
        (" 7", False),
        (True, False),
    ])
    def test_integer(self, make, value, expected):
        """Test integer values and integer text."""
        assert passes(make, value, "integer") is expected

    def test_int_alias(self, make):
        """Test that int behaves like integer."""
        assert passes(make, "12", "int")
        assert not passes(make, "x", "int")

    def test_integer_strict(self, make):
        """Test that strict mode rejects text."""
        assert not passes(make, "12", "integer:strict")
        assert passes(make, 12, "integer:strict")
        assert IntegerRule(strict=True).passes("f", 12)

    @pytest.mark.parametrize("value,expected", [
        ("2.5", True),
        ("-7", True),
        (1.25, True),
        (".5", False),
        ("abc", False),
        (False, False),
    ])
    def test_numeric(self, make, value, expected):
        """Test numbers and numeric text."""
        assert passes(make, value, "numeric") is expected

    def test_numeric_strict(self, make):
        """Test that strict mode rejects text."""
        assert not passes(make, "2.5", "numeric:strict")
        assert passes(make, 2.5, "numeric:strict")


class TestBoolean:
    """Test boolean and its modes."""

    @pytest.mark.parametrize("value,expected", [
        (True, True),
        (False, True),
        (0, True),
        (1, True),
        ("true", True),
        ("0", True),
        (2, False),
        ("yes", False),
        ("TRUE", False),
    ])
    def test_default_mode(self, make, value, expected):
        """Test the default accepted tokens."""
        assert passes(make, value, "boolean") is expected

    def test_strict_mode(self, make):
        """Test that strict mode accepts only booleans."""
        assert passes(make, False, "boolean:strict")
        assert not passes(make, "true", "boolean:strict")

    def test_loose_mode(self):
        """Test the loose tokens."""
        rule = BooleanRule(loose=True)
        assert rule.passes("f", "Yes")
        assert rule.passes("f", "off")
        assert not rule.passes("f", "maybe")


class TestCollections:
    """Test array and json."""

    def test_array(self, make):
        """Test sequences, sets and mappings."""
        assert passes(make, [1, 2], "array")
        assert passes(make, (1,), "array")
        assert passes(make, {"a": 1}, "array")
        assert not passes(make, "abc", "array")

    def test_array_allowed_keys(self, make):
        """Test restricting mapping keys."""
        assert passes(make, {"name": "x"}, "array:name,email")
        assert not passes(make, {"name": "x", "admin": True}, "array:name,email")
        assert passes(make, ["admin"], "array:name")

    @pytest.mark.parametrize("value,expected", [
        ('{"a": 1}', True),
        ("[1, 2]", True),
        ("42", True),
        ("{bad", False),
        ({"a": 1}, False),
        ("", False),
    ])
    def test_json(self, make, value, expected):
        """Test JSON documents in text form."""
        assert passes(make, value, "json") is expected


class TestAcceptedDeclined:
    """Test the truth-set rules."""

    @pytest.mark.parametrize("value", ["yes", "on", "1", "true", 1, True])
    def test_accepted(self, make, value):
        """Test accepted values."""
        assert passes(make, value, "accepted")
        assert not passes(make, value, "declined")

    @pytest.mark.parametrize("value", ["no", "off", "0", "false", 0, False])
    def test_declined(self, make, value):
        """Test declined values."""
        assert passes(make, value, "declined")
        assert not passes(make, value, "accepted")

    def test_accepted_absent(self, make):
        """Test that accepted runs for absent fields."""
        errors = make({}, {"terms": "accepted"}).errors()
        assert errors.first("terms") == "The terms field must be accepted."

    def test_accepted_if(self, make):
        """Test the conditional forms."""
        rules = {"terms": "accepted_if:plan,pro"}
        assert make({"plan": "pro"}, rules).fails()
        assert make({"plan": "free"}, rules).passes()
        assert make({"plan": "pro", "terms": "on"}, rules).passes()

    def test_declined_if(self, make):
        """Test declined when a sibling matches."""
        rules = {"marketing": "declined_if:age_group,minor"}
        assert make({"age_group": "minor", "marketing": "yes"}, rules).fails()
        assert make({"age_group": "adult", "marketing": "yes"}, rules).passes()

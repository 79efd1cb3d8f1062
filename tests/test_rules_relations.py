"""
Tests for rules relating a value to siblings or literal lists.
"""

import pytest

from dataknobs_validator import RuleArgumentError
from dataknobs_validator.rules.relations import DistinctRule


def passes(make, value, rules, **siblings):
    return make({"f": value, **siblings}, {"f": rules}).passes()


class TestSiblingEquality:
    """Test same, different and confirmed."""

    def test_same(self, make):
        """Test equality with a sibling."""
        assert passes(make, "x", "same:g", g="x")
        assert not passes(make, "x", "same:g", g="y")
        assert not passes(make, "x", "same:g")

    def test_different(self, make):
        """Test inequality with existing siblings."""
        assert passes(make, "x", "different:g,h", g="y")
        assert not passes(make, "x", "different:g,h", h="x")

    def test_same_message(self, make):
        """Test the other placeholder."""
        errors = make({"f": "x", "new_password": "y"}, {"f": "same:new_password"}).errors()
        assert errors.first("f") == "The f field must match new password."

    def test_confirmed_default_field(self, make):
        """Test the conventional confirmation field."""
        rules = {"password": "confirmed"}
        assert make({"password": "a", "password_confirmation": "a"}, rules).passes()
        assert make({"password": "a", "password_confirmation": "b"}, rules).fails()
        assert make({"password": "a"}, rules).fails()

    def test_confirmed_custom_field(self, make):
        """Test naming the confirmation field."""
        rules = {"email": "confirmed:repeat_email"}
        assert make({"email": "a@b.c", "repeat_email": "a@b.c"}, rules).passes()

    def test_confirmed_wildcard(self, make):
        """Test confirmation of concrete wildcard fields."""
        data = {"keys": [{"pin": "1", "pin_confirmation": "1"}, {"pin": "2", "pin_confirmation": "3"}]}
        errors = make(data, {"keys.*.pin": "confirmed"}).errors()
        assert errors.keys() == ["keys.1.pin"]


class TestMembership:
    """Test in and not_in."""

    @pytest.mark.parametrize("value,expected", [
        ("a", True),
        ("c", False),
        (["a", "b"], True),
        (["a", "c"], False),
        ({"a": 1}, False),
    ])
    def test_in(self, make, value, expected):
        """Test scalar and sequence membership."""
        assert passes(make, value, "in:a,b") is expected

    def test_in_compares_text(self, make):
        """Test numbers and booleans against literal text."""
        assert passes(make, 1, "in:1,2")
        assert passes(make, True, "in:true,false")

    def test_not_in(self, make):
        """Test exclusion."""
        assert passes(make, "c", "not_in:a,b")
        assert not passes(make, "a", "not_in:a,b")
        assert passes(make, ["c", "d"], "not_in:a,b")
        assert not passes(make, ["c", "a"], "not_in:a,b")


class TestDistinct:
    """Test distinct and its modes."""

    def test_duplicates(self, make):
        """Test plain duplicates."""
        assert passes(make, ["a", "b", "c"], "distinct")
        assert not passes(make, ["a", "b", "a"], "distinct")

    def test_loose_comparison(self, make):
        """Test that text renderings collide by default."""
        assert not passes(make, ["1", 1], "distinct")
        assert not passes(make, [1, 1.0], "distinct")

    def test_strict(self, make):
        """Test that strict mode compares types too."""
        assert passes(make, ["1", 1], "distinct:strict")
        assert passes(make, [1, 1.0], "distinct:strict")
        assert not passes(make, [1, 1], "distinct:strict")

    def test_ignore_case(self, make):
        """Test case folding."""
        assert passes(make, ["A", "a"], "distinct")
        assert not passes(make, ["A", "a"], "distinct:ignore_case")

    def test_nil_elements(self):
        """Test that nil elements collide with each other."""
        assert not DistinctRule().passes("f", [None, None])
        assert DistinctRule().passes("f", [None, "x"])

    def test_non_sequence(self, make):
        """Test values that are not sequences."""
        assert not passes(make, "abc", "distinct")
        assert not passes(make, {"a": 1}, "distinct")

    def test_unknown_mode(self, factory):
        """Test rejecting unknown modes."""
        with pytest.raises(RuleArgumentError):
            factory.parse_field("distinct:fuzzy")

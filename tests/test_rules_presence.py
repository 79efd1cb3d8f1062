"""
Tests for presence and conditional-presence rules.
"""

import pytest

from dataknobs_validator import RuleArgumentError
from dataknobs_validator.rules.presence import RequiredRule, RequiredIfRule


def fails(make, data, rules, field="f"):
    return make(data, {field: rules}).errors().has(field)


class TestRequired:
    """Test required and filled."""

    @pytest.mark.parametrize("value,expected", [
        ("x", False),
        (0, False),
        (False, False),
        ("", True),
        ("   ", True),
        ([], True),
        ({}, True),
        (None, True),
    ])
    def test_required(self, make, value, expected):
        """Test which values count as empty."""
        assert fails(make, {"f": value}, "required") is expected

    def test_required_absent(self, make):
        """Test an absent field."""
        assert fails(make, {}, "required")

    def test_required_without_engine(self):
        """Test using the rule on its own."""
        rule = RequiredRule()
        assert rule.passes("f", "value")
        assert not rule.passes("f", None)

    def test_prohibited(self, make):
        """Test prohibited values."""
        assert not fails(make, {}, "prohibited")
        assert not fails(make, {"f": ""}, "prohibited")
        assert fails(make, {"f": "x"}, "prohibited")


class TestMarkers:
    """Test rules that only carry policy."""

    @pytest.mark.parametrize("marker", ["nullable", "sometimes", "bail"])
    def test_markers_always_pass(self, make, marker):
        """Test that markers never fail a field."""
        assert not fails(make, {"f": 123}, marker)
        assert not fails(make, {}, marker)


class TestSiblingValue:
    """Test rules conditioned on another field's value."""

    def test_required_if(self, make):
        """Test the condition triggering and not triggering."""
        rules = "required_if:kind,company,partner"
        assert fails(make, {"kind": "company"}, rules)
        assert fails(make, {"kind": "partner", "f": ""}, rules)
        assert not fails(make, {"kind": "person"}, rules)
        assert not fails(make, {"kind": "company", "f": "ACME"}, rules)

    def test_required_if_compares_text(self, make):
        """Test that numbers and booleans compare by rendering."""
        assert fails(make, {"count": 3}, "required_if:count,3")
        assert fails(make, {"flag": True}, "required_if:flag,true")

    def test_required_if_null(self, make):
        """Test the null literal."""
        assert fails(make, {}, "required_if:other,null")
        assert fails(make, {"other": None}, "required_if:other,null")
        assert not fails(make, {"other": "x"}, "required_if:other,null")

    def test_required_unless(self, make):
        """Test the negated condition."""
        rules = "required_unless:role,guest"
        assert not fails(make, {"role": "guest"}, rules)
        assert fails(make, {"role": "admin"}, rules)

    def test_prohibited_if_and_unless(self, make):
        """Test prohibition conditioned on a sibling."""
        assert fails(make, {"kind": "free", "f": "x"}, "prohibited_if:kind,free")
        assert not fails(make, {"kind": "paid", "f": "x"}, "prohibited_if:kind,free")
        assert fails(make, {"kind": "paid", "f": "x"}, "prohibited_unless:kind,free")
        assert not fails(make, {"kind": "free", "f": "x"}, "prohibited_unless:kind,free")

    def test_missing_if_and_unless(self, make):
        """Test absence conditioned on a sibling."""
        assert fails(make, {"mode": "auto", "f": None}, "missing_if:mode,auto")
        assert not fails(make, {"mode": "auto"}, "missing_if:mode,auto")
        assert fails(make, {"mode": "manual", "f": 1}, "missing_unless:mode,auto")
        assert not fails(make, {"mode": "auto", "f": 1}, "missing_unless:mode,auto")

    def test_present_if_and_unless(self, make):
        """Test presence conditioned on a sibling."""
        assert fails(make, {"mode": "manual"}, "present_if:mode,manual")
        assert not fails(make, {"mode": "manual", "f": ""}, "present_if:mode,manual")
        assert fails(make, {"mode": "auto"}, "present_unless:mode,manual")
        assert not fails(make, {"mode": "manual"}, "present_unless:mode,manual")

    def test_message_placeholders(self, make):
        """Test :other and :value in messages."""
        errors = make({"payment_method": "paypal"}, {"email": "required_if:payment_method,paypal"}).errors()
        assert errors.first("email") == "The email field is required when payment method is paypal."

    def test_needs_two_arguments(self, factory):
        """Test the argument check."""
        with pytest.raises(RuleArgumentError):
            factory.parse_field("required_if:kind")

    def test_standalone_with_data(self):
        """Test the rule outside an engine with data installed by hand."""
        rule = RequiredIfRule("kind", ["company"])
        rule.set_data({"kind": "company"})
        assert not rule.passes("vat", "")
        rule.set_data({"kind": "person"})
        assert rule.passes("vat", "")


class TestSiblingTruth:
    """Test rules conditioned on a sibling being accepted or declined."""

    def test_required_if_accepted(self, make):
        """Test the accepted condition."""
        assert fails(make, {"terms": "yes"}, "required_if_accepted:terms")
        assert not fails(make, {"terms": "no"}, "required_if_accepted:terms")
        assert not fails(make, {}, "required_if_accepted:terms")

    def test_required_if_declined(self, make):
        """Test the declined condition."""
        assert fails(make, {"opt_in": False}, "required_if_declined:opt_in")
        assert not fails(make, {"opt_in": True}, "required_if_declined:opt_in")

    def test_prohibited_if_accepted_and_declined(self, make):
        """Test prohibition by truthiness."""
        assert fails(make, {"auto": 1, "f": "x"}, "prohibited_if_accepted:auto")
        assert not fails(make, {"auto": 0, "f": "x"}, "prohibited_if_accepted:auto")
        assert fails(make, {"auto": "off", "f": "x"}, "prohibited_if_declined:auto")


class TestSiblingFields:
    """Test rules conditioned on the presence of other fields."""

    def test_required_with(self, make):
        """Test any sibling filled."""
        rules = "required_with:a,b"
        assert fails(make, {"b": "x"}, rules)
        assert not fails(make, {"b": ""}, rules)
        assert not fails(make, {}, rules)

    def test_required_with_all(self, make):
        """Test every sibling filled."""
        rules = "required_with_all:a,b"
        assert fails(make, {"a": 1, "b": 2}, rules)
        assert not fails(make, {"a": 1}, rules)

    def test_required_without(self, make):
        """Test any sibling not filled."""
        rules = "required_without:a,b"
        assert fails(make, {"a": 1}, rules)
        assert not fails(make, {"a": 1, "b": 2}, rules)

    def test_required_without_all(self, make):
        """Test no sibling filled."""
        rules = "required_without_all:a,b"
        assert fails(make, {}, rules)
        assert not fails(make, {"b": 2}, rules)

    def test_missing_with(self, make):
        """Test absence when a sibling key exists, even when empty."""
        assert fails(make, {"a": "", "f": 1}, "missing_with:a,b")
        assert not fails(make, {"f": 1}, "missing_with:a,b")
        assert not fails(make, {"a": 1, "f": 1}, "missing_with_all:a,b")
        assert fails(make, {"a": 1, "b": None, "f": 1}, "missing_with_all:a,b")

    def test_present_with(self, make):
        """Test presence when sibling keys exist."""
        assert fails(make, {"a": 1}, "present_with:a,b")
        assert not fails(make, {"a": 1, "f": None}, "present_with:a,b")
        assert not fails(make, {"a": 1}, "present_with_all:a,b")
        assert fails(make, {"a": 1, "b": 2}, "present_with_all:a,b")

    def test_prohibits(self, make):
        """Test that a filled field forbids filled siblings."""
        assert fails(make, {"f": "x", "a": "y"}, "prohibits:a,b")
        assert not fails(make, {"f": "x", "a": ""}, "prohibits:a,b")
        assert not fails(make, {"f": "", "a": "y"}, "prohibits:a,b")

    def test_values_placeholder(self, make):
        """Test the joined field list in messages."""
        errors = make({"a": 1}, {"f": "required_with:a,b"}).errors()
        assert errors.first("f") == "The f field is required when a, b is present."


class TestRequiredArrayKeys:
    """Test required_array_keys."""

    def test_all_keys_present(self, make):
        """Test a complete mapping."""
        assert not fails(make, {"f": {"host": "x", "port": 1}}, "required_array_keys:host,port")

    def test_non_mapping(self, make):
        """Test values that are not mappings."""
        assert fails(make, {"f": ["host", "port"]}, "required_array_keys:host,port")
        assert fails(make, {"f": "host"}, "required_array_keys:host")

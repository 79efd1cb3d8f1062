"""
Tests for text rules.
"""

import pytest

from dataknobs_validator import RuleArgumentError
from dataknobs_validator.rules.strings import EmailRule, RegexRule, compile_pattern


def passes(make, value, rules):
    return make({"f": value}, {"f": rules}).passes()


class TestCharacterClasses:
    """Test alpha, alpha_num, alpha_dash, ascii and case."""

    @pytest.mark.parametrize("rules,value,expected", [
        ("alpha", "hello", True),
        ("alpha", "héllo", True),
        ("alpha:ascii", "héllo", False),
        ("alpha", "abc1", False),
        ("alpha", 123, False),
        ("alpha_num", "abc123", True),
        ("alpha_num", 123, True),
        ("alpha_num", "abc-123", False),
        ("alpha_dash", "a-b_c9", True),
        ("alpha_dash", "a b", False),
        ("alpha_dash:ascii", "ñ-1", False),
        ("ascii", "plain text!", True),
        ("ascii", "café", False),
        ("uppercase", "ABC", True),
        ("uppercase", "AbC", False),
        ("lowercase", "abc", True),
        ("lowercase", "aBc", False),
    ])
    def test_character_rules(self, make, rules, value, expected):
        """Test character classes."""
        assert passes(make, value, rules) is expected

    def test_unknown_mode(self, factory):
        """Test rejecting modes other than ascii."""
        with pytest.raises(RuleArgumentError):
            factory.parse_field("alpha:latin")


class TestAffixes:
    """Test prefix and suffix rules."""

    def test_starts_with(self, make):
        """Test any listed prefix."""
        assert passes(make, "ftp://files", "starts_with:http://,ftp://")
        assert not passes(make, "file://x", "starts_with:http://,ftp://")

    def test_ends_with(self, make):
        """Test any listed suffix."""
        assert passes(make, "report.pdf", "ends_with:.pdf,.doc")
        assert not passes(make, "report.txt", "ends_with:.pdf,.doc")

    def test_negated(self, make):
        """Test the doesnt_ variants."""
        assert passes(make, "user", "doesnt_start_with:admin,root")
        assert not passes(make, "root_user", "doesnt_start_with:admin,root")
        assert not passes(make, "file.exe", "doesnt_end_with:.exe")

    def test_numbers_use_text(self, make):
        """Test that numbers are checked by rendering."""
        assert passes(make, 4155, "starts_with:41")

    def test_message_lists_tokens(self, make):
        """Test the values placeholder."""
        errors = make({"f": "x"}, {"f": "starts_with:a,b"}).errors()
        assert errors.first("f") == "The f field must start with one of the following: a, b."


class TestRegex:
    """Test regex and not_regex."""

    def test_quantifier_with_comma(self, make):
        """Test a delimited pattern containing a comma."""
        rules = r"required|regex:/^\w{1,20}$/"
        assert passes(make, "hello_world", rules)
        assert not passes(make, "x" * 21, rules)

    def test_alternation_with_pipe(self, make):
        """Test a delimited pattern containing a pipe."""
        rules = "regex:/^(cat|dog)$/i|string"
        assert passes(make, "DOG", rules)
        assert not passes(make, "bird", rules)

    def test_bare_pattern_searches(self, make):
        """Test that unanchored patterns match anywhere."""
        assert passes(make, "abc123", r"regex:\d+")
        assert passes(make, 123, r"regex:/^\d+$/")

    def test_not_regex(self, make):
        """Test the negated form."""
        assert passes(make, "hello", "not_regex:/[0-9]/")
        assert not passes(make, "hello1", "not_regex:/[0-9]/")

    def test_collections_never_match(self, make):
        """Test that structured values fail both forms."""
        assert not passes(make, ["a"], "regex:/a/")
        assert not passes(make, ["a"], "not_regex:/b/")

    def test_compile_flags(self):
        """Test flag translation."""
        pattern = compile_pattern("regex", "/^a.b$/is")
        assert pattern.match("A\nB")

    def test_slash_without_enclosure(self):
        """Test that a lone leading slash stays part of the pattern."""
        assert RegexRule("/usr").passes("f", "/usr/bin")

    def test_from_args_rejoins_commas(self):
        """Test a tail that was split on commas."""
        rule = RegexRule.from_args({}, "/^a{1", "3}$/")
        assert rule.passes("f", "aaa")


class TestEmail:
    """Test email."""

    @pytest.mark.parametrize("value,expected", [
        ("user@example.com", True),
        ("first.last+tag@example.org", True),
        ("not-an-email", False),
        ("user@", False),
        ("@example.com", False),
        ("two@@example.com", False),
        ("", False),
        (42, False),
    ])
    def test_email(self, make, value, expected):
        """Test addresses."""
        assert passes(make, value, "email") is expected

    def test_modes_are_ignored(self, make):
        """Test that mode arguments do not change parsing."""
        assert passes(make, "user@example.com", "email:rfc,dns")

    def test_deliverability_flag(self, factory):
        """Test reading the config flag."""
        factory.set_config("email.check_deliverability", True)
        rule = factory.parse_field("email").rules[0]
        assert isinstance(rule, EmailRule)
        assert rule.check_deliverability

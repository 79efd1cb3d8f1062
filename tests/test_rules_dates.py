"""
Tests for date, date comparison and timezone rules.
"""

import zoneinfo
from datetime import date, datetime, timedelta, timezone

import pytest

from dataknobs_validator import RuleArgumentError
from dataknobs_validator.rules import parse_date
from dataknobs_validator.rules.dates import TimezoneRule, _country_zones, tokenize_layout

HAS_ZONES = bool(zoneinfo.available_timezones())
HAS_COUNTRY_TABLE = bool(_country_zones())


def passes(make, value, rules, **siblings):
    return make({"f": value, **siblings}, {"f": rules}).passes()


class TestParseDate:
    """Test the shared date parser."""

    @pytest.mark.parametrize("text,expected", [
        ("2024-01-15", datetime(2024, 1, 15)),
        ("2024-01-15 10:30:00", datetime(2024, 1, 15, 10, 30)),
        ("2024-01-15T10:30:00Z", datetime(2024, 1, 15, 10, 30)),
        ("2024-01-15T10:30:00+02:00", datetime(2024, 1, 15, 8, 30)),
        ("01/15/2024", datetime(2024, 1, 15)),
        ("2024/01/15", datetime(2024, 1, 15)),
        ("Mon, 15 Jan 2024 10:30:00 +0000", datetime(2024, 1, 15, 10, 30)),
    ])
    def test_layouts(self, text, expected):
        """Test the common layouts."""
        assert parse_date(text) == expected

    def test_date_objects(self):
        """Test native date values."""
        assert parse_date(date(2024, 1, 15)) == datetime(2024, 1, 15)
        aware = datetime(2024, 1, 15, 12, tzinfo=timezone(timedelta(hours=2)))
        assert parse_date(aware) == datetime(2024, 1, 15, 10)

    @pytest.mark.parametrize("value", ["", "   ", "not a date", "2024-13-45", 20240115, None])
    def test_unparsable(self, value):
        """Test values that are not dates."""
        assert parse_date(value) is None

    def test_extra_layouts(self):
        """Test layouts added by the caller."""
        assert parse_date("15.01.2024") is None
        assert parse_date("15.01.2024", ("%d.%m.%Y",)) == datetime(2024, 1, 15)


class TestDate:
    """Test the date rule."""

    def test_date(self, make):
        """Test valid and invalid dates."""
        assert passes(make, "2024-02-29", "date")
        assert not passes(make, "2023-02-29", "date")
        assert not passes(make, "soon", "date")

    def test_config_layouts(self, factory):
        """Test layouts from the factory config."""
        factory.set_config("date.layouts", ["%d.%m.%Y"])
        assert factory.make({"f": "15.01.2024"}, {"f": "date"}).passes()


class TestDateFormat:
    """Test exact layout matching."""

    def test_tokenize_escape(self):
        """Test that a backslash makes the next character literal."""
        assert tokenize_layout("Y\\m") == [(True, "Y"), (False, "m")]

    @pytest.mark.parametrize("rules,value,expected", [
        ("date_format:Y-m-d", "2024-01-05", True),
        ("date_format:Y-m-d", "2024-1-5", False),
        ("date_format:Y-n-j", "2024-1-5", True),
        ("date_format:H:i", "14:30", True),
        ("date_format:H:i", "25:00", False),
        ("date_format:d/m/Y,Y-m-d", "15/01/2024", True),
        ("date_format:D d M Y", "Mon 15 Jan 2024", True),
        ("date_format:g:i A", "2:05 PM", True),
        ("date_format:Y-m-d", 20240105, False),
    ])
    def test_date_format(self, make, rules, value, expected):
        """Test parse-then-render matching."""
        assert passes(make, value, rules) is expected

    def test_format_placeholder(self, make):
        """Test the format placeholder."""
        errors = make({"f": "x"}, {"f": "date_format:Y-m-d"}).errors()
        assert errors.first("f") == "The f field must match the format Y-m-d."


class TestDateComparisons:
    """Test after, before and friends."""

    def test_literal_reference(self, make):
        """Test comparing against a literal date."""
        assert passes(make, "2024-06-01", "after:2024-01-01")
        assert not passes(make, "2024-01-01", "after:2024-01-01")
        assert passes(make, "2024-01-01", "after_or_equal:2024-01-01")
        assert passes(make, "2023-12-31", "before:2024-01-01")
        assert passes(make, "2024-01-01", "before_or_equal:2024-01-01")
        assert passes(make, "2024-01-01", "date_equals:2024-01-01")

    def test_sibling_reference(self, make):
        """Test that a sibling field wins over a literal."""
        rules = {"end": "date|after:start"}
        assert make({"start": "2024-01-01", "end": "2024-01-10"}, rules).passes()
        assert make({"start": "2024-01-10", "end": "2024-01-05"}, rules).fails()

    def test_relative_keywords(self, make):
        """Test now, today, tomorrow and yesterday."""
        assert passes(make, "2000-01-01", "before:today")
        assert not passes(make, "2000-01-01", "after:yesterday")
        assert passes(make, "2999-01-01", "after:tomorrow")
        assert passes(make, "2999-01-01", "after:now")

    def test_offsets_share_a_timeline(self, make):
        """Test that aware values are compared in UTC."""
        assert passes(make, "2024-01-01T05:00:00+05:00", "date_equals:2024-01-01T00:00:00Z")

    def test_unparsable_sides(self, make):
        """Test that unparsable values or references fail."""
        assert not passes(make, "soon", "after:2024-01-01")
        assert not passes(make, "2024-01-01", "after:whenever")

    def test_message(self, make):
        """Test the date placeholder."""
        errors = make({"f": "2020-01-01"}, {"f": "after:2024-01-01"}).errors()
        assert errors.first("f") == "The f field must be a date after 2024-01-01."


class TestTimezone:
    """Test timezone groups."""

    def test_bad_group(self, factory):
        """Test rejecting unknown groups."""
        with pytest.raises(RuleArgumentError):
            factory.parse_field("timezone:Mars")
        with pytest.raises(RuleArgumentError):
            factory.parse_field("timezone:per_country")

    @pytest.mark.skipif(not HAS_ZONES, reason="no timezone database available")
    def test_all(self, make):
        """Test canonical zones, case-insensitively."""
        assert passes(make, "Europe/London", "timezone")
        assert passes(make, "europe/london", "timezone")
        assert passes(make, "UTC", "timezone:all")
        assert not passes(make, "Mars/Olympus", "timezone")
        assert not passes(make, 5, "timezone")

    @pytest.mark.skipif(not HAS_ZONES, reason="no timezone database available")
    def test_continent(self, make):
        """Test a continent group."""
        assert passes(make, "Europe/Paris", "timezone:Europe")
        assert not passes(make, "America/New_York", "timezone:Europe")

    @pytest.mark.skipif(
        "US/Eastern" not in zoneinfo.available_timezones(),
        reason="legacy zone aliases not available",
    )
    def test_backward_compatible_names(self):
        """Test that legacy aliases need all_with_bc."""
        assert not TimezoneRule("all").passes("f", "US/Eastern")
        assert TimezoneRule("all_with_bc").passes("f", "US/Eastern")

    @pytest.mark.skipif(not HAS_COUNTRY_TABLE, reason="zone1970.tab not available")
    def test_per_country(self, make):
        """Test zones of one country."""
        assert passes(make, "America/New_York", "timezone:per_country,us")
        assert not passes(make, "Europe/Paris", "timezone:per_country,US")

"""Date, date comparison and timezone rules.

Dates are parsed against a fixed set of common layouts (ISO 8601 and
RFC 3339, RFC 822/1123, RFC 850, slash and dash separated forms and
12-hour clock times); more layouts can be added through the
``date.layouts`` config key. Aware datetimes are normalised to naive UTC
so that values with and without offsets compare on one timeline.
"""

from __future__ import annotations

import logging
import os
import operator
import zoneinfo
from collections.abc import Callable, Mapping
from datetime import date, datetime, time, timedelta, timezone
from email.utils import parsedate_to_datetime
from functools import lru_cache
from typing import Any

from ..exceptions import RuleArgumentError
from ..values import is_nil
from .base import DataAwareRule, Rule, require_args

logger = logging.getLogger(__name__)

COMMON_LAYOUTS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%d-%m-%Y",
    "%d-%m-%Y %H:%M:%S",
    "%A, %d-%b-%y %H:%M:%S %Z",
    "%I:%M%p",
    "%I:%M %p",
    "%I:%M:%S %p",
)

#: Legacy single-character layout tokens and the strptime directive each parses with
LEGACY_DIRECTIVES = {
    "Y": "%Y", "y": "%y",
    "m": "%m", "n": "%m", "M": "%b", "F": "%B",
    "d": "%d", "j": "%d", "D": "%a", "l": "%A",
    "H": "%H", "G": "%H", "h": "%I", "g": "%I",
    "i": "%M", "s": "%S",
    "A": "%p", "a": "%p",
}

#: Relative keywords accepted as comparison references
RELATIVE_DAYS = {"today": 0, "tomorrow": 1, "yesterday": -1}

CONTINENTS = (
    "Africa", "America", "Antarctica", "Arctic", "Asia",
    "Atlantic", "Australia", "Europe", "Indian", "Pacific",
)


def _normalize(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def parse_date(value: Any, layouts: tuple[str, ...] = ()) -> datetime | None:
    """Parse a value under the common layouts plus any extra layouts.

    Args:
        value: A date string, or a ``date``/``datetime`` instance
        layouts: Additional strptime layouts tried after the common ones

    Returns:
        Naive UTC datetime, or None when no layout matches
    """
    if isinstance(value, datetime):
        return _normalize(value)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    iso = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _normalize(datetime.fromisoformat(iso))
    except ValueError:
        pass

    for layout in COMMON_LAYOUTS + tuple(layouts):
        try:
            return _normalize(datetime.strptime(text, layout))
        except ValueError:
            continue

    try:
        return _normalize(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        return None


def _layouts_from(config: Mapping[str, Any]) -> tuple[str, ...]:
    layouts = config.get("date.layouts") or ()
    if isinstance(layouts, str):
        return (layouts,)
    return tuple(layouts)


class DateRule(Rule):
    """Value must parse as a date."""

    name = "date"

    def __init__(self, layouts: tuple[str, ...] = ()):
        self.layouts = layouts

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 0, 0)
        return cls(_layouts_from(config))

    def passes(self, attribute: str, value: Any) -> bool:
        return parse_date(value, self.layouts) is not None

    def message(self) -> str:
        return "The :attribute field must be a valid date."


def tokenize_layout(layout: str) -> list[tuple[bool, str]]:
    """Split a legacy layout into (is_token, text) parts.

    A backslash makes the next character literal.
    """
    parts: list[tuple[bool, str]] = []
    escaped = False
    for char in layout:
        if escaped:
            parts.append((False, char))
            escaped = False
        elif char == "\\":
            escaped = True
        else:
            parts.append((char in LEGACY_DIRECTIVES, char))
    if escaped:
        parts.append((False, "\\"))
    return parts


def _render_token(token: str, moment: datetime) -> str:
    hour12 = moment.hour % 12 or 12
    renderers: dict[str, Callable[[], str]] = {
        "Y": lambda: f"{moment.year:04d}",
        "y": lambda: f"{moment.year % 100:02d}",
        "m": lambda: f"{moment.month:02d}",
        "n": lambda: str(moment.month),
        "M": lambda: moment.strftime("%b"),
        "F": lambda: moment.strftime("%B"),
        "d": lambda: f"{moment.day:02d}",
        "j": lambda: str(moment.day),
        "D": lambda: moment.strftime("%a"),
        "l": lambda: moment.strftime("%A"),
        "H": lambda: f"{moment.hour:02d}",
        "G": lambda: str(moment.hour),
        "h": lambda: f"{hour12:02d}",
        "g": lambda: str(hour12),
        "i": lambda: f"{moment.minute:02d}",
        "s": lambda: f"{moment.second:02d}",
        "A": lambda: "AM" if moment.hour < 12 else "PM",
        "a": lambda: "am" if moment.hour < 12 else "pm",
    }
    return renderers[token]()


class DateFormatRule(Rule):
    """Value must match at least one legacy layout exactly.

    The value is parsed with the layout and rendered back; the rendering must
    equal the input, so ``Y-m-d`` rejects ``2024-1-5``.
    """

    name = "date_format"

    def __init__(self, formats: list[str]):
        self.formats = formats
        self._compiled = [tokenize_layout(layout) for layout in formats]

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1)
        return cls(list(args))

    @staticmethod
    def _matches(parts: list[tuple[bool, str]], text: str) -> bool:
        directive = "".join(
            LEGACY_DIRECTIVES[char] if is_token else char.replace("%", "%%")
            for is_token, char in parts
        )
        try:
            moment = datetime.strptime(text, directive)
        except ValueError:
            return False
        rendered = "".join(
            _render_token(char, moment) if is_token else char for is_token, char in parts
        )
        return rendered == text

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, str) or not value:
            return False
        return any(self._matches(parts, value) for parts in self._compiled)

    def message(self) -> str:
        return "The :attribute field must match the format :format."

    def replacements(self) -> dict[str, str]:
        return {"format": ", ".join(self.formats)}

    def __repr__(self) -> str:
        return f"DateFormatRule(formats={self.formats!r})"


class DateComparisonRule(DataAwareRule, Rule):
    """Base for comparing a date against a sibling field or a literal date.

    A sibling that exists wins over a literal; ``now``, ``today``,
    ``tomorrow`` and ``yesterday`` are accepted as literals too.
    """

    compare: Callable[[datetime, datetime], bool] = staticmethod(operator.gt)

    def __init__(self, reference: str, layouts: tuple[str, ...] = ()):
        self.reference = reference
        self.layouts = layouts

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(args[0].strip(), _layouts_from(config))

    def resolve_reference(self) -> datetime | None:
        """Parse the reference date, from the sibling field when it exists."""
        found, other = self.lookup(self.reference)
        if found and not is_nil(other):
            return parse_date(other, self.layouts)

        keyword = self.reference.lower()
        if keyword == "now":
            return _normalize(datetime.now(timezone.utc))
        if keyword in RELATIVE_DAYS:
            today = datetime.combine(date.today(), time())
            return today + timedelta(days=RELATIVE_DAYS[keyword])
        return parse_date(self.reference, self.layouts)

    def passes(self, attribute: str, value: Any) -> bool:
        moment = parse_date(value, self.layouts)
        if moment is None:
            return False
        reference = self.resolve_reference()
        if reference is None:
            return False
        return self.compare(moment, reference)

    def replacements(self) -> dict[str, str]:
        return {"date": self.reference}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(reference={self.reference!r})"


class AfterRule(DateComparisonRule):
    name = "after"
    compare = staticmethod(operator.gt)

    def message(self) -> str:
        return "The :attribute field must be a date after :date."


class AfterOrEqualRule(DateComparisonRule):
    name = "after_or_equal"
    compare = staticmethod(operator.ge)

    def message(self) -> str:
        return "The :attribute field must be a date after or equal to :date."


class BeforeRule(DateComparisonRule):
    name = "before"
    compare = staticmethod(operator.lt)

    def message(self) -> str:
        return "The :attribute field must be a date before :date."


class BeforeOrEqualRule(DateComparisonRule):
    name = "before_or_equal"
    compare = staticmethod(operator.le)

    def message(self) -> str:
        return "The :attribute field must be a date before or equal to :date."


class DateEqualsRule(DateComparisonRule):
    name = "date_equals"
    compare = staticmethod(operator.eq)

    def message(self) -> str:
        return "The :attribute field must be a date equal to :date."


@lru_cache(maxsize=1)
def _all_zones() -> frozenset[str]:
    return frozenset(zoneinfo.available_timezones())


@lru_cache(maxsize=1)
def _country_zones() -> dict[str, frozenset[str]]:
    """Map ISO country codes to zone names from the system ``zone1970.tab``."""
    zones: dict[str, set[str]] = {}
    for root in zoneinfo.TZPATH:
        table = os.path.join(root, "zone1970.tab")
        if not os.path.exists(table):
            continue
        with open(table, encoding="utf-8") as f:
            for line in f:
                if not line.strip() or line.startswith("#"):
                    continue
                columns = line.rstrip("\n").split("\t")
                if len(columns) < 3:
                    continue
                for code in columns[0].split(","):
                    zones.setdefault(code.upper(), set()).add(columns[2])
        break
    else:
        logger.debug("zone1970.tab not found on TZPATH; per-country timezone checks will fail")
    return {code: frozenset(names) for code, names in zones.items()}


class TimezoneRule(Rule):
    """Value must name a known timezone, matched case-insensitively.

    Groups:
        all: canonical zones under the continent prefixes plus UTC (default)
        all_with_bc: every zone the system knows, including legacy aliases
        <continent>: zones under one continent, e.g. ``Europe``
        per_country: zones of one ISO country code, e.g. ``per_country,US``
    """

    name = "timezone"

    def __init__(self, group: str = "all", country: str | None = None):
        self.group = group
        self.country = country

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 0, 2)
        if not args:
            return cls()
        group = args[0].strip().lower()
        continents = {continent.lower() for continent in CONTINENTS}
        if group not in ("all", "all_with_bc", "per_country") and group not in continents:
            raise RuleArgumentError(cls.name, f"unknown timezone group '{args[0]}'")
        if group == "per_country":
            if len(args) < 2 or not args[1].strip():
                raise RuleArgumentError(cls.name, "per_country requires a country code")
            return cls(group, args[1].strip().upper())
        return cls(group)

    def candidates(self) -> frozenset[str]:
        """Zone names allowed by the group."""
        zones = _all_zones()
        if self.group == "all_with_bc":
            return zones
        if self.group == "per_country":
            return _country_zones().get(self.country or "", frozenset())
        if self.group == "all":
            prefixes = tuple(f"{continent}/" for continent in CONTINENTS)
            return frozenset(zone for zone in zones if zone.startswith(prefixes) or zone == "UTC")
        prefix = next(c for c in CONTINENTS if c.lower() == self.group) + "/"
        return frozenset(zone for zone in zones if zone.startswith(prefix))

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, str) or not value:
            return False
        wanted = value.lower()
        return any(zone.lower() == wanted for zone in self.candidates())

    def message(self) -> str:
        return "The :attribute field must be a valid timezone."

    def __repr__(self) -> str:
        return f"TimezoneRule(group={self.group!r}, country={self.country!r})"

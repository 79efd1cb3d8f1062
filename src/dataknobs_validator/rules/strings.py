"""Text rules: character classes, case, affixes, patterns and email."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from email_validator import EmailNotValidError, validate_email

from ..exceptions import RuleArgumentError
from ..values import is_collection, is_number, to_string
from .base import Rule, require_args

ALPHA_ASCII = re.compile(r"^[A-Za-z]+$")
ALPHA_NUM_ASCII = re.compile(r"^[A-Za-z0-9]+$")
ALPHA_DASH_ASCII = re.compile(r"^[A-Za-z0-9_-]+$")

#: Regex flags recognised after a ``/pattern/`` enclosure
REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "u": 0}
DELIMITED_PATTERN = re.compile(r"^/(.*)/([a-z]*)$", re.DOTALL)


def _ascii_flag(rule: str, args: tuple[str, ...]) -> bool:
    """Parse the optional ``ascii`` mode argument."""
    require_args(rule, args, 0, 1)
    if not args:
        return False
    if args[0].strip().lower() != "ascii":
        raise RuleArgumentError(rule, f"unknown mode '{args[0]}'")
    return True


def _text(value: Any) -> str | None:
    """Text form of a scalar value; None for anything that is not text or a number."""
    if isinstance(value, str):
        return value
    if is_number(value):
        return to_string(value)
    return None


class AlphaRule(Rule):
    """Value must consist of letters only."""

    name = "alpha"

    def __init__(self, ascii_only: bool = False):
        self.ascii_only = ascii_only

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        return cls(ascii_only=_ascii_flag(cls.name, args))

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, str) or not value:
            return False
        if self.ascii_only:
            return bool(ALPHA_ASCII.match(value))
        return value.isalpha()

    def message(self) -> str:
        return "The :attribute field must only contain letters."

    def __repr__(self) -> str:
        return f"{type(self).__name__}(ascii_only={self.ascii_only})"


class AlphaNumRule(AlphaRule):
    """Value must consist of letters and digits only."""

    name = "alpha_num"

    def passes(self, attribute: str, value: Any) -> bool:
        text = _text(value)
        if not text:
            return False
        if self.ascii_only:
            return bool(ALPHA_NUM_ASCII.match(text))
        return text.isalnum()

    def message(self) -> str:
        return "The :attribute field must only contain letters and numbers."


class AlphaDashRule(AlphaRule):
    """Value must consist of letters, digits, dashes and underscores."""

    name = "alpha_dash"

    def passes(self, attribute: str, value: Any) -> bool:
        text = _text(value)
        if not text:
            return False
        if self.ascii_only:
            return bool(ALPHA_DASH_ASCII.match(text))
        return all(char.isalnum() or char in "-_" for char in text)

    def message(self) -> str:
        return "The :attribute field must only contain letters, numbers, dashes, and underscores."


class AsciiRule(Rule):
    name = "ascii"

    def passes(self, attribute: str, value: Any) -> bool:
        text = _text(value)
        return text is not None and text.isascii()

    def message(self) -> str:
        return "The :attribute field must only contain single-byte alphanumeric characters and symbols."


class UppercaseRule(Rule):
    name = "uppercase"

    def passes(self, attribute: str, value: Any) -> bool:
        return isinstance(value, str) and value.upper() == value

    def message(self) -> str:
        return "The :attribute field must be uppercase."


class LowercaseRule(Rule):
    name = "lowercase"

    def passes(self, attribute: str, value: Any) -> bool:
        return isinstance(value, str) and value.lower() == value

    def message(self) -> str:
        return "The :attribute field must be lowercase."


class AffixRule(Rule):
    """Base for prefix and suffix rules over a list of literal tokens."""

    #: True to check suffixes instead of prefixes
    suffix = False
    #: True to require that no token matches
    negate = False

    def __init__(self, tokens: list[str]):
        self.tokens = tokens

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1)
        return cls(list(args))

    def passes(self, attribute: str, value: Any) -> bool:
        text = _text(value)
        if text is None:
            return False
        check = text.endswith if self.suffix else text.startswith
        matched = any(check(token) for token in self.tokens)
        return not matched if self.negate else matched

    def replacements(self) -> dict[str, str]:
        return {"values": ", ".join(self.tokens)}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tokens={self.tokens!r})"


class StartsWithRule(AffixRule):
    name = "starts_with"

    def message(self) -> str:
        return "The :attribute field must start with one of the following: :values."


class EndsWithRule(AffixRule):
    name = "ends_with"
    suffix = True

    def message(self) -> str:
        return "The :attribute field must end with one of the following: :values."


class DoesntStartWithRule(AffixRule):
    name = "doesnt_start_with"
    negate = True

    def message(self) -> str:
        return "The :attribute field must not start with one of the following: :values."


class DoesntEndWithRule(AffixRule):
    name = "doesnt_end_with"
    suffix = True
    negate = True

    def message(self) -> str:
        return "The :attribute field must not end with one of the following: :values."


def compile_pattern(rule: str, source: str) -> re.Pattern[str]:
    """Compile a bare or ``/pattern/flags`` regular expression.

    Args:
        rule: Rule name, for error reporting
        source: Pattern text as written in the rule string

    Returns:
        Compiled pattern

    Raises:
        RuleArgumentError: If the flags are unknown or the pattern does not compile
    """
    pattern = source
    flags = 0
    enclosed = DELIMITED_PATTERN.match(source)
    if enclosed:
        pattern = enclosed.group(1)
        for flag in enclosed.group(2):
            if flag not in REGEX_FLAGS:
                raise RuleArgumentError(rule, f"unknown regex flag '{flag}'")
            flags |= REGEX_FLAGS[flag]
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise RuleArgumentError(rule, f"invalid pattern {source!r}: {e}") from e


class RegexRule(Rule):
    """Value must match the pattern (searched anywhere unless anchored)."""

    name = "regex"

    def __init__(self, pattern: str):
        self.source = pattern
        self.pattern = compile_pattern(self.name, pattern)

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1)
        # Callers that split the tail themselves get their commas back
        return cls(",".join(args))

    def matches(self, value: Any) -> bool | None:
        """Search the pattern in the value's text; None for values without text."""
        if is_collection(value) or isinstance(value, bool):
            return None
        text = _text(value)
        if text is None:
            return None
        return self.pattern.search(text) is not None

    def passes(self, attribute: str, value: Any) -> bool:
        return bool(self.matches(value))

    def message(self) -> str:
        return "The :attribute field format is invalid."

    def __repr__(self) -> str:
        return f"{type(self).__name__}(pattern={self.source!r})"


class NotRegexRule(RegexRule):
    """Value must not match the pattern."""

    name = "not_regex"

    def passes(self, attribute: str, value: Any) -> bool:
        return self.matches(value) is False


class EmailRule(Rule):
    """Value must be an address under the ``local@domain`` grammar.

    Parsing is delegated to ``email_validator``; DNS deliverability checks are
    off unless the ``email.check_deliverability`` config flag is set.
    """

    name = "email"

    def __init__(self, check_deliverability: bool = False):
        self.check_deliverability = check_deliverability

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        # Mode arguments (rfc, dns, ...) are accepted and ignored
        return cls(check_deliverability=bool(config.get("email.check_deliverability", False)))

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, str) or not value:
            return False
        try:
            validate_email(value, check_deliverability=self.check_deliverability)
        except EmailNotValidError:
            return False
        return True

    def message(self) -> str:
        return "The :attribute field must be a valid email address."

    def __repr__(self) -> str:
        return f"EmailRule(check_deliverability={self.check_deliverability})"

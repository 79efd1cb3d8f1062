"""Primitive type rules: string, integer, numeric, boolean, array, json and the truth sets."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..exceptions import RuleArgumentError
from ..values import (
    is_accepted,
    is_collection,
    is_declined,
    is_integer,
    is_json,
    is_number,
    is_numeric,
)
from .base import ImplicitRule, Rule, field_list, require_args
from .presence import SiblingValueRule

LOOSE_TRUE = frozenset({"true", "1", "yes", "on"})
LOOSE_FALSE = frozenset({"false", "0", "no", "off"})


def _strict_flag(rule: str, args: tuple[str, ...]) -> bool:
    """Parse the optional ``strict`` mode argument."""
    require_args(rule, args, 0, 1)
    if not args:
        return False
    mode = args[0].strip().lower()
    if mode != "strict":
        raise RuleArgumentError(rule, f"unknown mode '{args[0]}'")
    return True


class StringRule(Rule):
    """Value must be text."""

    name = "string"

    def passes(self, attribute: str, value: Any) -> bool:
        return isinstance(value, str)

    def message(self) -> str:
        return "The :attribute field must be a string."


class IntegerRule(Rule):
    """Value must be an integer, or integer text unless strict."""

    name = "integer"

    def __init__(self, strict: bool = False):
        self.strict = strict

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        return cls(strict=_strict_flag(cls.name, args))

    def passes(self, attribute: str, value: Any) -> bool:
        if self.strict:
            return isinstance(value, int) and not isinstance(value, bool)
        return is_integer(value)

    def message(self) -> str:
        return "The :attribute field must be an integer."

    def __repr__(self) -> str:
        return f"IntegerRule(strict={self.strict})"


class NumericRule(Rule):
    """Value must be a number, or numeric text unless strict."""

    name = "numeric"

    def __init__(self, strict: bool = False):
        self.strict = strict

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        return cls(strict=_strict_flag(cls.name, args))

    def passes(self, attribute: str, value: Any) -> bool:
        if self.strict:
            return is_number(value)
        return is_numeric(value)

    def message(self) -> str:
        return "The :attribute field must be a number."

    def __repr__(self) -> str:
        return f"NumericRule(strict={self.strict})"


class BooleanRule(Rule):
    """Value must be a boolean.

    Strict mode accepts only ``True``/``False``. Otherwise ``"true"``,
    ``"false"``, ``"1"``, ``"0"``, ``1`` and ``0`` are accepted too, and with
    the ``boolean.loose`` config flag also ``yes``/``no``/``on``/``off``.
    """

    name = "boolean"

    def __init__(self, strict: bool = False, loose: bool = False):
        self.strict = strict
        self.loose = loose

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        return cls(strict=_strict_flag(cls.name, args), loose=bool(config.get("boolean.loose", False)))

    def passes(self, attribute: str, value: Any) -> bool:
        if isinstance(value, bool):
            return True
        if self.strict:
            return False
        if is_number(value):
            return value in (0, 1)
        if isinstance(value, str):
            if value in ("true", "false", "1", "0"):
                return True
            if self.loose:
                token = value.strip().lower()
                return token in LOOSE_TRUE or token in LOOSE_FALSE
        return False

    def message(self) -> str:
        return "The :attribute field must be true or false."

    def __repr__(self) -> str:
        return f"BooleanRule(strict={self.strict}, loose={self.loose})"


class ArrayRule(Rule):
    """Value must be a sequence or mapping; mapping keys may be restricted."""

    name = "array"

    def __init__(self, allowed_keys: list[str] | None = None):
        self.allowed_keys = allowed_keys or []

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        return cls(field_list(args))

    def passes(self, attribute: str, value: Any) -> bool:
        if not is_collection(value):
            return False
        if self.allowed_keys and isinstance(value, Mapping):
            return all(str(key) in self.allowed_keys for key in value)
        return True

    def message(self) -> str:
        return "The :attribute field must be an array."

    def replacements(self) -> dict[str, str]:
        return {"values": ", ".join(self.allowed_keys)}

    def __repr__(self) -> str:
        return f"ArrayRule(allowed_keys={self.allowed_keys!r})"


class JsonRule(Rule):
    """Value must be a JSON document in text form."""

    name = "json"

    def passes(self, attribute: str, value: Any) -> bool:
        return is_json(value)

    def message(self) -> str:
        return "The :attribute field must be a valid JSON string."


class AcceptedRule(ImplicitRule, Rule):
    """Value must be in the accepted set."""

    name = "accepted"

    def passes(self, attribute: str, value: Any) -> bool:
        return is_accepted(value)

    def message(self) -> str:
        return "The :attribute field must be accepted."


class DeclinedRule(ImplicitRule, Rule):
    """Value must be in the declined set."""

    name = "declined"

    def passes(self, attribute: str, value: Any) -> bool:
        return is_declined(value)

    def message(self) -> str:
        return "The :attribute field must be declined."


class AcceptedIfRule(SiblingValueRule):
    """Value must be accepted when the sibling equals a value."""

    name = "accepted_if"

    def passes(self, attribute: str, value: Any) -> bool:
        return not self.condition_met() or is_accepted(value)

    def message(self) -> str:
        return "The :attribute field must be accepted when :other is :value."


class DeclinedIfRule(SiblingValueRule):
    """Value must be declined when the sibling equals a value."""

    name = "declined_if"

    def passes(self, attribute: str, value: Any) -> bool:
        return not self.condition_met() or is_declined(value)

    def message(self) -> str:
        return "The :attribute field must be declined when :other is :value."

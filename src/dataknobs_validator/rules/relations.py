"""Rules relating a value to sibling fields or to a list of literals."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..exceptions import RuleArgumentError
from ..values import is_collection, is_nil, is_number, is_sequence, to_string
from .base import DataAwareRule, Rule, field_list, require_args


class SameRule(DataAwareRule, Rule):
    """Value must equal the sibling field's value."""

    name = "same"

    def __init__(self, other: str):
        self.other = other

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(args[0].strip())

    def passes(self, attribute: str, value: Any) -> bool:
        found, other_value = self.lookup(self.other)
        return found and other_value == value

    def message(self) -> str:
        return "The :attribute field must match :other."

    def replacements(self) -> dict[str, str]:
        return {"other": self.other}

    def __repr__(self) -> str:
        return f"SameRule(other={self.other!r})"


class DifferentRule(DataAwareRule, Rule):
    """Value must differ from every named sibling that exists."""

    name = "different"

    def __init__(self, fields: list[str]):
        self.fields = fields

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1)
        return cls(field_list(args))

    def passes(self, attribute: str, value: Any) -> bool:
        for field in self.fields:
            found, other_value = self.lookup(field)
            if found and other_value == value:
                return False
        return True

    def message(self) -> str:
        return "The :attribute field and :other must be different."

    def replacements(self) -> dict[str, str]:
        return {"other": ", ".join(self.fields)}

    def __repr__(self) -> str:
        return f"DifferentRule(fields={self.fields!r})"


class ConfirmedRule(DataAwareRule, Rule):
    """Value must equal its confirmation field.

    The confirmation field is ``<attribute>_confirmation`` unless a field
    name is given as the argument.
    """

    name = "confirmed"

    def __init__(self, field: str | None = None):
        self.field = field

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 0, 1)
        field = args[0].strip() if args and args[0].strip() else None
        return cls(field)

    def confirmation_field(self, attribute: str) -> str:
        return self.field or f"{attribute}_confirmation"

    def passes(self, attribute: str, value: Any) -> bool:
        found, other_value = self.lookup(self.confirmation_field(attribute))
        return found and other_value == value

    def message(self) -> str:
        return "The :attribute field confirmation does not match."

    def __repr__(self) -> str:
        return f"ConfirmedRule(field={self.field!r})"


class InRule(Rule):
    """Value must be one of the listed values, compared as text.

    A sequence value passes only when every element is listed.
    """

    name = "in"

    def __init__(self, values: list[str]):
        self.values = values

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1)
        return cls(list(args))

    def contains(self, value: Any) -> bool:
        return to_string(value) in self.values

    def passes(self, attribute: str, value: Any) -> bool:
        if is_sequence(value):
            return all(self.contains(item) for item in value)
        if is_collection(value):
            return False
        return self.contains(value)

    def message(self) -> str:
        return "The selected :attribute is invalid."

    def replacements(self) -> dict[str, str]:
        return {"values": ", ".join(self.values)}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(values={self.values!r})"


class NotInRule(InRule):
    """Value must not be one of the listed values; for sequences, no element may be."""

    name = "not_in"

    def passes(self, attribute: str, value: Any) -> bool:
        if is_sequence(value):
            return not any(self.contains(item) for item in value)
        if is_collection(value):
            return False
        return not self.contains(value)


class DistinctRule(Rule):
    """Value must be a sequence without duplicate elements.

    Elements are compared by text rendering, so ``"1"`` and ``1`` collide
    unless ``strict`` is given; ``ignore_case`` folds text to lower case.
    """

    name = "distinct"

    def __init__(self, strict: bool = False, ignore_case: bool = False):
        self.strict = strict
        self.ignore_case = ignore_case

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        modes = {arg.strip().lower() for arg in args if arg.strip()}
        unknown = modes - {"strict", "ignore_case"}
        if unknown:
            raise RuleArgumentError(cls.name, f"unknown mode '{sorted(unknown)[0]}'")
        return cls(strict="strict" in modes, ignore_case="ignore_case" in modes)

    def key(self, item: Any) -> Any:
        """Comparison key for one element."""
        if is_nil(item):
            return (type(None).__name__, "") if self.strict else ""
        text = to_string(item) if isinstance(item, (str, bool)) or is_number(item) else repr(item)
        if self.ignore_case:
            text = text.lower()
        return (type(item).__name__, text) if self.strict else text

    def passes(self, attribute: str, value: Any) -> bool:
        if not is_sequence(value):
            return False
        seen = set()
        for item in value:
            marker = self.key(item)
            if marker in seen:
                return False
            seen.add(marker)
        return True

    def message(self) -> str:
        return "The :attribute field has a duplicate value."

    def __repr__(self) -> str:
        return f"DistinctRule(strict={self.strict}, ignore_case={self.ignore_case})"

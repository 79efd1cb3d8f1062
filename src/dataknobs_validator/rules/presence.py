"""Presence, nullability and conditional-presence rules.

Most rules here are implicit: their judgment is the presence check, so the
engine runs them even when the field is absent or nil.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..values import is_accepted, is_declined, is_empty, is_nil, to_string
from .base import (
    DataAwareRule,
    EngineAwareRule,
    ImplicitRule,
    Rule,
    field_list,
    require_args,
)


class RequiredRule(ImplicitRule, Rule):
    """Field must be present and non-empty."""

    name = "required"

    def passes(self, attribute: str, value: Any) -> bool:
        return not is_empty(value)

    def message(self) -> str:
        return "The :attribute field is required."


class MarkerRule(Rule):
    """Rule that always passes; it only changes the engine's policy."""

    def passes(self, attribute: str, value: Any) -> bool:
        return True

    def message(self) -> str:
        return ""


class NullableRule(MarkerRule):
    """Documents that the field may be nil."""

    name = "nullable"


class SometimesRule(MarkerRule):
    """Documents that the field is validated only when present."""

    name = "sometimes"


class BailRule(MarkerRule):
    """Stops the field's evaluation at its first failure."""

    name = "bail"


class FilledRule(ImplicitRule, EngineAwareRule, Rule):
    """Field may be absent, but when present it must not be empty."""

    name = "filled"

    def passes(self, attribute: str, value: Any) -> bool:
        if not self.field_present(attribute, value):
            return True
        return not is_empty(value)

    def message(self) -> str:
        return "The :attribute field must have a value."


class PresentRule(ImplicitRule, EngineAwareRule, Rule):
    """Field must appear in the input, even with an empty value."""

    name = "present"

    def passes(self, attribute: str, value: Any) -> bool:
        return self.field_present(attribute, value)

    def message(self) -> str:
        return "The :attribute field must be present."


class MissingRule(ImplicitRule, EngineAwareRule, Rule):
    """Field must not appear in the input at all."""

    name = "missing"

    def passes(self, attribute: str, value: Any) -> bool:
        return not self.field_present(attribute, value)

    def message(self) -> str:
        return "The :attribute field must be missing."


class ProhibitedRule(ImplicitRule, Rule):
    """Field must be absent or empty."""

    name = "prohibited"

    def passes(self, attribute: str, value: Any) -> bool:
        return is_empty(value)

    def message(self) -> str:
        return "The :attribute field is prohibited."


# Conditions on a sibling's value


class SiblingValueRule(ImplicitRule, DataAwareRule, Rule):
    """Base for rules conditioned on a sibling field equalling one of several values.

    Comparison is on text renderings; the literal ``null`` matches an absent
    or nil sibling.
    """

    def __init__(self, other: str, values: list[str]):
        """Initialize the condition.

        Args:
            other: Sibling field name
            values: Values that trigger the condition
        """
        self.other = other
        self.values = values

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 2)
        return cls(args[0].strip(), list(args[1:]))

    def condition_met(self) -> bool:
        """Check whether the sibling currently holds one of the values."""
        found, other_value = self.lookup(self.other)
        if not found or is_nil(other_value):
            return "null" in self.values
        return to_string(other_value) in self.values

    def replacements(self) -> dict[str, str]:
        return {"other": self.other, "value": ", ".join(self.values), "values": ", ".join(self.values)}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(other={self.other!r}, values={self.values!r})"


class RequiredIfRule(SiblingValueRule):
    """Field is required when the sibling equals a value."""

    name = "required_if"

    def passes(self, attribute: str, value: Any) -> bool:
        if self.condition_met():
            return not is_empty(value)
        return True

    def message(self) -> str:
        return "The :attribute field is required when :other is :value."


class RequiredUnlessRule(SiblingValueRule):
    """Field is required unless the sibling equals a value."""

    name = "required_unless"

    def passes(self, attribute: str, value: Any) -> bool:
        if self.condition_met():
            return True
        return not is_empty(value)

    def message(self) -> str:
        return "The :attribute field is required unless :other is in :values."


class ProhibitedIfRule(SiblingValueRule):
    """Field is prohibited when the sibling equals a value."""

    name = "prohibited_if"

    def passes(self, attribute: str, value: Any) -> bool:
        if self.condition_met():
            return is_empty(value)
        return True

    def message(self) -> str:
        return "The :attribute field is prohibited when :other is :value."


class ProhibitedUnlessRule(SiblingValueRule):
    """Field is prohibited unless the sibling equals a value."""

    name = "prohibited_unless"

    def passes(self, attribute: str, value: Any) -> bool:
        if self.condition_met():
            return True
        return is_empty(value)

    def message(self) -> str:
        return "The :attribute field is prohibited unless :other is in :values."


class MissingIfRule(EngineAwareRule, SiblingValueRule):
    """Field must be missing when the sibling equals a value."""

    name = "missing_if"

    def passes(self, attribute: str, value: Any) -> bool:
        if self.condition_met():
            return not self.field_present(attribute, value)
        return True

    def message(self) -> str:
        return "The :attribute field must be missing when :other is :value."


class MissingUnlessRule(EngineAwareRule, SiblingValueRule):
    """Field must be missing unless the sibling equals a value."""

    name = "missing_unless"

    def passes(self, attribute: str, value: Any) -> bool:
        if self.condition_met():
            return True
        return not self.field_present(attribute, value)

    def message(self) -> str:
        return "The :attribute field must be missing unless :other is :value."


class PresentIfRule(EngineAwareRule, SiblingValueRule):
    """Field must be present when the sibling equals a value."""

    name = "present_if"

    def passes(self, attribute: str, value: Any) -> bool:
        if self.condition_met():
            return self.field_present(attribute, value)
        return True

    def message(self) -> str:
        return "The :attribute field must be present when :other is :value."


class PresentUnlessRule(EngineAwareRule, SiblingValueRule):
    """Field must be present unless the sibling equals a value."""

    name = "present_unless"

    def passes(self, attribute: str, value: Any) -> bool:
        if self.condition_met():
            return True
        return self.field_present(attribute, value)

    def message(self) -> str:
        return "The :attribute field must be present unless :other is :value."


# Conditions on a sibling's truthiness


class SiblingTruthRule(ImplicitRule, DataAwareRule, Rule):
    """Base for rules conditioned on a sibling being accepted or declined."""

    #: Predicate applied to the sibling's value
    truth = staticmethod(is_accepted)

    def __init__(self, other: str):
        self.other = other

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(args[0].strip())

    def condition_met(self) -> bool:
        found, other_value = self.lookup(self.other)
        return found and self.truth(other_value)

    def replacements(self) -> dict[str, str]:
        return {"other": self.other}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(other={self.other!r})"


class RequiredIfAcceptedRule(SiblingTruthRule):
    """Field is required when the sibling is accepted."""

    name = "required_if_accepted"

    def passes(self, attribute: str, value: Any) -> bool:
        return not self.condition_met() or not is_empty(value)

    def message(self) -> str:
        return "The :attribute field is required when :other is accepted."


class RequiredIfDeclinedRule(SiblingTruthRule):
    """Field is required when the sibling is declined."""

    name = "required_if_declined"
    truth = staticmethod(is_declined)

    def passes(self, attribute: str, value: Any) -> bool:
        return not self.condition_met() or not is_empty(value)

    def message(self) -> str:
        return "The :attribute field is required when :other is declined."


class ProhibitedIfAcceptedRule(SiblingTruthRule):
    """Field is prohibited when the sibling is accepted."""

    name = "prohibited_if_accepted"

    def passes(self, attribute: str, value: Any) -> bool:
        return not self.condition_met() or is_empty(value)

    def message(self) -> str:
        return "The :attribute field is prohibited when :other is accepted."


class ProhibitedIfDeclinedRule(SiblingTruthRule):
    """Field is prohibited when the sibling is declined."""

    name = "prohibited_if_declined"
    truth = staticmethod(is_declined)

    def passes(self, attribute: str, value: Any) -> bool:
        return not self.condition_met() or is_empty(value)

    def message(self) -> str:
        return "The :attribute field is prohibited when :other is declined."


# Conditions on the presence of other fields


class SiblingFieldsRule(ImplicitRule, DataAwareRule, Rule):
    """Base for rules conditioned on a list of sibling fields."""

    def __init__(self, fields: list[str]):
        self.fields = fields

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1)
        return cls(field_list(args))

    def filled(self, field: str) -> bool:
        """Check that a sibling exists and is not empty."""
        found, other_value = self.lookup(field)
        return found and not is_empty(other_value)

    def exists(self, field: str) -> bool:
        """Check that a sibling key exists, whatever its value."""
        found, _ = self.lookup(field)
        return found

    def replacements(self) -> dict[str, str]:
        return {"values": ", ".join(self.fields)}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fields={self.fields!r})"


class RequiredWithRule(SiblingFieldsRule):
    """Field is required when any of the siblings is filled."""

    name = "required_with"

    def passes(self, attribute: str, value: Any) -> bool:
        if any(self.filled(field) for field in self.fields):
            return not is_empty(value)
        return True

    def message(self) -> str:
        return "The :attribute field is required when :values is present."


class RequiredWithAllRule(SiblingFieldsRule):
    """Field is required when all of the siblings are filled."""

    name = "required_with_all"

    def passes(self, attribute: str, value: Any) -> bool:
        if all(self.filled(field) for field in self.fields):
            return not is_empty(value)
        return True

    def message(self) -> str:
        return "The :attribute field is required when :values are present."


class RequiredWithoutRule(SiblingFieldsRule):
    """Field is required when any of the siblings is not filled."""

    name = "required_without"

    def passes(self, attribute: str, value: Any) -> bool:
        if not all(self.filled(field) for field in self.fields):
            return not is_empty(value)
        return True

    def message(self) -> str:
        return "The :attribute field is required when :values is not present."


class RequiredWithoutAllRule(SiblingFieldsRule):
    """Field is required when none of the siblings is filled."""

    name = "required_without_all"

    def passes(self, attribute: str, value: Any) -> bool:
        if not any(self.filled(field) for field in self.fields):
            return not is_empty(value)
        return True

    def message(self) -> str:
        return "The :attribute field is required when none of :values are present."


class MissingWithRule(EngineAwareRule, SiblingFieldsRule):
    """Field must be missing when any of the siblings exists."""

    name = "missing_with"

    def passes(self, attribute: str, value: Any) -> bool:
        if any(self.exists(field) for field in self.fields):
            return not self.field_present(attribute, value)
        return True

    def message(self) -> str:
        return "The :attribute field must be missing when :values is present."


class MissingWithAllRule(EngineAwareRule, SiblingFieldsRule):
    """Field must be missing when all of the siblings exist."""

    name = "missing_with_all"

    def passes(self, attribute: str, value: Any) -> bool:
        if all(self.exists(field) for field in self.fields):
            return not self.field_present(attribute, value)
        return True

    def message(self) -> str:
        return "The :attribute field must be missing when :values are present."


class PresentWithRule(EngineAwareRule, SiblingFieldsRule):
    """Field must be present when any of the siblings exists."""

    name = "present_with"

    def passes(self, attribute: str, value: Any) -> bool:
        if any(self.exists(field) for field in self.fields):
            return self.field_present(attribute, value)
        return True

    def message(self) -> str:
        return "The :attribute field must be present when :values is present."


class PresentWithAllRule(EngineAwareRule, SiblingFieldsRule):
    """Field must be present when all of the siblings exist."""

    name = "present_with_all"

    def passes(self, attribute: str, value: Any) -> bool:
        if all(self.exists(field) for field in self.fields):
            return self.field_present(attribute, value)
        return True

    def message(self) -> str:
        return "The :attribute field must be present when :values are present."


class ProhibitsRule(SiblingFieldsRule):
    """When this field is filled, none of the siblings may be filled."""

    name = "prohibits"

    def passes(self, attribute: str, value: Any) -> bool:
        if is_empty(value):
            return True
        return not any(self.filled(field) for field in self.fields)

    def message(self) -> str:
        return "The :attribute field prohibits :values from being present."


class RequiredArrayKeysRule(DataAwareRule, Rule):
    """Value must be a mapping containing every listed key."""

    name = "required_array_keys"

    def __init__(self, keys: list[str]):
        self.keys = keys

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1)
        return cls(field_list(args))

    def passes(self, attribute: str, value: Any) -> bool:
        if not isinstance(value, Mapping):
            return False
        present = {str(key) for key in value}
        return all(key in present for key in self.keys)

    def message(self) -> str:
        return "The :attribute field must contain entries for: :values."

    def replacements(self) -> dict[str, str]:
        return {"values": ", ".join(self.keys)}

    def __repr__(self) -> str:
        return f"RequiredArrayKeysRule(keys={self.keys!r})"

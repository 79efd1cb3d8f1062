"""Size, magnitude and digit rules.

Size comparisons measure text by length, collections by element count and
numbers by magnitude. Numeric text is compared by magnitude only when the
field's plan carries the numeric context (see ``NumericContextRule``).
"""

from __future__ import annotations

import math
import operator
import re
from collections.abc import Callable, Mapping
from typing import Any

from ..exceptions import RuleArgumentError
from ..values import format_number, is_nil, to_number, to_string
from .base import DataAwareRule, NumericContextRule, Rule, parse_count, parse_number, require_args

DIGITS_PATTERN = re.compile(r"^-?[0-9]+$")
DECIMAL_PATTERN = re.compile(r"^[+-]?([0-9]*)(?:\.([0-9]+))?$")

#: Float tolerance for ``multiple_of``
MULTIPLE_EPSILON = 1e-9


class SizeRule(NumericContextRule, Rule):
    """Base for rules comparing the size of a value to fixed bounds.

    Subclasses supply one message template per kind of value
    (``numeric``, ``string``, ``array``).
    """

    templates: dict[str, str] = {}

    def __init__(self) -> None:
        self._kind = "numeric"

    def message(self) -> str:
        return self.templates.get(self._kind, self.templates["numeric"])

    def measure(self, value: Any) -> float | None:
        """Record the kind of the value and return its size."""
        self._kind = self.kind_of(value)
        return self.size_of(value)


class MinRule(SizeRule):
    """Size must be at least the bound."""

    name = "min"
    templates = {
        "numeric": "The :attribute field must be at least :min.",
        "string": "The :attribute field must be at least :min characters.",
        "array": "The :attribute field must have at least :min items.",
    }

    def __init__(self, minimum: float):
        super().__init__()
        self.minimum = minimum

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(parse_number(cls.name, args[0]))

    def passes(self, attribute: str, value: Any) -> bool:
        size = self.measure(value)
        return size is not None and size >= self.minimum

    def replacements(self) -> dict[str, str]:
        return {"min": format_number(self.minimum)}

    def __repr__(self) -> str:
        return f"MinRule(minimum={self.minimum})"


class MaxRule(SizeRule):
    """Size must not exceed the bound."""

    name = "max"
    templates = {
        "numeric": "The :attribute field must not be greater than :max.",
        "string": "The :attribute field must not be greater than :max characters.",
        "array": "The :attribute field must not have more than :max items.",
    }

    def __init__(self, maximum: float):
        super().__init__()
        self.maximum = maximum

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(parse_number(cls.name, args[0]))

    def passes(self, attribute: str, value: Any) -> bool:
        size = self.measure(value)
        return size is not None and size <= self.maximum

    def replacements(self) -> dict[str, str]:
        return {"max": format_number(self.maximum)}

    def __repr__(self) -> str:
        return f"MaxRule(maximum={self.maximum})"


class BetweenRule(SizeRule):
    """Size must lie within the inclusive bounds."""

    name = "between"
    templates = {
        "numeric": "The :attribute field must be between :min and :max.",
        "string": "The :attribute field must be between :min and :max characters.",
        "array": "The :attribute field must have between :min and :max items.",
    }

    def __init__(self, minimum: float, maximum: float):
        super().__init__()
        if minimum > maximum:
            raise RuleArgumentError(
                self.name, f"min ({format_number(minimum)}) cannot be greater than max ({format_number(maximum)})"
            )
        self.minimum = minimum
        self.maximum = maximum

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 2, 2)
        return cls(parse_number(cls.name, args[0]), parse_number(cls.name, args[1]))

    def passes(self, attribute: str, value: Any) -> bool:
        size = self.measure(value)
        return size is not None and self.minimum <= size <= self.maximum

    def replacements(self) -> dict[str, str]:
        return {"min": format_number(self.minimum), "max": format_number(self.maximum)}

    def __repr__(self) -> str:
        return f"BetweenRule(minimum={self.minimum}, maximum={self.maximum})"


class ExactSizeRule(SizeRule):
    """Size must equal the bound."""

    name = "size"
    templates = {
        "numeric": "The :attribute field must be :size.",
        "string": "The :attribute field must be :size characters.",
        "array": "The :attribute field must contain :size items.",
    }

    def __init__(self, size: float):
        super().__init__()
        self.size = size

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(parse_number(cls.name, args[0]))

    def passes(self, attribute: str, value: Any) -> bool:
        size = self.measure(value)
        return size is not None and size == self.size

    def replacements(self) -> dict[str, str]:
        return {"size": format_number(self.size)}

    def __repr__(self) -> str:
        return f"ExactSizeRule(size={self.size})"


class ComparisonRule(DataAwareRule, SizeRule):
    """Base for gt/gte/lt/lte against a sibling field or a literal number.

    A sibling field wins over a literal; the sibling's size follows the same
    numeric context as the value's.
    """

    compare: Callable[[float, float], bool] = staticmethod(operator.gt)

    def __init__(self, reference: str):
        super().__init__()
        self.reference = reference
        self._compared: float | None = None

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(args[0].strip())

    def passes(self, attribute: str, value: Any) -> bool:
        size = self.measure(value)
        if size is None:
            return False

        found, other = self.lookup(self.reference)
        if found and not is_nil(other):
            other_size = self.size_of(other)
        else:
            other_size = to_number(self.reference)
        if other_size is None:
            return False

        self._compared = other_size
        return self.compare(size, other_size)

    def replacements(self) -> dict[str, str]:
        shown = format_number(self._compared) if self._compared is not None else self.reference
        return {"value": shown, "other": self.reference}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(reference={self.reference!r})"


class GreaterThanRule(ComparisonRule):
    name = "gt"
    compare = staticmethod(operator.gt)
    templates = {
        "numeric": "The :attribute field must be greater than :value.",
        "string": "The :attribute field must be greater than :value characters.",
        "array": "The :attribute field must have more than :value items.",
    }


class GreaterThanOrEqualRule(ComparisonRule):
    name = "gte"
    compare = staticmethod(operator.ge)
    templates = {
        "numeric": "The :attribute field must be greater than or equal to :value.",
        "string": "The :attribute field must be greater than or equal to :value characters.",
        "array": "The :attribute field must have :value items or more.",
    }


class LessThanRule(ComparisonRule):
    name = "lt"
    compare = staticmethod(operator.lt)
    templates = {
        "numeric": "The :attribute field must be less than :value.",
        "string": "The :attribute field must be less than :value characters.",
        "array": "The :attribute field must have less than :value items.",
    }


class LessThanOrEqualRule(ComparisonRule):
    name = "lte"
    compare = staticmethod(operator.le)
    templates = {
        "numeric": "The :attribute field must be less than or equal to :value.",
        "string": "The :attribute field must be less than or equal to :value characters.",
        "array": "The :attribute field must not have more than :value items.",
    }


def _digit_count(value: Any) -> int | None:
    """Count the digits of an integer value, ignoring its sign."""
    text = to_string(value)
    if not DIGITS_PATTERN.match(text):
        return None
    return len(text.lstrip("-"))


class DigitsRule(Rule):
    """Value must be an integer with exactly ``n`` digits."""

    name = "digits"

    def __init__(self, length: int):
        self.length = length

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(parse_count(cls.name, args[0]))

    def passes(self, attribute: str, value: Any) -> bool:
        return _digit_count(value) == self.length

    def message(self) -> str:
        return "The :attribute field must be :digits digits."

    def replacements(self) -> dict[str, str]:
        return {"digits": str(self.length)}

    def __repr__(self) -> str:
        return f"DigitsRule(length={self.length})"


class DigitsBetweenRule(Rule):
    """Value must be an integer whose digit count lies within the bounds."""

    name = "digits_between"

    def __init__(self, minimum: int, maximum: int):
        if minimum > maximum:
            raise RuleArgumentError(self.name, f"min ({minimum}) cannot be greater than max ({maximum})")
        self.minimum = minimum
        self.maximum = maximum

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 2, 2)
        return cls(parse_count(cls.name, args[0]), parse_count(cls.name, args[1]))

    def passes(self, attribute: str, value: Any) -> bool:
        count = _digit_count(value)
        return count is not None and self.minimum <= count <= self.maximum

    def message(self) -> str:
        return "The :attribute field must be between :min and :max digits."

    def replacements(self) -> dict[str, str]:
        return {"min": str(self.minimum), "max": str(self.maximum)}

    def __repr__(self) -> str:
        return f"DigitsBetweenRule(minimum={self.minimum}, maximum={self.maximum})"


class MinDigitsRule(Rule):
    """Value must be an integer with at least ``n`` digits."""

    name = "min_digits"

    def __init__(self, minimum: int):
        self.minimum = minimum

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(parse_count(cls.name, args[0]))

    def passes(self, attribute: str, value: Any) -> bool:
        count = _digit_count(value)
        return count is not None and count >= self.minimum

    def message(self) -> str:
        return "The :attribute field must have at least :min digits."

    def replacements(self) -> dict[str, str]:
        return {"min": str(self.minimum)}


class MaxDigitsRule(Rule):
    """Value must be an integer with at most ``n`` digits."""

    name = "max_digits"

    def __init__(self, maximum: int):
        self.maximum = maximum

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(parse_count(cls.name, args[0]))

    def passes(self, attribute: str, value: Any) -> bool:
        count = _digit_count(value)
        return count is not None and count <= self.maximum

    def message(self) -> str:
        return "The :attribute field must not have more than :max digits."

    def replacements(self) -> dict[str, str]:
        return {"max": str(self.maximum)}


class DecimalRule(Rule):
    """Value must be a decimal number with ``p`` (or ``p`` to ``q``) fractional digits."""

    name = "decimal"

    def __init__(self, minimum: int, maximum: int | None = None):
        if maximum is not None and minimum > maximum:
            raise RuleArgumentError(self.name, f"min ({minimum}) cannot be greater than max ({maximum})")
        self.minimum = minimum
        self.maximum = maximum

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 2)
        maximum = parse_count(cls.name, args[1]) if len(args) > 1 else None
        return cls(parse_count(cls.name, args[0]), maximum)

    def passes(self, attribute: str, value: Any) -> bool:
        if isinstance(value, bool):
            return False
        match = DECIMAL_PATTERN.match(to_string(value))
        if not match or not (match.group(1) or match.group(2)):
            return False
        places = len(match.group(2) or "")
        upper = self.minimum if self.maximum is None else self.maximum
        return self.minimum <= places <= upper

    def message(self) -> str:
        return "The :attribute field must have :decimal decimal places."

    def replacements(self) -> dict[str, str]:
        if self.maximum is None:
            return {"decimal": str(self.minimum)}
        return {"decimal": f"{self.minimum}-{self.maximum}"}

    def __repr__(self) -> str:
        return f"DecimalRule(minimum={self.minimum}, maximum={self.maximum})"


class MultipleOfRule(Rule):
    """Value must be a number that is an integer multiple of ``v``."""

    name = "multiple_of"

    def __init__(self, factor: float):
        self.factor = factor

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        require_args(cls.name, args, 1, 1)
        return cls(parse_number(cls.name, args[0]))

    def passes(self, attribute: str, value: Any) -> bool:
        number = to_number(value)
        if number is None or self.factor == 0:
            return False
        remainder = abs(math.fmod(number, self.factor))
        return remainder < MULTIPLE_EPSILON or abs(remainder - abs(self.factor)) < MULTIPLE_EPSILON

    def message(self) -> str:
        return "The :attribute field must be a multiple of :value."

    def replacements(self) -> dict[str, str]:
        return {"value": format_number(self.factor)}

    def __repr__(self) -> str:
        return f"MultipleOfRule(factor={self.factor})"

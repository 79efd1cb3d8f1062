"""Type-neutral value utilities shared by rules and the engine.

All helpers are pure: they never mutate the value they inspect and never
raise for an unexpected type, returning ``None`` or ``False`` instead.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping, Sequence, Set
from decimal import Decimal
from typing import Any


class _Missing:
    """Sentinel for a field that is absent from the input bag."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

INTEGER_PATTERN = re.compile(r"^-?\d+$")
NUMERIC_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")
NUMBER_TOKEN_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")

ACCEPTED_TOKENS = frozenset({"yes", "on", "1", "true"})
DECLINED_TOKENS = frozenset({"no", "off", "0", "false"})


def is_nil(value: Any) -> bool:
    """Check whether a value is absent or null."""
    return value is None or value is MISSING


def is_number(value: Any) -> bool:
    """Check for a native number; booleans are not numbers here."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def is_sequence(value: Any) -> bool:
    """Check for an ordered sequence that is not text."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def is_collection(value: Any) -> bool:
    """Check for a sequence, set or mapping."""
    return is_sequence(value) or isinstance(value, (Mapping, Set))


def format_number(value: float | int | Decimal) -> str:
    """Render a number without a trailing ``.0`` for integral values.

    Args:
        value: Number to render

    Returns:
        Decimal text, e.g. ``"1024"`` or ``"2.5"``
    """
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return str(value)
    if isinstance(value, (float, Decimal)) and value == int(value):
        return str(int(value))
    return str(value)


def to_string(value: Any) -> str:
    """Convert a value to its natural text rendering.

    ``None`` and missing values become ``""``; booleans become ``"true"`` or
    ``"false"``; integral floats lose their fractional part.
    """
    if is_nil(value):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return format_number(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def to_number(value: Any) -> float | None:
    """Convert native numbers and decimal number tokens to float.

    Strings are accepted with a leading sign and at most one decimal point;
    exponents, whitespace and thousands separators are rejected.

    Returns:
        The float value, or None when the value is not a number
    """
    if is_number(value):
        return float(value)
    if isinstance(value, str) and NUMBER_TOKEN_PATTERN.match(value):
        return float(value)
    return None


def is_integer(value: Any) -> bool:
    """Check for an integer value or integer text (``-?\\d+``)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value.is_integer()
    if isinstance(value, Decimal):
        return value == value.to_integral_value()
    if isinstance(value, str):
        return bool(INTEGER_PATTERN.match(value))
    return False


def is_numeric(value: Any) -> bool:
    """Check for a number or numeric text (``-?\\d+(\\.\\d+)?``)."""
    if is_number(value):
        return True
    if isinstance(value, str):
        return bool(NUMERIC_PATTERN.match(value))
    return False


def get_size(value: Any) -> float | None:
    """Get the size of a value.

    Text is measured in code points, collections by element count and
    numbers by their magnitude. Booleans and nil have no size.

    Returns:
        The size, or None when the value has no size
    """
    if is_nil(value) or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return float(len(value))
    if is_number(value):
        return float(value)
    if is_collection(value) or isinstance(value, (bytes, bytearray)):
        return float(len(value))
    return None


def is_json(value: Any) -> bool:
    """Check whether a value is a JSON document in text form.

    Already-structured values (sequences and mappings) are rejected because
    they are not JSON strings.
    """
    if is_nil(value) or is_collection(value):
        return False
    text = to_string(value)
    if text == "":
        return False
    try:
        json.loads(text)
    except (TypeError, ValueError):
        return False
    return True


def is_empty(value: Any) -> bool:
    """Check whether a value counts as empty for presence rules.

    Nil, whitespace-only text and empty collections are empty; numbers and
    booleans never are.
    """
    if is_nil(value):
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if is_collection(value) or isinstance(value, (bytes, bytearray)):
        return len(value) == 0
    return False


def is_accepted(value: Any) -> bool:
    """Check membership in the accepted set ``{true, "yes", "on", "1", 1, "true"}``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value in ACCEPTED_TOKENS
    if is_number(value):
        return value == 1
    return False


def is_declined(value: Any) -> bool:
    """Check membership in the declined set ``{false, "no", "off", "0", 0, "false"}``."""
    if isinstance(value, bool):
        return not value
    if isinstance(value, str):
        return value in DECLINED_TOKENS
    if is_number(value):
        return value == 0
    return False

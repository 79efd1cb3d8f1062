"""Rule abstraction with optional capability mix-ins.

Every rule answers two questions: does a value pass (``passes``) and what
should be said when it does not (``message``). Rules that need more than
the value opt into capabilities by mixing in one of the classes below; the
engine discovers them by method presence, so third-party rules can provide
the same methods without inheriting from these classes.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from ..exceptions import RuleArgumentError
from ..paths import lookup
from ..values import MISSING, get_size, is_nil, is_number, is_numeric, to_number

if TYPE_CHECKING:
    from ..validator import Validator


#: Signature of a catalog entry: ``constructor(config, *args) -> Rule``
RuleConstructor = Callable[..., "Rule"]


class Rule(ABC):
    """Base class for all validation rules."""

    #: Catalog name used for message overrides, e.g. ``"required_if"``
    name: ClassVar[str] = ""

    @abstractmethod
    def passes(self, attribute: str, value: Any) -> bool:
        """Check a value.

        Args:
            attribute: Concrete field name under validation
            value: Field value; None when the field is absent

        Returns:
            True if the value is valid
        """
        pass

    @abstractmethod
    def message(self) -> str:
        """Message template; ``:attribute`` is replaced by the field's display name."""
        pass

    def replacements(self) -> dict[str, str]:
        """Extra ``:placeholder`` values available to message templates."""
        return {}

    @classmethod
    def from_args(cls, config: Mapping[str, Any], *args: str) -> Rule:
        """Build the rule from a parsed argument vector.

        Args:
            config: Factory configuration map (read-only)
            *args: Arguments written after the rule name

        Returns:
            Rule instance

        Raises:
            RuleArgumentError: If the arguments are not accepted
        """
        if args:
            raise RuleArgumentError(cls.name, "takes no arguments")
        return cls()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DataAwareRule:
    """Mix-in for rules that read sibling fields."""

    _data: Mapping[str, Any] = {}

    def set_data(self, data: Mapping[str, Any]) -> None:
        """Install the input bag before ``passes`` is called."""
        self._data = data

    def lookup(self, field: str) -> tuple[bool, Any]:
        """Resolve a sibling field; returns (found, value)."""
        return lookup(self._data, field)


class EngineAwareRule:
    """Mix-in for rules that ask the engine whether a field is present."""

    _engine: Validator | None = None

    def set_engine(self, engine: Validator) -> None:
        """Install the running engine before ``passes`` is called."""
        self._engine = engine

    def field_present(self, attribute: str, value: Any = MISSING) -> bool:
        """Check presence through the engine.

        Without an engine only a non-nil value counts as present.
        """
        if self._engine is not None:
            return self._engine.has_field(attribute)
        return not is_nil(value)


class ImplicitRule:
    """Mix-in for rules that run even when the field is absent or nil."""

    def is_implicit(self) -> bool:
        return True


class NumericContextRule:
    """Mix-in for size comparisons that honor the plan's numeric context.

    When the field's plan declares a numeric rule, numeric text is compared
    by magnitude instead of by length.
    """

    numeric_context: bool = False

    def set_numeric_context(self, enabled: bool) -> None:
        """Install the plan's numeric-context flag before ``passes`` is called."""
        self.numeric_context = enabled

    def size_of(self, value: Any) -> float | None:
        """Size of a value under the current numeric context."""
        if self.numeric_context and isinstance(value, str) and is_numeric(value):
            return to_number(value)
        return get_size(value)

    def kind_of(self, value: Any) -> str:
        """Kind of comparison performed on a value: numeric, string or array."""
        if isinstance(value, str):
            return "numeric" if self.numeric_context and is_numeric(value) else "string"
        if is_number(value):
            return "numeric"
        return "array"


class CallbackRule(Rule):
    """Rule whose check is a callable instead of a subclass.

    Example:
        ```python
        even = CallbackRule(lambda attribute, value: int(value) % 2 == 0,
                            "The :attribute must be even.", name="even")
        ```
    """

    def __init__(
        self,
        callback: Callable[[str, Any], bool],
        message: str = "The :attribute field is invalid.",
        implicit: bool = False,
        name: str = "callback",
    ):
        """Initialize callback rule.

        Args:
            callback: Callable taking (attribute, value) and returning bool
            message: Message template used on failure
            implicit: If True, run even when the field is absent or nil
            name: Rule name used for message overrides
        """
        self.callback = callback
        self._message = message
        self.implicit = implicit
        self.rule_name = name

    def passes(self, attribute: str, value: Any) -> bool:
        return bool(self.callback(attribute, value))

    def message(self) -> str:
        return self._message

    def is_implicit(self) -> bool:
        return self.implicit

    def __repr__(self) -> str:
        return f"CallbackRule(name={self.rule_name!r})"


# Capability probes. Method presence is enough so rules defined outside this
# package work without inheriting from the mix-ins.


def is_implicit(rule: Any) -> bool:
    """Check whether a rule runs for absent or nil values."""
    probe = getattr(rule, "is_implicit", None)
    return bool(probe()) if callable(probe) else False


def wants_data(rule: Any) -> bool:
    """Check whether a rule needs the input bag."""
    return callable(getattr(rule, "set_data", None))


def wants_engine(rule: Any) -> bool:
    """Check whether a rule needs the engine."""
    return callable(getattr(rule, "set_engine", None))


def wants_numeric_context(rule: Any) -> bool:
    """Check whether a rule compares sizes under the numeric context."""
    return callable(getattr(rule, "set_numeric_context", None))


_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def rule_name(rule: Any) -> str:
    """Name a rule for message lookups.

    Uses the catalog name when the rule has one, otherwise the snake-cased
    class name without a ``Rule`` suffix.
    """
    name = getattr(rule, "rule_name", None) or getattr(rule, "name", None)
    if isinstance(name, str) and name:
        return name
    class_name = type(rule).__name__
    if class_name.endswith("Rule") and class_name != "Rule":
        class_name = class_name[: -len("Rule")]
    return _CAMEL_BOUNDARY.sub("_", class_name).lower()


# Argument helpers shared by rule constructors


def require_args(rule: str, args: tuple[str, ...], minimum: int, maximum: int | None = None) -> None:
    """Check the argument count of a rule.

    Raises:
        RuleArgumentError: If fewer than ``minimum`` or more than ``maximum`` are given
    """
    if len(args) < minimum:
        noun = "argument" if minimum == 1 else "arguments"
        raise RuleArgumentError(rule, f"requires at least {minimum} {noun}")
    if maximum is not None and len(args) > maximum:
        noun = "argument" if maximum == 1 else "arguments"
        raise RuleArgumentError(rule, f"accepts at most {maximum} {noun}")


def parse_number(rule: str, arg: str) -> float:
    """Parse a numeric argument.

    Raises:
        RuleArgumentError: If the argument is not a number
    """
    number = to_number(arg.strip())
    if number is None:
        raise RuleArgumentError(rule, f"'{arg}' is not a number")
    return number


def parse_count(rule: str, arg: str) -> int:
    """Parse a non-negative integer argument.

    Raises:
        RuleArgumentError: If the argument is not a non-negative integer
    """
    text = arg.strip()
    if not text.isdigit():
        raise RuleArgumentError(rule, f"'{arg}' is not a non-negative integer")
    return int(text)


def field_list(args: tuple[str, ...]) -> list[str]:
    """Strip whitespace from field-name arguments."""
    return [arg.strip() for arg in args]

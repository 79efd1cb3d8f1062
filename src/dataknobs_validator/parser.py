"""Rule-string tokenizer and compiled field plans.

A rule string such as ``"required|regex:/^(\\w{1,20})$/|between:3,50"`` is
split on ``|`` into segments; each segment splits on its first ``:`` into a
name and an argument tail, and the tail splits on ``,``. Patterns for
``regex``/``not_regex`` are kept whole: inside a ``/…/flags`` enclosure
neither ``,`` nor ``|`` separates anything.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from .exceptions import RuleParseError
from .rules.catalog import NUMERIC_RULES, PATTERN_RULES

RULE_SEPARATOR = "|"
NAME_SEPARATOR = ":"
ARG_SEPARATOR = ","


def _pattern_end(text: str, opening: int) -> int | None:
    """Find the end of a ``/…/flags`` enclosure that opens at ``opening``.

    The enclosure closes at an unescaped ``/`` followed by lowercase flags and
    then either ``|`` or the end of the text.

    Returns:
        Index just past the flags, or None when the enclosure never closes
    """
    index = opening + 1
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "/":
            end = index + 1
            while end < len(text) and text[end].isalpha() and text[end].islower():
                end += 1
            if end == len(text) or text[end] == RULE_SEPARATOR:
                return end
        index += 1
    return None


def split_rules(rules: str) -> list[str]:
    """Split a rule string into its ``|``-separated segments.

    Raises:
        RuleParseError: If a regex enclosure is not terminated
    """
    segments: list[str] = []
    start = 0
    index = 0
    named = False
    while index < len(rules):
        char = rules[index]
        if char == RULE_SEPARATOR:
            segments.append(rules[start:index])
            start = index + 1
            named = False
        elif char == NAME_SEPARATOR and not named:
            named = True
            name = rules[start:index].strip().lower()
            if name in PATTERN_RULES and rules[index + 1:index + 2] == "/":
                end = _pattern_end(rules, index + 1)
                if end is None:
                    raise RuleParseError(rules, f"unterminated pattern for rule '{name}'")
                segments.append(rules[start:end])
                start = end + 1
                index = end + 1
                named = False
                continue
        index += 1
    if start <= len(rules):
        segments.append(rules[start:])
    return segments


def parse_segment(segment: str) -> tuple[str, tuple[str, ...]] | None:
    """Split one segment into a lowercased name and its argument vector.

    Returns:
        (name, args), or None for an empty segment
    """
    name, _, tail = segment.partition(NAME_SEPARATOR)
    name = name.strip().lower()
    if not name:
        return None
    if not tail:
        return name, ()
    if name in PATTERN_RULES:
        return name, (tail,)
    return name, tuple(tail.split(ARG_SEPARATOR))


def tokenize(rules: str) -> list[tuple[str, tuple[str, ...]]]:
    """Turn a rule string into an ordered list of (name, args) pairs.

    Example:
        ```python
        tokenize("required|between:3,50")
        # [("required", ()), ("between", ("3", "50"))]
        ```

    Raises:
        RuleParseError: If the string is malformed
    """
    tokens = []
    for segment in split_rules(rules):
        parsed = parse_segment(segment)
        if parsed is not None:
            tokens.append(parsed)
    return tokens


def format_rule(name: str, args: Sequence[str]) -> str:
    """Render one (name, args) pair back to rule-string form."""
    if not args:
        return name
    return f"{name}{NAME_SEPARATOR}{ARG_SEPARATOR.join(args)}"


def format_rules(tokens: Iterable[tuple[str, Sequence[str]]] | FieldPlan) -> str:
    """Serialize (name, args) pairs, or a plan, back to a rule string.

    Reparsing the result yields the same (name, args) list.
    """
    if isinstance(tokens, FieldPlan):
        tokens = tokens.tokens()
    return RULE_SEPARATOR.join(format_rule(name, args) for name, args in tokens)


@dataclass
class PlannedRule:
    """One compiled entry of a field plan.

    Attributes:
        name: Catalog name, or the derived name of a rule instance
        args: Argument vector as written; empty for rule instances
        rule: Constructed rule instance
    """

    name: str
    args: tuple[str, ...]
    rule: Any


@dataclass
class FieldPlan:
    """Ordered rules for one field plus the numeric-context flag.

    Attributes:
        entries: Rules in declaration order
        has_numeric_rule: True when a numeric, integer, int or decimal rule is declared
    """

    entries: list[PlannedRule] = field(default_factory=list)
    has_numeric_rule: bool = False

    def add(self, entry: PlannedRule) -> FieldPlan:
        """Append an entry, updating the numeric-context flag."""
        self.entries.append(entry)
        if entry.name in NUMERIC_RULES:
            self.has_numeric_rule = True
        return self

    def extend(self, other: FieldPlan) -> FieldPlan:
        """Append every entry of another plan."""
        for entry in other.entries:
            self.add(entry)
        return self

    def copy(self) -> FieldPlan:
        return FieldPlan(list(self.entries), self.has_numeric_rule)

    @property
    def rules(self) -> list[Any]:
        return [entry.rule for entry in self.entries]

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    @property
    def has_bail(self) -> bool:
        return "bail" in self.names

    def has_rule(self, name: str) -> bool:
        return name in self.names

    def tokens(self) -> list[tuple[str, tuple[str, ...]]]:
        return [(entry.name, entry.args) for entry in self.entries]

    def __iter__(self) -> Iterator[PlannedRule]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __str__(self) -> str:
        return format_rules(self)

"""Validation rules.

Every rule implements ``passes(attribute, value)`` and ``message()``;
capability mix-ins add access to sibling fields, to the running engine,
to the plan's numeric context, or mark a rule as implicit.
"""

from .base import (
    CallbackRule,
    DataAwareRule,
    EngineAwareRule,
    ImplicitRule,
    NumericContextRule,
    Rule,
    RuleConstructor,
    is_implicit,
    rule_name,
    wants_data,
    wants_engine,
    wants_numeric_context,
)
from .catalog import ALIASES, NUMERIC_RULES, PATTERN_RULES, RULE_CLASSES, builtin_rules
from .dates import parse_date
from .presence import SiblingFieldsRule, SiblingTruthRule, SiblingValueRule
from .size import ComparisonRule, SizeRule

__all__ = [
    # Abstraction
    "Rule",
    "RuleConstructor",
    "CallbackRule",
    "DataAwareRule",
    "EngineAwareRule",
    "ImplicitRule",
    "NumericContextRule",
    # Capability probes
    "is_implicit",
    "wants_data",
    "wants_engine",
    "wants_numeric_context",
    "rule_name",
    # Extension bases
    "SiblingValueRule",
    "SiblingTruthRule",
    "SiblingFieldsRule",
    "SizeRule",
    "ComparisonRule",
    # Catalog
    "RULE_CLASSES",
    "ALIASES",
    "NUMERIC_RULES",
    "PATTERN_RULES",
    "builtin_rules",
    "parse_date",
]

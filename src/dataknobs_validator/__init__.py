"""Declarative input validation with pipe-delimited rule strings.

Given a bag of input data and a parallel map of rules such as
``"required|integer|between:1024,65535"``, a ``Validator`` reports
per-field failures with readable messages and exposes the valid and
invalid subsets of the input.

Example:
    ```python
    from dataknobs_validator import make

    validator = make(
        {"email": "user@example.com", "age": "17"},
        {"email": "required|email", "age": "required|integer|min:18"},
    )
    validator.fails()                 # True
    validator.errors().first("age")   # "The age field must be at least 18."
    ```
"""

from .error_bag import ErrorBag
from .exceptions import (
    RuleArgumentError,
    RuleParseError,
    UnknownRuleError,
    ValidationException,
    ValidatorError,
)
from .factory import (
    Factory,
    RuleSet,
    RuleSetFactory,
    default_factory,
    make,
    parse,
    register_rule,
    rule_set_factory,
)
from .objects import rules_for, validate_object
from .parser import FieldPlan, PlannedRule, format_rules, tokenize
from .rules import (
    CallbackRule,
    DataAwareRule,
    EngineAwareRule,
    ImplicitRule,
    NumericContextRule,
    Rule,
)
from .validator import Validator

__version__ = "0.1.0"

__all__ = [
    # Engine
    "Validator",
    "ErrorBag",
    # Construction
    "Factory",
    "RuleSet",
    "RuleSetFactory",
    "default_factory",
    "rule_set_factory",
    "make",
    "parse",
    "register_rule",
    # Parsing
    "FieldPlan",
    "PlannedRule",
    "tokenize",
    "format_rules",
    # Rules
    "Rule",
    "CallbackRule",
    "DataAwareRule",
    "EngineAwareRule",
    "ImplicitRule",
    "NumericContextRule",
    # Objects
    "validate_object",
    "rules_for",
    # Exceptions
    "ValidatorError",
    "UnknownRuleError",
    "RuleArgumentError",
    "RuleParseError",
    "ValidationException",
]

"""Custom exceptions for the dataknobs_validator package.

This module defines exception types for the validator package,
built on the common exception framework from dataknobs_common.

Two families are used:

- Build-time errors raised while turning rule strings into a plan
  (``UnknownRuleError``, ``RuleArgumentError``, ``RuleParseError``).
- ``ValidationException``, raised by ``Validator.validate()`` once a run
  has collected at least one failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from dataknobs_common import (
    ConfigurationError,
    DataknobsError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from dataknobs_validator.error_bag import ErrorBag

# Package root, kept as an alias so callers can catch every validator error
ValidatorError = DataknobsError


class UnknownRuleError(NotFoundError):
    """Raised when a rule name is not in the catalog."""

    def __init__(self, rule: str):
        self.rule = rule
        super().__init__(f"Unknown validation rule: {rule}", context={"rule": rule})


class RuleArgumentError(ConfigurationError):
    """Raised when a rule constructor rejects its arguments."""

    def __init__(self, rule: str, reason: str):
        self.rule = rule
        self.reason = reason
        super().__init__(
            f"Invalid arguments for rule '{rule}': {reason}",
            context={"rule": rule, "reason": reason},
        )


class RuleParseError(ConfigurationError):
    """Raised when a rule string cannot be tokenized."""

    def __init__(self, rules: str, reason: str):
        self.rules = rules
        self.reason = reason
        super().__init__(
            f"Error parsing validation rules '{rules}': {reason}",
            context={"rules": rules, "reason": reason},
        )


class ValidationException(ValidationError):
    """Raised by ``Validator.validate()`` when the data fails its rules.

    Attributes:
        errors: The ErrorBag collected by the run
        error_bag: Name of the bag the errors belong to
    """

    def __init__(self, errors: ErrorBag, error_bag: str = "default"):
        self.errors = errors
        self.error_bag = error_bag
        super().__init__(
            self.summarize(errors),
            context={"errors": errors.to_dict(), "error_bag": error_bag},
        )

    @staticmethod
    def summarize(errors: ErrorBag) -> str:
        """Build the exception message from the first error in the bag."""
        messages = [message for field in errors.keys() for message in errors.get(field)]
        if not messages:
            return "The given data was invalid."

        summary = messages[0]
        remaining = len(messages) - 1
        if remaining:
            plural = "error" if remaining == 1 else "errors"
            summary += f" (and {remaining} more {plural})"
        return summary


__all__ = [
    "ValidatorError",
    "UnknownRuleError",
    "RuleArgumentError",
    "RuleParseError",
    "ValidationException",
]

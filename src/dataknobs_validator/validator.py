"""Validation engine.

The engine runs each field's plan against the input bag and collects
failures in an ``ErrorBag``. Evaluation is lazy and cached: the first
query runs every plan, and later queries reuse the result until rules or
settings change.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from .error_bag import ErrorBag
from .exceptions import ValidationException
from .parser import FieldPlan
from .paths import expand, lookup
from .rules.base import is_implicit, wants_data, wants_engine, wants_numeric_context

if TYPE_CHECKING:
    from .factory import Factory

logger = logging.getLogger(__name__)

#: Default bag name used by ``validate()``
DEFAULT_BAG = "default"


class Validator:
    """Evaluates rule plans against one input bag.

    Rules run in declaration order per field. Non-implicit rules are skipped
    when the field is absent or nil. A failed implicit rule ends the field,
    ``bail`` ends the field at its first failure, and
    ``stop_on_first_failure()`` ends the whole run at the first failure.

    Example:
        ```python
        validator = Validator(
            {"SSH_PORT": "2020"},
            {"SSH_PORT": "required|integer|between:1024,65535"},
        )
        validator.passes()  # True
        ```
    """

    def __init__(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Any],
        messages: Mapping[str, str] | None = None,
        attributes: Mapping[str, str] | None = None,
        factory: Factory | None = None,
    ):
        """Initialize the engine and compile every rule definition.

        Args:
            data: Input bag; never modified
            rules: Field name (dotted or wildcard) to rule definition
            messages: Message overrides keyed by ``field.rule`` or ``rule``
            attributes: Display names keyed by field name or wildcard pattern
            factory: Factory used to compile rules (default: the shared one)

        Raises:
            UnknownRuleError: If a rule name is not in the catalog
            RuleArgumentError: If a rule rejects its arguments
            RuleParseError: If a rule string is malformed
        """
        if factory is None:
            from .factory import default_factory
            factory = default_factory

        self.factory = factory
        self.data = data
        self.custom_messages: dict[str, str] = dict(messages or {})
        self.custom_attributes: dict[str, str] = dict(attributes or {})
        self._plans: dict[str, FieldPlan] = {
            field_name: factory.parse_field(spec) for field_name, spec in rules.items()
        }
        self._conditionals: list[tuple[str, FieldPlan, Callable[[Mapping[str, Any]], bool]]] = []
        self._stop_on_first_failure = False

        self._errors: ErrorBag | None = None
        self._fields: list[str] = []
        self._presence: dict[str, bool] = {}

    # Plan management

    def add_rule(self, field_name: str, *rules: Any) -> Validator:
        """Append rules to a field's plan (fluent API).

        Args:
            field_name: Field name, dotted or wildcard
            *rules: Rule strings, rule instances or plans

        Returns:
            Self for chaining
        """
        plan = self._plans.setdefault(field_name, FieldPlan())
        for spec in rules:
            plan.extend(self.factory.parse_field(spec))
        self._reset()
        return self

    def sometimes(
        self,
        field_name: str,
        rules: Any,
        predicate: Callable[[Mapping[str, Any]], bool],
    ) -> Validator:
        """Append rules to a field only when a predicate over the data holds.

        The predicate is evaluated at run time against the input bag; the
        base plan is left untouched.

        Returns:
            Self for chaining
        """
        self._conditionals.append((field_name, self.factory.parse_field(rules), predicate))
        self._reset()
        return self

    def stop_on_first_failure(self, enabled: bool = True) -> Validator:
        """Stop the whole run at the first failure.

        Returns:
            Self for chaining
        """
        self._stop_on_first_failure = enabled
        self._reset()
        return self

    def set_custom_messages(self, messages: Mapping[str, str]) -> Validator:
        """Merge message overrides keyed by ``field.rule`` or ``rule``."""
        self.custom_messages.update(messages)
        self._reset()
        return self

    def set_attribute_names(self, attributes: Mapping[str, str]) -> Validator:
        """Merge display names keyed by field name or wildcard pattern."""
        self.custom_attributes.update(attributes)
        self._reset()
        return self

    @property
    def rules(self) -> dict[str, FieldPlan]:
        """Copy of the declared plans, without conditional rules."""
        return {field_name: plan.copy() for field_name, plan in self._plans.items()}

    # Queries

    def passes(self) -> bool:
        """Run the rules (once) and report whether the data is valid."""
        return self.errors().is_empty()

    def fails(self) -> bool:
        return not self.passes()

    def errors(self) -> ErrorBag:
        """Get the error bag, running the rules on first call."""
        if self._errors is None:
            self._errors = self._run()
        return self._errors

    def valid(self) -> dict[str, Any]:
        """Present fields without errors, mapped to their values."""
        errors = self.errors()
        return {
            field_name: lookup(self.data, field_name)[1]
            for field_name in self._fields
            if self._presence.get(field_name) and not errors.has(field_name)
        }

    def invalid(self) -> dict[str, Any]:
        """Present fields with at least one error, mapped to their values."""
        errors = self.errors()
        return {
            field_name: lookup(self.data, field_name)[1]
            for field_name in self._fields
            if self._presence.get(field_name) and errors.has(field_name)
        }

    def has_field(self, field_name: str) -> bool:
        """Check whether a field is present in the input bag.

        Presence of fields under validation is fixed when a run starts.
        """
        if field_name in self._presence:
            return self._presence[field_name]
        found, _ = lookup(self.data, field_name)
        return found

    def validate(self) -> dict[str, Any]:
        """Validate and return the valid fields.

        Raises:
            ValidationException: If any rule failed
        """
        return self.validate_with_bag(DEFAULT_BAG)

    def validate_with_bag(self, error_bag: str) -> dict[str, Any]:
        """Validate, naming the error bag carried by the raised exception.

        Raises:
            ValidationException: If any rule failed
        """
        if self.fails():
            raise ValidationException(self.errors(), error_bag)
        return self.valid()

    # Evaluation

    def _reset(self) -> None:
        self._errors = None

    def _effective_plans(self) -> dict[str, FieldPlan]:
        plans = {field_name: plan.copy() for field_name, plan in self._plans.items()}
        for field_name, plan, predicate in self._conditionals:
            if predicate(self.data):
                plans.setdefault(field_name, FieldPlan()).extend(plan)
        return plans

    def _expand_fields(self, plans: dict[str, FieldPlan]) -> list[tuple[str, str, FieldPlan]]:
        """Expand wildcard patterns into concrete (field, pattern, plan) triples."""
        concrete: dict[str, tuple[str, FieldPlan]] = {}
        for pattern, plan in plans.items():
            for field_name in expand(self.data, pattern):
                if field_name in concrete:
                    concrete[field_name][1].extend(plan)
                else:
                    concrete[field_name] = (pattern, plan.copy())
        return [(field_name, pattern, plan) for field_name, (pattern, plan) in concrete.items()]

    def _run(self) -> ErrorBag:
        errors = ErrorBag()
        fields = self._expand_fields(self._effective_plans())

        self._fields = [field_name for field_name, _, _ in fields]
        self._presence = {field_name: lookup(self.data, field_name)[0] for field_name in self._fields}

        for field_name, pattern, plan in fields:
            if self._validate_field(field_name, pattern, plan, errors):
                break

        logger.debug(f"Validated {len(fields)} field(s): {errors.count()} error(s)")
        return errors

    def _validate_field(self, field_name: str, pattern: str, plan: FieldPlan, errors: ErrorBag) -> bool:
        """Run one field's plan.

        Returns:
            True when the whole run must stop
        """
        found, value = lookup(self.data, field_name)
        if not found:
            value = None
        nil = value is None

        for entry in plan:
            rule = entry.rule
            implicit = is_implicit(rule)
            if nil and not implicit:
                continue

            self._wire(rule, plan)
            if self._check(rule, entry.name, field_name, value):
                continue

            errors.add(field_name, self._format_message(field_name, pattern, entry.name, rule))
            logger.debug(f"Field '{field_name}' failed rule '{entry.name}'")
            if self._stop_on_first_failure:
                return True
            if implicit or plan.has_bail:
                break
        return False

    def _wire(self, rule: Any, plan: FieldPlan) -> None:
        if wants_data(rule):
            rule.set_data(self.data)
        if wants_engine(rule):
            rule.set_engine(self)
        if wants_numeric_context(rule):
            rule.set_numeric_context(plan.has_numeric_rule)

    def _check(self, rule: Any, name: str, field_name: str, value: Any) -> bool:
        try:
            return bool(rule.passes(field_name, value))
        except Exception as e:
            # An error inside a rule counts as a failure of that rule
            logger.debug(f"Rule '{name}' raised on field '{field_name}': {e!r}")
            return False

    # Messages

    def _custom_template(self, field_name: str, pattern: str, name: str) -> str | None:
        keys = [f"{field_name}.{name}"]
        if pattern != field_name:
            keys.append(f"{pattern}.{name}")
        keys.append(name)

        for source in (self.custom_messages, self.factory.config.get("messages") or {}):
            for key in keys:
                if key in source:
                    return source[key]
        return None

    def display_name(self, field_name: str, pattern: str | None = None) -> str:
        """Display name of a field: caller override, else the humanized name."""
        if field_name in self.custom_attributes:
            return self.custom_attributes[field_name]
        if pattern is not None and pattern in self.custom_attributes:
            return self.custom_attributes[pattern]
        return field_name.replace("_", " ")

    def _format_message(self, field_name: str, pattern: str, name: str, rule: Any) -> str:
        template = self._custom_template(field_name, pattern, name)
        if template is None:
            template = rule.message()

        display = self.display_name(field_name, pattern)
        replacements = {
            "attribute": display,
            "Attribute": display[:1].upper() + display[1:],
        }
        extra = getattr(rule, "replacements", None)
        for key, replacement in (extra() if callable(extra) else {}).items():
            if key == "other":
                replacement = self.custom_attributes.get(replacement, replacement.replace("_", " "))
            replacements[key] = str(replacement)
        return replace_placeholders(template, replacements)


def replace_placeholders(template: str, replacements: Mapping[str, str]) -> str:
    """Substitute ``:name`` placeholders in one pass, longest names first."""
    if not replacements:
        return template
    names = sorted(replacements, key=len, reverse=True)
    placeholder = re.compile(":(" + "|".join(re.escape(name) for name in names) + ")")
    return placeholder.sub(lambda match: replacements[match.group(1)], template)

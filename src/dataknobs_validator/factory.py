"""Rule factory, compiled rule sets and configuration-driven construction.

The ``Factory`` owns the rule catalog and the configuration map handed to
every rule constructor. It compiles rule strings into ``FieldPlan``s and
builds ``Validator`` engines from them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from dataknobs_common import DataknobsError, Registry
from dataknobs_config import FactoryBase

from .exceptions import RuleArgumentError, RuleParseError, UnknownRuleError
from .parser import FieldPlan, PlannedRule, format_rules, parse_segment, tokenize
from .rules.base import CallbackRule, Rule, RuleConstructor, rule_name
from .rules.catalog import builtin_rules
from .validator import Validator

logger = logging.getLogger(__name__)


class Factory:
    """Rule catalog plus configuration; builds plans and engines.

    Example:
        ```python
        factory = Factory()
        factory.register_rule("even", lambda config, *args: CallbackRule(
            lambda attribute, value: int(value) % 2 == 0,
            "The :attribute field must be even.", name="even"))

        validator = factory.make({"count": "3"}, {"count": "required|even"})
        validator.fails()  # True
        ```
    """

    def __init__(self, config: Mapping[str, Any] | None = None):
        """Initialize factory with the built-in catalog.

        Args:
            config: Initial configuration map passed to rule constructors
        """
        self._rules: Registry[RuleConstructor] = Registry("validation_rules")
        for name, constructor in builtin_rules().items():
            self._rules.register(name, constructor)
        self._config: dict[str, Any] = dict(config or {})

    def register_rule(self, name: str, constructor: RuleConstructor) -> Factory:
        """Add or replace a rule in the catalog.

        Args:
            name: Rule name as written in rule strings (case-insensitive)
            constructor: Callable taking (config, *args) and returning a rule,
                or a ``Rule`` subclass whose ``from_args`` does that

        Returns:
            Self for chaining
        """
        if isinstance(constructor, type) and issubclass(constructor, Rule):
            constructor = constructor.from_args
        key = name.strip().lower()
        replaced = self._rules.has(key)
        self._rules.register(key, constructor, allow_overwrite=True)
        logger.debug(f"{'Replaced' if replaced else 'Registered'} validation rule: {key}")
        return self

    def has_rule(self, name: str) -> bool:
        return self._rules.has(name.strip().lower())

    def rule_names(self) -> list[str]:
        """Get every rule name in the catalog, sorted."""
        return sorted(self._rules.list_keys())

    @property
    def config(self) -> dict[str, Any]:
        """Copy of the configuration map."""
        return dict(self._config)

    def set_config(self, key: str, value: Any) -> Factory:
        """Set a configuration entry seen by rules built afterwards."""
        self._config[key] = value
        return self

    def unset_config(self, key: str) -> Factory:
        """Remove a configuration entry; unknown keys are ignored."""
        self._config.pop(key, None)
        return self

    def with_config(self, overrides: Mapping[str, Any] | None = None) -> Factory:
        """Clone this factory, catalog included, with extra configuration."""
        clone = Factory({**self._config, **dict(overrides or {})})
        for name, constructor in self._rules.items():
            clone._rules.register(name, constructor, allow_overwrite=True)
        return clone

    def build_rule(self, name: str, args: tuple[str, ...] = ()) -> Rule:
        """Construct one rule from its name and argument vector.

        Raises:
            UnknownRuleError: If the name is not in the catalog
            RuleArgumentError: If the constructor rejects the arguments
        """
        key = name.strip().lower()
        if not self._rules.has(key):
            raise UnknownRuleError(key)
        constructor = self._rules.get(key)
        try:
            return constructor(MappingProxyType(self._config), *args)
        except DataknobsError:
            raise
        except Exception as e:
            raise RuleArgumentError(key, str(e)) from e

    def parse_field(self, rules: Any) -> FieldPlan:
        """Compile the rules of one field into a plan.

        Args:
            rules: A pipe-delimited string, a ``FieldPlan``, a rule instance,
                a callable ``(attribute, value) -> bool``, or a list mixing
                these. Strings inside a list are single rules, so a regex
                given that way may contain ``|`` freely.

        Returns:
            FieldPlan in declaration order

        Raises:
            UnknownRuleError: If a rule name is not in the catalog
            RuleArgumentError: If a rule rejects its arguments
            RuleParseError: If a rule string is malformed
        """
        if isinstance(rules, FieldPlan):
            return rules.copy()

        plan = FieldPlan()
        if isinstance(rules, str):
            for name, args in tokenize(rules):
                plan.add(PlannedRule(name, args, self.build_rule(name, args)))
            return plan

        items = rules if isinstance(rules, (list, tuple)) else [rules]
        for item in items:
            if isinstance(item, str):
                parsed = parse_segment(item)
                if parsed is not None:
                    name, args = parsed
                    plan.add(PlannedRule(name, args, self.build_rule(name, args)))
            elif isinstance(item, FieldPlan):
                plan.extend(item)
            elif callable(getattr(item, "passes", None)):
                plan.add(PlannedRule(rule_name(item), (), item))
            elif callable(item):
                callback = CallbackRule(item)
                plan.add(PlannedRule(callback.rule_name, (), callback))
            else:
                raise RuleParseError(repr(item), f"unsupported rule type {type(item).__name__}")
        return plan

    def parse(self, rules: Mapping[str, Any]) -> RuleSet:
        """Compile a rule map into a reusable rule set.

        Args:
            rules: Field name (dotted or wildcard) to rule definition

        Returns:
            RuleSet that can validate many data bags
        """
        plans = {}
        for field_name, spec in rules.items():
            plans[field_name] = self.parse_field(spec)
            logger.debug(f"Compiled rules for '{field_name}': {format_rules(plans[field_name])}")
        return RuleSet(plans, self)

    def make(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Any],
        messages: Mapping[str, str] | None = None,
        attributes: Mapping[str, str] | None = None,
    ) -> Validator:
        """Build an engine for one data bag.

        Args:
            data: Input bag
            rules: Field name to rule definition
            messages: Message overrides keyed by ``field.rule`` or ``rule``
            attributes: Display names keyed by field name

        Returns:
            Validator, evaluated lazily on first query
        """
        return Validator(data, rules, messages=messages, attributes=attributes, factory=self)

    def validate(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Any],
        messages: Mapping[str, str] | None = None,
        attributes: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Validate in one call.

        Returns:
            The valid fields and their values

        Raises:
            ValidationException: If the data fails its rules
        """
        return self.make(data, rules, messages, attributes).validate()


@dataclass
class RuleSet:
    """Compiled rule plans that can be applied to many data bags.

    Attributes:
        plans: Field name to compiled plan
        factory: Factory whose configuration the engines consult
        name: Rule set name
        messages: Message overrides applied to every engine
        attributes: Display names applied to every engine
        stop_on_first_failure: Whether engines stop at the first failure
    """

    plans: dict[str, FieldPlan]
    factory: Factory
    name: str = "default"
    messages: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, str] = field(default_factory=dict)
    stop_on_first_failure: bool = False

    def make(
        self,
        data: Mapping[str, Any],
        messages: Mapping[str, str] | None = None,
        attributes: Mapping[str, str] | None = None,
    ) -> Validator:
        """Build an engine for a data bag; overrides merge over the set's own."""
        validator = Validator(
            data,
            {field_name: plan.copy() for field_name, plan in self.plans.items()},
            messages={**self.messages, **dict(messages or {})},
            attributes={**self.attributes, **dict(attributes or {})},
            factory=self.factory,
        )
        if self.stop_on_first_failure:
            validator.stop_on_first_failure()
        return validator

    def validate(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Validate a data bag, raising ``ValidationException`` on failure."""
        return self.make(data).validate_with_bag(self.name)

    @property
    def fields(self) -> list[str]:
        return list(self.plans)

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the configuration structure ``from_dict`` reads."""
        settings = self.factory.config
        settings.pop("messages", None)
        return {
            "name": self.name,
            "rules": {field_name: format_rules(plan) for field_name, plan in self.plans.items()},
            "messages": dict(self.messages),
            "attributes": dict(self.attributes),
            "settings": settings,
            "stop_on_first_failure": self.stop_on_first_failure,
        }

    @classmethod
    def from_dict(cls, config: Mapping[str, Any], factory: Factory | None = None) -> RuleSet:
        """Build a rule set from a configuration mapping (see ``RuleSetFactory``)."""
        options = dict(config)
        if factory is not None:
            options["factory"] = factory
        return rule_set_factory.create(**options)

    @classmethod
    def from_yaml(cls, path: str | Path, factory: Factory | None = None) -> RuleSet:
        """Load a rule set from a YAML file.

        Raises:
            ConfigurationError: If the file does not hold a mapping
        """
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
        if not isinstance(config, Mapping):
            raise RuleParseError(str(path), "rule set file must contain a mapping")
        config = dict(config)
        config.setdefault("name", Path(path).stem)
        return cls.from_dict(config, factory)


class RuleSetFactory(FactoryBase):
    """Factory for creating rule sets from configuration.

    Configuration Options:
        name (str): Rule set name
        rules (dict): Field name to rule string or list of rule strings
        messages (dict): Message overrides keyed by ``field.rule`` or ``rule``
        attributes (dict): Display names keyed by field name
        settings (dict): Rule configuration (``boolean.loose``, ``date.layouts``, ...)
        stop_on_first_failure (bool): Stop at the first failure (default: False)
        factory (Factory): Base factory whose catalog is used (default: the shared one)

    Example Configuration:
        rule_sets:
          - name: signup
            factory: rule_set
            settings:
              boolean.loose: true
            rules:
              email: required|email
              password: required|min:8|confirmed
              newsletter: boolean
            messages:
              password.min: Passwords need at least :min characters.
            attributes:
              email: email address
    """

    def create(self, **config) -> RuleSet:
        """Create a RuleSet instance from configuration.

        Args:
            **config: Rule set configuration

        Returns:
            RuleSet instance
        """
        name = config.get("name", "unnamed_rule_set")
        logger.info(f"Creating rule set: {name}")

        base = config.get("factory")
        if not isinstance(base, Factory):
            base = default_factory
        settings = config.get("settings") or {}
        factory = base.with_config(settings) if settings else base

        rules = {}
        for field_name, spec in (config.get("rules") or {}).items():
            if spec is None or spec == "" or spec == []:
                logger.warning(f"Rule set '{name}': field '{field_name}' has no rules, skipping")
                continue
            rules[field_name] = spec

        rule_set = factory.parse(rules)
        rule_set.name = name
        rule_set.messages = dict(config.get("messages") or {})
        rule_set.attributes = dict(config.get("attributes") or {})
        rule_set.stop_on_first_failure = bool(config.get("stop_on_first_failure", False))
        return rule_set


# Shared instances for convenience
default_factory = Factory()
rule_set_factory = RuleSetFactory()


def make(
    data: Mapping[str, Any],
    rules: Mapping[str, Any],
    messages: Mapping[str, str] | None = None,
    attributes: Mapping[str, str] | None = None,
) -> Validator:
    """Build an engine with the shared factory."""
    return default_factory.make(data, rules, messages, attributes)


def parse(rules: Mapping[str, Any]) -> RuleSet:
    """Compile a rule map with the shared factory."""
    return default_factory.parse(rules)


def register_rule(name: str, constructor: Callable[..., Rule]) -> Factory:
    """Register a rule on the shared factory."""
    return default_factory.register_rule(name, constructor)

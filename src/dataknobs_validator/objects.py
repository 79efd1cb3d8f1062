"""Object-validation adapter for dataclasses and pydantic models.

Rule strings are declared on the fields themselves and the object is
turned into an input bag for the engine:

    ```python
    @dataclass
    class Signup:
        email: str = field(metadata={"validate": "required|email"})
        age: int | None = field(default=None, metadata={"validate": "nullable|integer|min:18"})

    class Server(BaseModel):
        port: int = Field(json_schema_extra={"validate": "required|between:1024,65535"})

    validate_object(Signup(email="a@example.com")).passes()
    ```

Fields holding ``None`` are left out of the bag, so they count as missing.
Nested dataclasses and models become nested mappings, and their rules are
collected under dotted names (``address.city``).
"""

from __future__ import annotations

import dataclasses
import logging
import typing
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from .exceptions import RuleParseError
from .validator import Validator

if TYPE_CHECKING:
    from .factory import Factory

logger = logging.getLogger(__name__)

#: Metadata key holding a field's rule string
RULES_KEY = "validate"


def _is_model_class(cls: Any) -> bool:
    return isinstance(cls, type) and (dataclasses.is_dataclass(cls) or issubclass(cls, BaseModel))


def _nested_class(annotation: Any) -> type | None:
    """Find a dataclass or model class inside a field annotation (``X | None`` included)."""
    if _is_model_class(annotation):
        return annotation
    for arg in typing.get_args(annotation):
        if _is_model_class(arg):
            return arg
    return None


def _declared_fields(cls: type) -> list[tuple[str, Any, Any]]:
    """List (name, annotation, rules) for every field of a dataclass or model."""
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        declared = []
        for name, info in cls.model_fields.items():
            extra = info.json_schema_extra
            rules = extra.get(RULES_KEY) if isinstance(extra, Mapping) else None
            declared.append((name, info.annotation, rules))
        return declared

    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError):
        hints = {}
    return [
        (f.name, hints.get(f.name, f.type), f.metadata.get(RULES_KEY))
        for f in dataclasses.fields(cls)
    ]


def rules_for(cls: type, prefix: str = "") -> dict[str, Any]:
    """Collect the rule map declared on a dataclass or pydantic model class.

    Args:
        cls: Dataclass or ``BaseModel`` subclass
        prefix: Dotted prefix for nested classes

    Returns:
        Field name to rule definition, nested fields under dotted names

    Raises:
        RuleParseError: If ``cls`` is neither a dataclass nor a model
    """
    if not _is_model_class(cls):
        raise RuleParseError(repr(cls), "expected a dataclass or pydantic model class")

    rules: dict[str, Any] = {}
    for name, annotation, spec in _declared_fields(cls):
        path = f"{prefix}{name}"
        if spec:
            rules[path] = spec
        nested = _nested_class(annotation)
        if nested is not None and nested is not cls:
            rules.update(rules_for(nested, f"{path}."))
    return rules


def to_bag(obj: Any) -> Any:
    """Convert an object to an input bag, dropping ``None`` fields."""
    if isinstance(obj, BaseModel):
        return {
            name: to_bag(getattr(obj, name))
            for name in type(obj).model_fields
            if getattr(obj, name) is not None
        }
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: to_bag(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
            if getattr(obj, f.name) is not None
        }
    if isinstance(obj, Mapping):
        return {key: to_bag(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_bag(item) for item in obj]
    return obj


def validate_object(
    obj: Any,
    factory: Factory | None = None,
    messages: Mapping[str, str] | None = None,
    attributes: Mapping[str, str] | None = None,
) -> Validator:
    """Build an engine for a dataclass instance or pydantic model.

    Args:
        obj: Object to validate
        factory: Factory used to compile rules (default: the shared one)
        messages: Message overrides
        attributes: Display names

    Returns:
        Validator over the object's fields

    Raises:
        RuleParseError: If ``obj`` is not a dataclass instance or model
    """
    if isinstance(obj, type) or not _is_model_class(type(obj)):
        raise RuleParseError(repr(obj), "expected a dataclass instance or pydantic model")

    rules = rules_for(type(obj))
    logger.debug(f"Validating {type(obj).__name__} with {len(rules)} rule field(s)")
    return Validator(to_bag(obj), rules, messages=messages, attributes=attributes, factory=factory)

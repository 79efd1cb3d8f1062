"""Error bag collecting per-field validation messages."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field


@dataclass
class ErrorBag:
    """Ordered mapping of field name to the messages its rules produced.

    Fields keep the order in which they first failed and messages keep the
    order in which rules failed. Duplicate messages are kept.
    """

    messages: dict[str, list[str]] = field(default_factory=dict)

    def __bool__(self) -> bool:
        """Allow 'if errors:' usage to check for failures."""
        return self.is_not_empty()

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, field_name: object) -> bool:
        return field_name in self.messages

    def __iter__(self) -> Iterator[str]:
        return iter(self.messages)

    def add(self, field_name: str, message: str) -> ErrorBag:
        """Append a message for a field (fluent API).

        Args:
            field_name: Field the message belongs to
            message: Formatted error message

        Returns:
            Self for chaining
        """
        self.messages.setdefault(field_name, []).append(message)
        return self

    def has(self, field_name: str) -> bool:
        """Check if a field has any errors."""
        return bool(self.messages.get(field_name))

    def get(self, field_name: str) -> list[str]:
        """Get all messages for a field, or an empty list."""
        return list(self.messages.get(field_name, []))

    def first(self, field_name: str | None = None) -> str:
        """Get the first message for a field, or for the whole bag.

        Args:
            field_name: Field to look up; None means the first failing field

        Returns:
            The first message, or an empty string when there is none
        """
        if field_name is None:
            for messages in self.messages.values():
                if messages:
                    return messages[0]
            return ""
        messages = self.messages.get(field_name)
        return messages[0] if messages else ""

    def all(self) -> dict[str, list[str]]:
        """Get a copy of every field's messages."""
        return {name: list(messages) for name, messages in self.messages.items()}

    def keys(self) -> list[str]:
        """Get the failing field names in failure order."""
        return list(self.messages)

    def count(self) -> int:
        """Count messages across all fields."""
        return sum(len(messages) for messages in self.messages.values())

    def is_empty(self) -> bool:
        """Check if the bag holds no messages."""
        return self.count() == 0

    def is_not_empty(self) -> bool:
        """Check if the bag holds at least one message."""
        return not self.is_empty()

    def merge(self, other: ErrorBag) -> ErrorBag:
        """Combine two bags into a new one, keeping this bag's messages first."""
        merged = ErrorBag(self.all())
        for name, messages in other.messages.items():
            for message in messages:
                merged.add(name, message)
        return merged

    def to_dict(self) -> dict[str, list[str]]:
        """Convert to a plain dictionary for serialization."""
        return self.all()

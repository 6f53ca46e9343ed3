"""Normalizes an inbound conversation before it reaches any provider."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

MAX_MESSAGES = 20


class InvalidInput(Exception):
    """Caller-supplied conversation is missing, empty, or not a list."""
    pass


@dataclass(frozen=True)
class Message:
    """Single chat turn as sent to a provider."""
    role: Any
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


def sanitize_messages(raw: Any) -> list[Message]:
    """Bound and coerce a loosely-typed conversation.

    Args:
        raw: Caller input, expected to be a list of {role, content} records.

    Returns:
        The last MAX_MESSAGES entries in original order, with content as text.

    Raises:
        InvalidInput: If raw is absent, not a list, or empty.
    """
    if not isinstance(raw, (list, tuple)) or len(raw) == 0:
        raise InvalidInput("messages must be a non-empty array")

    sanitized = []
    for item in raw[-MAX_MESSAGES:]:
        record = item if isinstance(item, Mapping) else {}
        content = record.get("content")
        # Python rendering: True -> "True", {"a": 1} -> "{'a': 1}"
        sanitized.append(Message(
            role=record.get("role"),
            content="" if content is None else str(content),
        ))
    return sanitized

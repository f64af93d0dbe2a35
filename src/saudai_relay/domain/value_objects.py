"""Value objects: self-validating domain primitives."""

from __future__ import annotations

from dataclasses import dataclass

from saudai_relay.domain.exceptions import InvalidInputError


@dataclass(frozen=True, slots=True)
class UserMessage:
    """Validated text of an inbound chat message.

    Anything that is not a non-empty ``str`` (``None``, numbers, lists,
    the empty string) is rejected before a backend is ever contacted.
    """

    text: str

    @classmethod
    def from_raw(cls, value: object) -> UserMessage:
        """Validate an untrusted ``message`` value."""
        if not isinstance(value, str) or not value:
            raise InvalidInputError("I need a message string to respond to.")
        return cls(text=value)

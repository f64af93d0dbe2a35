"""Domain entities: pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ChatRole(str, Enum):
    """Speaker of a single chat turn."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class ChatTurn:
    """One message of the prompt sent to the backend."""

    role: ChatRole
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass(frozen=True, slots=True)
class GenerationOptions:
    """Sampling parameters passed through to the backend."""

    temperature: float = 0.2
    max_output_tokens: int = 300


@dataclass(frozen=True, slots=True)
class BackendRequest:
    """A single outbound chat-completion call, built fresh per inbound request."""

    model_id: str
    turns: tuple[ChatTurn, ...]
    streaming: bool
    options: GenerationOptions

    @property
    def messages(self) -> list[dict[str, str]]:
        return [turn.to_dict() for turn in self.turns]

    def to_payload(self) -> dict[str, Any]:
        """Render the local-model-server request body.

        Options are spread at the top level as well as inside the server's
        native ``options`` block; fields a model does not know are ignored.
        """
        return {
            "model": self.model_id,
            "messages": self.messages,
            "stream": self.streaming,
            "temperature": self.options.temperature,
            "max_new_tokens": self.options.max_output_tokens,
            "options": {
                "temperature": self.options.temperature,
                "num_predict": self.options.max_output_tokens,
            },
        }


@dataclass(frozen=True, slots=True)
class StreamFragment:
    """One decoded line of a chunked backend response."""

    text_delta: str | None = None
    is_final: bool = False


@dataclass(frozen=True, slots=True)
class ReplyResult:
    """The final reply returned to the caller."""

    text: str

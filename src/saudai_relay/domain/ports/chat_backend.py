"""Port: chat backend, defined by the domain and implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from saudai_relay.domain.entities import BackendRequest


class ChatBackend(Protocol):
    """Abstract contract for a large-language-model chat backend."""

    async def complete(self, request: BackendRequest, *, timeout_ms: int) -> str:
        """Run *request* within *timeout_ms* and return the assembled reply text.

        Raises ``BackendUnreachableError``, ``BackendError`` or
        ``BackendTimeoutError``; never a transport-specific exception.
        """
        ...

    async def close(self) -> None:
        """Release underlying HTTP resources."""
        ...

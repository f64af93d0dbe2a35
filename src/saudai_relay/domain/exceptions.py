"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
Fragment-level decode failures are not part of this hierarchy: they are
absorbed by the aggregator and never raised.
"""

from __future__ import annotations


class SaudAIRelayError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidInputError(SaudAIRelayError):
    """The inbound request did not carry a usable message string."""


# ── Backend errors ──────────────────────────────────────────────────────────


class BackendUnreachableError(SaudAIRelayError):
    """The model backend could not be reached (connection refused, DNS, ...)."""


class BackendError(SaudAIRelayError):
    """The model backend answered with a non-success status code.

    ``excerpt`` holds the start of the response body for diagnostics; it is
    logged, not returned to the caller.
    """

    def __init__(self, status_code: int, excerpt: str = "") -> None:
        super().__init__(f"Model server error ({status_code}).")
        self.status_code = status_code
        self.excerpt = excerpt


class BackendTimeoutError(SaudAIRelayError):
    """The backend call did not complete within the configured bound."""

"""Global exception handlers: translate domain errors to HTTP responses.

Each domain exception maps to a specific HTTP status code and the
standard ``{"status": "error", "reply": "..."}`` envelope, so callers always
receive a machine-readable outcome.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from saudai_relay.domain.exceptions import (
    BackendError,
    BackendTimeoutError,
    BackendUnreachableError,
    InvalidInputError,
    SaudAIRelayError,
)

logger = logging.getLogger(__name__)

_EXCEPTION_STATUS: list[tuple[type[SaudAIRelayError], int]] = [
    (InvalidInputError, 400),
    (BackendError, 502),
    (BackendUnreachableError, 502),
    (BackendTimeoutError, 504),
]

_INVALID_INPUT_REPLY = "I need a message string to respond to."
_UNEXPECTED_REPLY = "There was an error talking to the model. See server logs."


def _error_json(status_code: int, reply: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "reply": reply},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application."""

    # ── Domain exceptions ───────────────────────────────────────────────

    for exc_type, code in _EXCEPTION_STATUS:

        def _make_handler(
            status_code: int,
        ):  # type: ignore[no-untyped-def]
            async def handler(request: Request, exc: Exception) -> JSONResponse:
                if isinstance(exc, BackendError):
                    logger.warning(
                        "Backend responded with %d: %s", exc.status_code, exc.excerpt
                    )
                else:
                    logger.warning("%s: %s", type(exc).__name__, exc)
                return _error_json(status_code, str(exc))

            return handler

        app.add_exception_handler(exc_type, _make_handler(code))

    # ── Pydantic / FastAPI validation errors ────────────────────────────

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", []))
            logger.info("Rejected request at %s: %s", loc, err.get("msg", "validation error"))
        return _error_json(400, _INVALID_INPUT_REPLY)

    # ── Catch-all for unexpected errors ─────────────────────────────────

    @app.exception_handler(Exception)
    async def generic_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception")
        return _error_json(500, _UNEXPECTED_REPLY)

"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from pydantic import BaseModel, StrictStr, field_validator


class ChatRequest(BaseModel):
    """Request body for ``POST /api/chat`` and ``POST /api/chat/sync``."""

    message: StrictStr

    @field_validator("message")
    @classmethod
    def _must_not_be_empty(cls, v: str) -> str:
        if not v:
            msg = "message must not be empty."
            raise ValueError(msg)
        return v


class ChatResponse(BaseModel):
    """Successful chat reply."""

    reply: str


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    reply: str

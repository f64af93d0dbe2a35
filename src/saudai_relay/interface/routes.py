"""API routes: thin controllers that delegate to the use case."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from saudai_relay.interface.dependencies import get_use_case
from saudai_relay.interface.schemas import ChatRequest, ChatResponse, ErrorResponse
from saudai_relay.services.relay_chat import RelayChatUseCase

router = APIRouter(prefix="/api")

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid message"},
    502: {"model": ErrorResponse, "description": "Model server error or unreachable"},
    504: {"model": ErrorResponse, "description": "Timed out waiting for the model"},
    500: {"model": ErrorResponse, "description": "Unexpected failure"},
}


@router.post("/chat", response_model=ChatResponse, responses=_ERROR_RESPONSES)
async def chat(
    body: ChatRequest,
    use_case: RelayChatUseCase = Depends(get_use_case),
) -> ChatResponse:
    """Relay a message to the model, consuming its reply as a stream."""
    result = await use_case.execute(body.message, streaming=True)
    return ChatResponse(reply=result.text)


@router.post("/chat/sync", response_model=ChatResponse, responses=_ERROR_RESPONSES)
async def chat_sync(
    body: ChatRequest,
    use_case: RelayChatUseCase = Depends(get_use_case),
) -> ChatResponse:
    """Relay a message using a single, non-streamed backend response."""
    result = await use_case.execute(body.message, streaming=False)
    return ChatResponse(reply=result.text)

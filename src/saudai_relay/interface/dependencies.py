"""FastAPI dependency injection wiring."""

from __future__ import annotations

import logging

import httpx

from saudai_relay.domain.entities import GenerationOptions
from saudai_relay.domain.ports.chat_backend import ChatBackend
from saudai_relay.infrastructure.config import Settings, get_settings
from saudai_relay.infrastructure.ollama_adapter import OllamaAdapter
from saudai_relay.infrastructure.openai_adapter import OpenAIAdapter
from saudai_relay.services.relay_chat import RelayChatUseCase

logger = logging.getLogger(__name__)

_backend: ChatBackend | None = None

# Per-call bounds are enforced by the aggregator; only connects are capped here.
_CONNECT_TIMEOUT_S = 10.0


def build_backend(settings: Settings) -> ChatBackend:
    """Select the backend adapter named by ``settings.backend``."""
    if settings.backend == "openai":
        if settings.openai_api_key is None:
            msg = "SAUDAI_OPENAI_API_KEY must be set when SAUDAI_BACKEND=openai."
            raise ValueError(msg)
        return OpenAIAdapter(
            api_key=settings.openai_api_key.get_secret_value(),
            base_url=settings.openai_base_url,
        )
    client = httpx.AsyncClient(timeout=httpx.Timeout(None, connect=_CONNECT_TIMEOUT_S))
    return OllamaAdapter(client=client, base_url=settings.ollama_url)


async def startup() -> None:
    """Initialise shared resources; called from the lifespan context manager."""
    global _backend  # noqa: PLW0603

    settings = get_settings()
    _backend = build_backend(settings)

    logger.info("SaudAI relay backend: %s", settings.backend)
    logger.info("Model: %s", settings.model)
    logger.info(
        "Timeout (ms): %d stream / %d sync", settings.timeout_ms, settings.sync_timeout_ms
    )


async def shutdown() -> None:
    """Release shared resources."""
    global _backend  # noqa: PLW0603

    if _backend:
        await _backend.close()
        _backend = None


def get_use_case() -> RelayChatUseCase:
    """Build the use case around the shared backend adapter."""
    settings = get_settings()

    assert _backend is not None, "startup() was not called"

    return RelayChatUseCase(
        backend=_backend,
        model_id=settings.model,
        options=GenerationOptions(
            temperature=settings.temperature,
            max_output_tokens=settings.max_tokens,
        ),
        timeout_ms=settings.timeout_ms,
        sync_timeout_ms=settings.sync_timeout_ms,
    )

"""OpenAI adapter: implements the ChatBackend port over the chat-completions API."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from saudai_relay.domain.entities import BackendRequest
from saudai_relay.domain.exceptions import (
    BackendError,
    BackendTimeoutError,
    BackendUnreachableError,
)
from saudai_relay.services.response_shapes import extract_text
from saudai_relay.services.stream_aggregator import excerpt, run_bounded

logger = logging.getLogger(__name__)


class OpenAIAdapter:
    """Concrete ``ChatBackend`` backed by the OpenAI chat-completions API."""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        # No retry policy: a single attempt bounded by the request timeout.
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            max_retries=0,
            http_client=http_client,
        )

    async def complete(self, request: BackendRequest, *, timeout_ms: int) -> str:
        """Send the prompt and return the assembled completion text."""
        call = self._stream(request) if request.streaming else self._fetch(request)
        try:
            return await run_bounded(call, timeout_ms)

        except APITimeoutError as exc:
            # The SDK chains the httpx error; a connect timeout means never reached.
            if isinstance(exc.__cause__, httpx.ConnectTimeout):
                logger.debug("Connect to OpenAI API timed out")
                raise BackendUnreachableError(
                    f"Could not reach the model API: {exc}"
                ) from exc
            raise BackendTimeoutError(
                "Request timed out waiting for model. Try again or increase timeout."
            ) from exc

        except APIConnectionError as exc:
            logger.debug("Cannot reach OpenAI API: %s", exc)
            raise BackendUnreachableError(f"Could not reach the model API: {exc}") from exc

        except APIStatusError as exc:
            raise BackendError(exc.status_code, excerpt(str(exc.message))) from exc

    def _create_kwargs(self, request: BackendRequest) -> dict[str, Any]:
        return {
            "model": request.model_id,
            "messages": request.messages,
            "temperature": request.options.temperature,
            "max_tokens": request.options.max_output_tokens,
        }

    async def _stream(self, request: BackendRequest) -> str:
        stream = await self._client.chat.completions.create(
            **self._create_kwargs(request), stream=True
        )
        parts: list[str] = []
        async with stream:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if isinstance(delta, str):
                    parts.append(delta)
        return "".join(parts).strip()

    async def _fetch(self, request: BackendRequest) -> str:
        response = await self._client.chat.completions.create(**self._create_kwargs(request))
        return (extract_text(response.model_dump()) or "").strip()

    async def close(self) -> None:
        """Release underlying HTTP resources."""
        await self._client.close()

"""Local model-server adapter: implements the ChatBackend port over NDJSON."""

from __future__ import annotations

import logging

import httpx

from saudai_relay.domain.entities import BackendRequest
from saudai_relay.domain.exceptions import (
    BackendError,
    BackendTimeoutError,
    BackendUnreachableError,
)
from saudai_relay.services.stream_aggregator import (
    collect_body,
    collect_stream,
    excerpt,
    run_bounded,
)

logger = logging.getLogger(__name__)


class OllamaAdapter:
    """Concrete ``ChatBackend`` backed by an Ollama-compatible ``/api/chat``."""

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    @property
    def chat_url(self) -> str:
        # Accept both a base URL and the full endpoint.
        if self._base_url.endswith("/api/chat"):
            return self._base_url
        return f"{self._base_url}/api/chat"

    async def complete(self, request: BackendRequest, *, timeout_ms: int) -> str:
        """POST the request and assemble the reply within *timeout_ms*."""
        call = self._stream(request) if request.streaming else self._fetch(request)
        try:
            return await run_bounded(call, timeout_ms)
        except httpx.ConnectTimeout as exc:
            # Never connected: a network failure, not a slow model.
            logger.debug("Connect to model server at %s timed out", self.chat_url)
            raise BackendUnreachableError(
                f"Could not reach the model server: {exc}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise BackendTimeoutError(
                "Request timed out waiting for model. Try again or increase timeout."
            ) from exc
        except httpx.HTTPError as exc:
            logger.debug("Cannot reach model server at %s: %s", self.chat_url, exc)
            raise BackendUnreachableError(
                f"Could not reach the model server: {exc}"
            ) from exc

    async def _stream(self, request: BackendRequest) -> str:
        async with self._client.stream(
            "POST", self.chat_url, json=request.to_payload()
        ) as resp:
            if not resp.is_success:
                body = (await resp.aread()).decode("utf-8", errors="replace")
                raise BackendError(resp.status_code, excerpt(body))
            return await collect_stream(resp.aiter_bytes())

    async def _fetch(self, request: BackendRequest) -> str:
        resp = await self._client.post(self.chat_url, json=request.to_payload())
        if not resp.is_success:
            raise BackendError(resp.status_code, excerpt(resp.text))
        return collect_body(resp.text)

    async def close(self) -> None:
        """Release underlying HTTP resources."""
        await self._client.aclose()

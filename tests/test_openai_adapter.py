"""Tests for the OpenAI adapter, with the SDK pointed at an in-process transport."""

import asyncio
import json

import httpx
import pytest

from saudai_relay.domain.entities import BackendRequest, GenerationOptions
from saudai_relay.domain.exceptions import (
    BackendError,
    BackendTimeoutError,
    BackendUnreachableError,
)
from saudai_relay.domain.value_objects import UserMessage
from saudai_relay.infrastructure.openai_adapter import OpenAIAdapter
from saudai_relay.services.relay_chat import build_turns


def _request(streaming=True):
    return BackendRequest(
        model_id="gpt-4o-mini",
        turns=build_turns(UserMessage.from_raw("Hi")),
        streaming=streaming,
        options=GenerationOptions(temperature=0.2, max_output_tokens=120),
    )


def _chunk(content):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion.chunk",
        "created": 0,
        "model": "gpt-4o-mini",
        "choices": [{"index": 0, "delta": {"content": content}, "finish_reason": None}],
    }


def _sse(*events):
    body = "".join(f"data: {json.dumps(e)}\n\n" for e in events) + "data: [DONE]\n\n"
    return httpx.Response(
        200, content=body.encode(), headers={"content-type": "text/event-stream"}
    )


def _run(handler, streaming=True, timeout_ms=1_000):
    async def go():
        adapter = OpenAIAdapter(
            api_key="sk-test",
            base_url="http://openai.test/v1",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        try:
            return await adapter.complete(_request(streaming), timeout_ms=timeout_ms)
        finally:
            await adapter.close()

    return asyncio.run(go())


class TestOpenAIAdapter:
    def test_streaming_concatenates_deltas(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return _sse(_chunk("I am "), _chunk(None), _chunk("a Technical "), _chunk("Marketing Manager."))

        assert _run(handler) == "I am a Technical Marketing Manager."
        body = seen[0]
        assert body["stream"] is True
        assert body["model"] == "gpt-4o-mini"
        assert body["max_tokens"] == 120
        assert [m["role"] for m in body["messages"]] == ["system", "user"]

    def test_sync_extracts_choice_content(self):
        def handler(request):
            return httpx.Response(
                200,
                json={
                    "id": "chatcmpl-2",
                    "object": "chat.completion",
                    "created": 0,
                    "model": "gpt-4o-mini",
                    "choices": [
                        {
                            "index": 0,
                            "message": {"role": "assistant", "content": "  Hello!  "},
                            "finish_reason": "stop",
                        }
                    ],
                },
            )

        assert _run(handler, streaming=False) == "Hello!"

    def test_status_error(self):
        def handler(request):
            return httpx.Response(500, json={"error": {"message": "upstream exploded"}})

        with pytest.raises(BackendError) as info:
            _run(handler)
        assert info.value.status_code == 500

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(BackendUnreachableError):
            _run(handler)

    def test_sdk_connect_timeout_is_unreachable(self):
        def handler(request):
            raise httpx.ConnectTimeout("connect timed out", request=request)

        with pytest.raises(BackendUnreachableError):
            _run(handler)

    def test_sdk_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(BackendTimeoutError):
            _run(handler)

    def test_bound_timeout(self):
        async def handler(request):
            await asyncio.sleep(5)
            return _sse(_chunk("late"))

        with pytest.raises(BackendTimeoutError):
            _run(handler, timeout_ms=50)

"""Response aggregator: reassembles backend output into one reply string.

Two entry points mirror the two backend modes:

* :func:`collect_stream` consumes an async byte stream incrementally and
  concatenates fragment text in arrival order.
* :func:`collect_body` interprets a fully-read body, which may be a single
  JSON document, NDJSON that the backend emitted anyway, or plain text.

:func:`run_bounded` couples an outbound call with its timeout: both live in
one task, so expiry cancels the call (closing its stream) and completion
cancels the timer.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterable, Awaitable, TypeVar

from saudai_relay.domain.exceptions import BackendTimeoutError
from saudai_relay.services.fragment_decoder import NdjsonDecoder, decode_fragment
from saudai_relay.services.response_shapes import match_shape

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXCERPT_CHARS = 400


async def collect_stream(chunks: AsyncIterable[bytes]) -> str:
    """Decode an NDJSON byte stream and return the trimmed, concatenated text."""
    decoder = NdjsonDecoder()
    parts: list[str] = []
    fragment_count = 0

    async for chunk in chunks:
        for fragment in decoder.feed(chunk):
            fragment_count += 1
            if fragment.text_delta is not None:
                parts.append(fragment.text_delta)

    for fragment in decoder.flush():
        fragment_count += 1
        if fragment.text_delta is not None:
            parts.append(fragment.text_delta)

    text = "".join(parts).strip()
    logger.debug("Stream closed after %d fragment(s), %d chars", fragment_count, len(text))
    return text


def collect_body(body: str) -> str:
    """Extract reply text from a complete, non-streamed response body.

    Never fails: when nothing recognisable is found the raw body is
    returned so the caller still gets something diagnosable.
    """
    stripped = body.strip()
    if not stripped:
        return ""

    try:
        document: Any = json.loads(stripped)
    except json.JSONDecodeError:
        return _collect_lines(stripped)

    matched = match_shape(document)
    if matched is not None and matched[1].strip():
        shape, text = matched
        logger.debug("Body matched shape %s", shape)
        return text.strip()
    if isinstance(document, str) and document.strip():
        return document.strip()

    # An empty extracted reply also falls back to the raw body.
    logger.debug("Body yielded no reply text, returning raw body")
    return stripped


def _collect_lines(body: str) -> str:
    # Some backends stream NDJSON even when a single document was requested.
    lines = body.splitlines()
    if len(lines) > 1:
        fragments = [f for f in map(decode_fragment, lines) if f is not None]
        if fragments:
            logger.debug("Body decoded as %d NDJSON fragment(s)", len(fragments))
            return "".join(f.text_delta for f in fragments if f.text_delta is not None).strip()
    return body


async def run_bounded(call: Awaitable[T], timeout_ms: int) -> T:
    """Await *call*, cancelling it and raising ``BackendTimeoutError`` after *timeout_ms*."""
    try:
        return await asyncio.wait_for(call, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError as exc:
        raise BackendTimeoutError(
            "Request timed out waiting for model. Try again or increase timeout."
        ) from exc


def excerpt(body: str) -> str:
    """Truncate a response body for logs and error details."""
    return body[:EXCERPT_CHARS]

"""Incremental NDJSON decoder for chunked backend output.

The backend frames its streamed reply as one JSON object per line.  Bytes
arrive in arbitrary chunks, so a line (or even a multi-byte UTF-8 character)
may be split across chunks.  :class:`NdjsonDecoder` keeps a rolling buffer and
only ever decodes complete lines; the trailing partial line waits for more
bytes until :meth:`NdjsonDecoder.flush` is called at end of stream.

Lines that are not well-formed JSON objects are dropped: they are transport
artifacts, not errors.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any

from saudai_relay.domain.entities import StreamFragment

logger = logging.getLogger(__name__)

_LINE_DELIMITER = "\n"


def decode_fragment(line: str) -> StreamFragment | None:
    """Decode one NDJSON line, or return ``None`` if it is not a JSON object."""
    stripped = line.strip()
    if not stripped:
        return None

    try:
        data: Any = json.loads(stripped)
    except json.JSONDecodeError:
        logger.debug("Dropping malformed fragment: %.80r", stripped)
        return None

    if not isinstance(data, dict):
        logger.debug("Dropping non-object fragment: %.80r", stripped)
        return None

    return StreamFragment(
        text_delta=_text_delta(data),
        is_final=bool(data.get("done", False)),
    )


def _text_delta(data: dict[str, Any]) -> str | None:
    # ``message.thinking`` is deliberately not read.
    message = data.get("message")
    if isinstance(message, dict):
        content = message.get("content")
        if isinstance(content, str):
            return content

    # Generate-style fragments carry the delta under ``response``.
    response = data.get("response")
    if isinstance(response, str):
        return response

    return None


class NdjsonDecoder:
    """Turn an open-ended byte stream into :class:`StreamFragment` objects."""

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    def feed(self, chunk: bytes | str) -> list[StreamFragment]:
        """Buffer *chunk* and return fragments for every completed line."""
        if isinstance(chunk, bytes):
            chunk = self._utf8.decode(chunk)
        self._buffer += chunk

        if _LINE_DELIMITER not in self._buffer:
            return []

        *lines, self._buffer = self._buffer.split(_LINE_DELIMITER)
        return _decode_all(lines)

    def flush(self) -> list[StreamFragment]:
        """Decode whatever is left once the stream has ended."""
        residual = self._buffer + self._utf8.decode(b"", final=True)
        self._buffer = ""
        return _decode_all(residual.split(_LINE_DELIMITER))


def _decode_all(lines: list[str]) -> list[StreamFragment]:
    fragments: list[StreamFragment] = []
    for line in lines:
        fragment = decode_fragment(line)
        if fragment is not None:
            fragments.append(fragment)
    return fragments

"""Text extraction from single-document backend responses.

Different backends (and different revisions of the same backend) put the
generated text in different places.  Each known layout is a named matcher;
matchers are tried in order and the first hit wins.
"""

from __future__ import annotations

from typing import Any, Callable

Matcher = Callable[[dict[str, Any]], str | None]


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def _message_content(doc: dict[str, Any]) -> str | None:
    message = doc.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    return None


def _output_text(doc: dict[str, Any]) -> str | None:
    value = doc.get("output_text")
    return value if isinstance(value, str) else None


def _output_content_item(doc: dict[str, Any]) -> str | None:
    first_output = _first(doc.get("output"))
    if not isinstance(first_output, dict):
        return None

    item = _first(first_output.get("content"))
    if isinstance(item, str):
        return item
    if not isinstance(item, dict) or item.get("type") != "output_text":
        return None

    text = item.get("text")
    if isinstance(text, dict):
        text = text.get("value")
    return text if isinstance(text, str) and text else None


def _choice_message_content(doc: dict[str, Any]) -> str | None:
    choice = _first(doc.get("choices"))
    if not isinstance(choice, dict):
        return None
    message = choice.get("message")
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return message["content"]
    return None


def _generate_response(doc: dict[str, Any]) -> str | None:
    value = doc.get("response")
    return value if isinstance(value, str) else None


def _choice_text(doc: dict[str, Any]) -> str | None:
    choice = _first(doc.get("choices"))
    if isinstance(choice, dict) and isinstance(choice.get("text"), str):
        return choice["text"]
    return None


SHAPES: list[tuple[str, Matcher]] = [
    ("message.content", _message_content),
    ("output_text", _output_text),
    ("output[0].content[0]", _output_content_item),
    ("choices[0].message.content", _choice_message_content),
    ("response", _generate_response),
    ("choices[0].text", _choice_text),
]


def match_shape(document: Any) -> tuple[str, str] | None:
    """Return ``(shape_name, text)`` for the first matching shape, if any."""
    if not isinstance(document, dict):
        return None
    for name, matcher in SHAPES:
        text = matcher(document)
        if text is not None:
            return name, text
    return None


def extract_text(document: Any) -> str | None:
    """Return the reply text of *document*, or ``None`` if no shape matches."""
    matched = match_shape(document)
    return matched[1] if matched else None

"""Helpers shared by the translator and the judge driver: A2A parts, raw item fields, timestamps."""

import json
from datetime import datetime, timezone
from typing import Any

from a2a.types import DataPart, FilePart, FileWithBytes, Message, Part, TextPart

__all__ = [
    "field",
    "file_part",
    "json_or_text_part",
    "now_iso",
    "text_part",
    "user_input_items",
]


def now_iso() -> str:
    """UTC timestamp in ISO 8601."""
    return datetime.now(timezone.utc).isoformat()


def field(raw: Any, name: str, default: Any = None) -> Any:
    """Read a field from a raw SDK item. Raw items are pydantic models or TypedDict dicts."""
    if isinstance(raw, dict):
        return raw.get(name, default)
    return getattr(raw, name, default)


def text_part(text: str) -> Part:
    return Part(root=TextPart(text=text))


def file_part(data: str, mime_type: str | None) -> Part:
    """File part with base64 bytes."""
    return Part(root=FilePart(file=FileWithBytes(bytes=data, mime_type=mime_type)))


def json_or_text_part(raw: str) -> Part:
    """DataPart when raw is a JSON object; TextPart with raw unchanged otherwise.

    Malformed payloads are content, not faults: this never raises.
    A2A data parts carry objects, so JSON arrays and scalars stay text.
    """
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError, RecursionError):
        return text_part(raw)
    if not isinstance(parsed, dict):
        return text_part(raw)
    return Part(root=DataPart(data=parsed))


def user_input_items(message: Message | None) -> list[dict[str, str]]:
    """Agents SDK user input items for the text parts of an A2A message."""
    if message is None:
        return []
    items: list[dict[str, str]] = []
    for part in message.parts:
        inner = getattr(part, "root", part)
        if getattr(inner, "kind", None) == "text":
            items.append({"role": "user", "content": inner.text})
    return items

"""EventTranslator: Agents SDK run items -> A2A working status-update events.

One translator per execution. Each run item yields zero or one non-final
TaskStatusUpdateEvent in state `working`:

- message_output_item: output_text fragments become text parts; nothing else is supported.
- tool_call_item: function and hosted tool calls; arguments are a data part when they are a
  JSON object, the raw string otherwise.
- tool_call_output_item: function call results; text output follows the same JSON policy,
  images become file parts.

Malformed payloads degrade to text. Computer calls and their results raise
UnsupportedItemKindError, which aborts the run.
"""

import logging
import re
import uuid
from enum import Enum
from typing import Any, Callable

from a2a.types import (
    FilePart,
    FileWithUri,
    Message,
    Part,
    Role,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
)

from a2a_bridge.executor.errors import UnsupportedItemKindError
from a2a_bridge.executor.parts import field, file_part, json_or_text_part, now_iso, text_part

logger = logging.getLogger(__name__)

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<data>.*)$", re.S)

__all__ = ["EventTranslator", "ToolKind"]


class ToolKind(Enum):
    """How a tool call / tool output raw item is handled."""

    FUNCTION = "function"
    HOSTED = "hosted"
    UNSUPPORTED = "unsupported"


# Raw item types of tool_call_item. Types not listed here are skipped.
_TOOL_CALL_KINDS: dict[str, ToolKind] = {
    "function_call": ToolKind.FUNCTION,
    "hosted_tool_call": ToolKind.HOSTED,
    "mcp_call": ToolKind.HOSTED,
    "web_search_call": ToolKind.HOSTED,
    "file_search_call": ToolKind.HOSTED,
    "code_interpreter_call": ToolKind.HOSTED,
    "image_generation_call": ToolKind.HOSTED,
    "local_shell_call": ToolKind.HOSTED,
    "computer_call": ToolKind.UNSUPPORTED,
}

# Raw item types of tool_call_output_item. Types not listed here are skipped.
_TOOL_OUTPUT_KINDS: dict[str, ToolKind] = {
    "function_call_output": ToolKind.FUNCTION,
    "function_call_result": ToolKind.FUNCTION,
    "computer_call_output": ToolKind.UNSUPPORTED,
    "computer_call_result": ToolKind.UNSUPPORTED,
}

# Run items that carry nothing for the A2A client.
_SILENT_ITEM_TYPES = frozenset(
    {
        "handoff_call_item",
        "handoff_output_item",
        "reasoning_item",
        "mcp_list_tools_item",
        "mcp_approval_request_item",
        "mcp_approval_response_item",
        "tool_approval_item",
    }
)


def _new_id() -> str:
    return str(uuid.uuid4())


def _output_parts(output: Any) -> list[Part]:
    """Parts for a function call result: str, text/image entries, or a list of them."""
    if output is None:
        return []
    if isinstance(output, str):
        return [json_or_text_part(output)]
    if isinstance(output, (list, tuple)):
        parts: list[Part] = []
        for entry in output:
            parts.extend(_output_parts(entry))
        return parts
    kind = field(output, "type")
    if kind in ("text", "input_text"):
        text = field(output, "text")
        return [json_or_text_part(text)] if isinstance(text, str) else []
    if kind in ("image", "input_image"):
        return _image_parts(output)
    logger.debug("tool output entry of type %s skipped", kind)
    return []


def _image_parts(output: Any) -> list[Part]:
    data = field(output, "data")
    if isinstance(data, str) and data:
        mime_type = field(output, "media_type") or field(output, "mediaType")
        return [file_part(data, mime_type)]
    url = field(output, "image_url")
    if not isinstance(url, str) or not url:
        return []
    match = _DATA_URL.match(url)
    if match:
        return [file_part(match.group("data"), match.group("mime"))]
    return [Part(root=FilePart(file=FileWithUri(uri=url)))]


class EventTranslator:
    """Classifies run items for one task and builds the matching status-update events."""

    def __init__(self, task_id: str, context_id: str) -> None:
        self.task_id = task_id
        self.context_id = context_id
        self._tool_names: dict[str, str] = {}
        self._handlers: dict[str, Callable[[Any], TaskStatusUpdateEvent | None]] = {
            "message_output_item": self.translate_message_output,
            "tool_call_item": self.translate_tool_call,
            "tool_call_output_item": self.translate_tool_call_output,
        }

    def translate(self, item: Any) -> TaskStatusUpdateEvent | None:
        """Status-update event for one run item, or None when the item has nothing to show."""
        item_type = getattr(item, "type", None)
        handler = self._handlers.get(item_type)
        if handler is not None:
            return handler(item)
        if item_type not in _SILENT_ITEM_TYPES:
            logger.debug("run item type %s not translated", item_type)
        return None

    def translate_message_output(self, item: Any) -> TaskStatusUpdateEvent | None:
        raw = item.raw_item
        parts = [
            text_part(field(content, "text"))
            for content in field(raw, "content") or []
            if field(content, "type") == "output_text"
        ]
        if not parts:
            return None
        message_id = field(raw, "id") or _new_id()
        return self._working_event(message_id, parts, {})

    def translate_tool_call(self, item: Any) -> TaskStatusUpdateEvent | None:
        raw = item.raw_item
        raw_type = field(raw, "type")
        kind = _TOOL_CALL_KINDS.get(raw_type)
        if kind is None:
            logger.debug("tool_call_item type %s not translated", raw_type)
            return None
        if kind is ToolKind.UNSUPPORTED:
            raise UnsupportedItemKindError("tool_call_item", raw_type)

        raw_id = field(raw, "id")
        if kind is ToolKind.FUNCTION:
            tool_call_id = field(raw, "call_id")
            tool_call_name = field(raw, "name")
        else:
            tool_call_id = raw_id or _new_id()
            tool_call_name = field(raw, "name") or raw_type
        if tool_call_id:
            self._tool_names[tool_call_id] = tool_call_name

        parts: list[Part] = []
        arguments = field(raw, "arguments")
        if isinstance(arguments, str) and arguments:
            parts.append(json_or_text_part(arguments))

        message_id = f"{raw_id or _new_id()}_{tool_call_id}"
        metadata = {
            "type": "tool-call",
            "toolCallId": tool_call_id,
            "toolCallName": tool_call_name,
        }
        return self._working_event(message_id, parts, metadata)

    def translate_tool_call_output(self, item: Any) -> TaskStatusUpdateEvent | None:
        raw = item.raw_item
        raw_type = field(raw, "type")
        kind = _TOOL_OUTPUT_KINDS.get(raw_type)
        if kind is None:
            logger.debug("tool_call_output_item type %s not translated", raw_type)
            return None
        if kind is ToolKind.UNSUPPORTED:
            raise UnsupportedItemKindError("tool_call_output_item", raw_type)

        tool_call_id = field(raw, "call_id")
        tool_call_name = self._tool_names.get(tool_call_id) or field(raw, "name") or ""
        parts = _output_parts(field(raw, "output"))
        if not parts:
            return None

        message_id = field(raw, "id") or _new_id()
        metadata = {
            "type": "tool-call-result",
            "toolCallId": tool_call_id,
            "toolCallName": tool_call_name,
        }
        return self._working_event(message_id, parts, metadata)

    def _working_event(
        self, message_id: str, parts: list[Part], metadata: dict[str, Any]
    ) -> TaskStatusUpdateEvent:
        timestamp = now_iso()
        message = Message(
            message_id=message_id,
            task_id=self.task_id,
            context_id=self.context_id,
            role=Role.agent,
            parts=parts,
            metadata={**metadata, "timestamp": timestamp},
        )
        return TaskStatusUpdateEvent(
            task_id=self.task_id,
            context_id=self.context_id,
            status=TaskStatus(state=TaskState.working, message=message, timestamp=timestamp),
            final=False,
        )

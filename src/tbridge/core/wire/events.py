"""Streaming event models and Server-Sent Events decoding.

The provider streams ``event: <name>`` / ``data: <json>`` frames separated
by blank lines. :class:`ServerSentEventDecoder` turns raw lines into
:data:`StreamingEvent` values; unknown event names are skipped.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from tbridge.core.wire.models import ErrorDetail, Usage

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# message_start / message_delta / message_stop
# ---------------------------------------------------------------------------


class PartialMessage(BaseModel):
    """The message envelope announced by ``message_start``."""

    id: str
    type: str = "message"
    role: str = "assistant"
    model: str = ""
    usage: Usage | None = None


class MessageStartEvent(BaseModel):
    type: Literal["message_start"] = "message_start"
    message: PartialMessage


class MessageDeltaInfo(BaseModel):
    stop_reason: str | None = None
    stop_sequence: str | None = None


class MessageDeltaUsage(BaseModel):
    output_tokens: int = 0


class MessageDeltaEvent(BaseModel):
    type: Literal["message_delta"] = "message_delta"
    delta: MessageDeltaInfo = Field(default_factory=MessageDeltaInfo)
    usage: MessageDeltaUsage | None = None


class MessageStopEvent(BaseModel):
    type: Literal["message_stop"] = "message_stop"


# ---------------------------------------------------------------------------
# content_block_start
# ---------------------------------------------------------------------------


class TextStart(BaseModel):
    type: Literal["text"] = "text"
    text: str = ""


class ToolUseStart(BaseModel):
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ThinkingStart(BaseModel):
    type: Literal["thinking"] = "thinking"
    thinking: str = ""
    signature: str | None = None


class RedactedThinkingStart(BaseModel):
    type: Literal["redacted_thinking"] = "redacted_thinking"
    data: str


StartContentBlock = Annotated[
    Union[TextStart, ToolUseStart, ThinkingStart, RedactedThinkingStart],
    Field(discriminator="type"),
]


class ContentBlockStartEvent(BaseModel):
    type: Literal["content_block_start"] = "content_block_start"
    index: int = 0
    content_block: StartContentBlock


# ---------------------------------------------------------------------------
# content_block_delta / content_block_stop
# ---------------------------------------------------------------------------


class TextDelta(BaseModel):
    type: Literal["text_delta"] = "text_delta"
    text: str


class InputJSONDelta(BaseModel):
    type: Literal["input_json_delta"] = "input_json_delta"
    partial_json: str


class ThinkingDelta(BaseModel):
    type: Literal["thinking_delta"] = "thinking_delta"
    thinking: str


class SignatureDelta(BaseModel):
    type: Literal["signature_delta"] = "signature_delta"
    signature: str


Delta = Annotated[
    Union[TextDelta, InputJSONDelta, ThinkingDelta, SignatureDelta],
    Field(discriminator="type"),
]


class ContentBlockDeltaEvent(BaseModel):
    type: Literal["content_block_delta"] = "content_block_delta"
    index: int = 0
    delta: Delta


class ContentBlockStopEvent(BaseModel):
    type: Literal["content_block_stop"] = "content_block_stop"
    index: int = 0


# ---------------------------------------------------------------------------
# ping / error
# ---------------------------------------------------------------------------


class PingEvent(BaseModel):
    type: Literal["ping"] = "ping"


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    error: ErrorDetail


StreamingEvent = Annotated[
    Union[
        MessageStartEvent,
        ContentBlockStartEvent,
        ContentBlockDeltaEvent,
        ContentBlockStopEvent,
        MessageDeltaEvent,
        MessageStopEvent,
        PingEvent,
        ErrorEvent,
    ],
    Field(discriminator="type"),
]

_EVENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(StreamingEvent)

UNDECODABLE_ERROR_TYPE = "api_error"

EVENT_TYPES = frozenset(
    {
        "message_start",
        "content_block_start",
        "content_block_delta",
        "content_block_stop",
        "message_delta",
        "message_stop",
        "ping",
        "error",
    }
)


def parse_event(event_type: str, data: str) -> StreamingEvent | None:
    """Decode one SSE frame into a streaming event.

    Returns ``None`` for unknown event names and for frames whose payload
    does not match the event's shape.
    """
    if event_type not in EVENT_TYPES:
        logger.debug("Skipping unknown stream event %r", event_type)
        return None
    try:
        payload = json.loads(data) if data.strip() else {}
    except json.JSONDecodeError:
        return _undecodable(event_type, "undecodable data")
    if not isinstance(payload, dict):
        return _undecodable(event_type, "non-object data")
    # The SSE event name is authoritative; the payload usually repeats it.
    payload["type"] = event_type
    try:
        return _EVENT_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        return _undecodable(event_type, f"malformed payload: {exc.errors()[:1]}")


def _undecodable(event_type: str, reason: str) -> StreamingEvent | None:
    # A broken error frame still ends the stream; any other frame is skipped.
    if event_type == "error":
        logger.warning("Undecodable error event (%s)", reason)
        detail = ErrorDetail(
            type=UNDECODABLE_ERROR_TYPE, message=f"undecodable error event: {reason}"
        )
        return ErrorEvent(error=detail)
    logger.warning("Skipping %s event with %s", event_type, reason)
    return None


class ServerSentEventDecoder:
    """Line-fed SSE frame decoder.

    Feed each line (without its trailing newline) to :meth:`feed`; a blank
    line completes a frame and may return a decoded event. Multiple
    ``data:`` lines in one frame are joined with newlines.
    """

    def __init__(self) -> None:
        self._event: str | None = None
        self._data: list[str] = []

    def feed(self, line: str) -> StreamingEvent | None:
        line = line.rstrip("\r")
        if not line:
            return self._dispatch()
        if line.startswith(":"):
            return None
        field, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if field == "event":
            self._event = value
        elif field == "data":
            self._data.append(value)
        return None

    def flush(self) -> StreamingEvent | None:
        """Dispatch a trailing frame that was not blank-line terminated."""
        return self._dispatch()

    def _dispatch(self) -> StreamingEvent | None:
        event_type, data = self._event, "\n".join(self._data)
        self._event, self._data = None, []
        if event_type is None:
            if not data:
                return None
            # Frames without an event line still carry their type in the payload.
            try:
                payload = json.loads(data)
            except json.JSONDecodeError:
                return None
            if not isinstance(payload, dict) or not isinstance(payload.get("type"), str):
                return None
            event_type = payload["type"]
        return parse_event(event_type, data)

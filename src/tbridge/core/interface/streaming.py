"""Streaming reconstruction — provider events in, transcript entries out.

``StreamReconstructor`` is a single-consumer state machine. Each text delta
yields a provisional ``Response`` holding *all* text received so far, so a
caller can render progressively by replacing, never appending. Tool calls
and thinking blocks are only complete once their block closes, so they are
emitted (or stored) at ``message_stop``.
"""

from __future__ import annotations

import enum
import json
import logging
from collections.abc import AsyncGenerator, AsyncIterable, Callable
from dataclasses import dataclass, field
from typing import Any

from tbridge.core.content.normalizer import parse_with_schema
from tbridge.core.content.value import StringValue, StructureValue, Value, from_python
from tbridge.core.interface.errors import StreamError
from tbridge.core.interface.thinking import ThinkingBlockStore
from tbridge.core.interface.transpilers.anthropic import (
    structured_response_entry,
    text_response_entry,
    tool_calls_entry,
)
from tbridge.core.transcript.models import Entry, ToolCall
from tbridge.core.wire.events import (
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    ErrorEvent,
    InputJSONDelta,
    MessageStopEvent,
    RedactedThinkingStart,
    SignatureDelta,
    StreamingEvent,
    TextDelta,
    TextStart,
    ThinkingDelta,
    ThinkingStart,
    ToolUseStart,
)
from tbridge.core.wire.models import RedactedThinkingBlock, ThinkingBlock, ThinkingContent

logger = logging.getLogger(__name__)


class StreamState(enum.Enum):
    IDLE = "idle"
    IN_TEXT = "in_text"
    IN_TOOL_USE = "in_tool_use"
    IN_THINKING = "in_thinking"


@dataclass
class _PendingToolCall:
    id: str
    name: str
    arguments: list[str] = field(default_factory=list)

    def to_tool_call(self) -> ToolCall:
        arguments = parse_arguments("".join(self.arguments))
        return ToolCall(id=self.id, tool_name=self.name, arguments=arguments)


def parse_arguments(buffer: str) -> Value:
    """Decode a tool call's accumulated argument JSON.

    An empty buffer means no arguments. Invalid JSON is kept verbatim as a
    string value so the call is still reported.
    """
    if not buffer.strip():
        return StructureValue()
    try:
        return from_python(json.loads(buffer))
    except json.JSONDecodeError:
        logger.debug("Tool call arguments are not valid JSON; keeping raw text")
        return StringValue(value=buffer)


class StreamReconstructor:
    """Rebuilds transcript entries from one response's event stream.

    Args:
        response_schema: Active output schema; the final text is normalized
            against it at ``message_stop``.
        thinking_store: Receives the thinking blocks of a tool-use turn.
    """

    def __init__(
        self,
        response_schema: dict[str, Any] | None = None,
        thinking_store: ThinkingBlockStore | None = None,
    ) -> None:
        self.response_schema = response_schema
        self.thinking_store = thinking_store
        self.state = StreamState.IDLE
        self.finished = False
        self._text: list[str] = []
        self._tool_calls: list[_PendingToolCall] = []
        self._current_tool: int | None = None
        self._thinking_text: list[str] = []
        self._signature: list[str] = []
        self._thinking_blocks: list[ThinkingContent] = []
        self._yielded = False

    @property
    def text(self) -> str:
        return "".join(self._text)

    @property
    def thinking_blocks(self) -> list[ThinkingContent]:
        return list(self._thinking_blocks)

    def feed(self, event: StreamingEvent) -> list[Entry]:
        """Consume one event and return the entries it completes.

        Raises:
            StreamError: *event* is an ``error`` event.
        """
        if self.finished:
            return []

        if isinstance(event, ContentBlockStartEvent):
            self._start_block(event)
        elif isinstance(event, ContentBlockDeltaEvent):
            return self._apply_delta(event)
        elif isinstance(event, ContentBlockStopEvent):
            self._stop_block()
        elif isinstance(event, MessageStopEvent):
            self.finished = True
            return self._finish()
        elif isinstance(event, ErrorEvent):
            self.finished = True
            raise StreamError(event.error.type, event.error.message)
        # message_start, message_delta and ping carry nothing to rebuild
        return []

    # -- block lifecycle ---------------------------------------------------

    def _start_block(self, event: ContentBlockStartEvent) -> None:
        block = event.content_block
        if isinstance(block, TextStart):
            self.state = StreamState.IN_TEXT
        elif isinstance(block, ToolUseStart):
            self._current_tool = len(self._tool_calls)
            self._tool_calls.append(_PendingToolCall(id=block.id, name=block.name))
            self.state = StreamState.IN_TOOL_USE
        elif isinstance(block, ThinkingStart):
            self._thinking_text = [block.thinking] if block.thinking else []
            self._signature = [block.signature] if block.signature else []
            self.state = StreamState.IN_THINKING
        elif isinstance(block, RedactedThinkingStart):
            # Redacted thinking arrives whole; there are no deltas to wait for.
            self._thinking_blocks.append(RedactedThinkingBlock(data=block.data))
            self.state = StreamState.IDLE

    def _apply_delta(self, event: ContentBlockDeltaEvent) -> list[Entry]:
        delta = event.delta
        if isinstance(delta, TextDelta):
            self._text.append(delta.text)
            self._yielded = True
            return [text_response_entry(self.text)]
        if isinstance(delta, InputJSONDelta):
            if self._current_tool is not None:
                self._tool_calls[self._current_tool].arguments.append(delta.partial_json)
        elif isinstance(delta, ThinkingDelta):
            self._thinking_text.append(delta.thinking)
        elif isinstance(delta, SignatureDelta):
            self._signature.append(delta.signature)
        return []

    def _stop_block(self) -> None:
        if self.state is StreamState.IN_THINKING:
            signature = "".join(self._signature)
            self._thinking_blocks.append(
                ThinkingBlock(thinking="".join(self._thinking_text), signature=signature or None)
            )
            self._thinking_text, self._signature = [], []
        self._current_tool = None
        self.state = StreamState.IDLE

    # -- message_stop ------------------------------------------------------

    def _finish(self) -> list[Entry]:
        if self._tool_calls:
            if self._thinking_blocks and self.thinking_store is not None:
                self.thinking_store.store(self._thinking_blocks)
                logger.debug("Stored %d streamed thinking block(s)", len(self._thinking_blocks))
            return [tool_calls_entry(call.to_tool_call() for call in self._tool_calls)]

        text = self.text
        if text:
            if self.response_schema is None:
                # The last provisional entry already holds the full text.
                return []
            value = parse_with_schema(text, self.response_schema)
            if value is not None:
                return [structured_response_entry(value, source=text)]
            return [text_response_entry(text)]

        if not self._yielded:
            return [text_response_entry("")]
        return []


async def reconstruct(
    events: AsyncIterable[StreamingEvent],
    response_schema: dict[str, Any] | None = None,
    thinking_store: ThinkingBlockStore | None = None,
    on_event: Callable[[StreamingEvent], None] | None = None,
) -> AsyncGenerator[Entry, None]:
    """Drive a :class:`StreamReconstructor` over an async event source.

    Stops after ``message_stop``. The source is closed on every exit path,
    including cancellation, and no partial state is emitted on error.
    *on_event*, when given, sees every event before it is reconstructed.
    """
    reconstructor = StreamReconstructor(response_schema, thinking_store)
    iterator = events.__aiter__()
    try:
        async for event in iterator:
            if on_event is not None:
                on_event(event)
            for entry in reconstructor.feed(event):
                yield entry
            if reconstructor.finished:
                break
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()

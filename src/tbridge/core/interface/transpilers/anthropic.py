"""Anthropic transpiler — folds a transcript into Messages API messages.

Key differences from the transcript:
- Instructions become the top-level ``system`` parameter, not a message.
- Tool calls are ``tool_use`` blocks in an assistant message.
- Tool outputs are ``tool_result`` blocks in a user message; consecutive
  outputs share one message.
- A ``tool_result`` must name the ``tool_use`` id it answers, so call ids
  are queued and paired in order.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any

from tbridge.core.content.normalizer import parse_with_schema
from tbridge.core.content.value import StructureValue, Value, from_python
from tbridge.core.interface.errors import SchemaTranslationError
from tbridge.core.transcript.models import (
    Entry,
    GenerationOptions,
    Instructions,
    Prompt,
    Response,
    StructuredSegment,
    TextSegment,
    ToolCall,
    ToolCalls,
    ToolDefinition,
    ToolOutput,
    Transcript,
    segments_text,
)
from tbridge.core.wire.models import (
    Message,
    MessagesResponse,
    Tool,
    ToolResultBlock,
    ToolUseBlock,
)
from tbridge.core.wire.schema import is_object_rooted, set_additional_properties_false

logger = logging.getLogger(__name__)


class AnthropicTranspiler:
    """Converts between transcripts and Anthropic's Messages API format."""

    def to_provider(self, transcript: Transcript) -> tuple[list[Message], str | None]:
        """Fold *transcript* into ``(messages, system_prompt)``.

        Each Prompt, Response and ToolCalls entry yields one message; each run
        of consecutive ToolOutput entries yields one user message of
        ``tool_result`` blocks.
        """
        messages: list[Message] = []
        system_prompt: str | None = None
        pending_results: list[ToolResultBlock] = []
        pending_call_ids: deque[str] = deque()

        def flush_results() -> None:
            if pending_results:
                messages.append(Message.user(list(pending_results)))
                pending_results.clear()

        for entry in transcript:
            if isinstance(entry, Instructions):
                text = segments_text(entry.segments)
                if text:
                    system_prompt = text

            elif isinstance(entry, Prompt):
                flush_results()
                messages.append(Message.user(segments_text(entry.segments)))

            elif isinstance(entry, Response):
                flush_results()
                messages.append(Message.assistant(segments_text(entry.segments)))

            elif isinstance(entry, ToolCalls):
                flush_results()
                blocks = [_tool_use_block(call) for call in entry.calls]
                messages.append(Message.assistant(list(blocks)))
                # Outputs answer the latest round only; unanswered ids are dropped.
                pending_call_ids = deque(call.id for call in entry.calls)

            elif isinstance(entry, ToolOutput):
                if pending_call_ids:
                    tool_use_id = pending_call_ids.popleft()
                else:
                    logger.debug("No queued tool call for output %s; using its own id", entry.id)
                    tool_use_id = entry.id
                pending_results.append(
                    ToolResultBlock(tool_use_id=tool_use_id, content=segments_text(entry.segments))
                )

        flush_results()
        return messages, system_prompt

    def extract_tools(self, transcript: Transcript) -> list[Tool] | None:
        """Tools from the most recent instructions that declare any."""
        for entry in reversed(transcript):
            if isinstance(entry, Instructions) and entry.tool_definitions:
                return [to_tool(definition) for definition in entry.tool_definitions]
        return None

    def extract_response_schema(self, transcript: Transcript) -> dict[str, Any] | None:
        """Schema from the most recent prompt that carries one."""
        for entry in reversed(transcript):
            if isinstance(entry, Prompt) and entry.response_schema is not None:
                return entry.response_schema
        return None

    def extract_options(self, transcript: Transcript) -> GenerationOptions | None:
        """Options of the most recent prompt."""
        for entry in reversed(transcript):
            if isinstance(entry, Prompt):
                return entry.options
        return None

    def from_provider(
        self, response: MessagesResponse, response_schema: dict[str, Any] | None = None
    ) -> Entry:
        """Map a complete response to a ToolCalls or Response entry."""
        tool_uses = response.tool_uses
        if tool_uses:
            return tool_calls_entry(
                ToolCall(id=block.id, tool_name=block.name, arguments=from_python(block.input))
                for block in tool_uses
            )

        text = response.text
        if response_schema is not None:
            value = parse_with_schema(text, response_schema)
            if value is not None:
                return structured_response_entry(value, source=text)
        return text_response_entry(text)


# ---------------------------------------------------------------------------
# Entry helpers
# ---------------------------------------------------------------------------


def text_response_entry(text: str) -> Response:
    return Response(segments=[TextSegment(content=text)])


def structured_response_entry(value: Value, source: str = "") -> Response:
    return Response(segments=[StructuredSegment(source=source, content=value)])


def tool_calls_entry(calls: Any) -> ToolCalls:
    return ToolCalls(calls=list(calls))


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------


def to_tool(definition: ToolDefinition) -> Tool:
    """Build a wire ``Tool`` from a transcript tool definition.

    Raises:
        SchemaTranslationError: the parameters do not describe an object.
    """
    parameters = definition.parameters
    if not parameters:
        input_schema: dict[str, Any] = {"type": "object"}
    elif is_object_rooted(parameters):
        input_schema = set_additional_properties_false(parameters)
    else:
        raise SchemaTranslationError(
            f"parameters of tool {definition.name!r} must describe an object, "
            f"got type {parameters.get('type')!r}"
        )
    return Tool(
        name=definition.name,
        description=definition.description or None,
        input_schema=input_schema,
    )


def _tool_use_block(call: ToolCall) -> ToolUseBlock:
    # tool_use input must be a JSON object
    arguments = call.arguments.to_python() if isinstance(call.arguments, StructureValue) else {}
    return ToolUseBlock(id=call.id, name=call.tool_name, input=arguments)

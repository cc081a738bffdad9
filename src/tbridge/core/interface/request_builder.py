"""Request builder — one transcript plus options in, one wire request out.

Resolution rules the provider imposes:

- Extended thinking is incompatible with ``temperature`` and ``top_k``; when
  a thinking budget is set both are dropped (``top_p`` is kept) and
  ``max_tokens`` grows by the budget so the text budget is preserved.
- Structured output needs an object-rooted schema and the structured
  outputs beta header. A schema that cannot be translated is an error, never
  a silent fallback to free text.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tbridge.core.interface.config import DEFAULT_MAX_TOKENS
from tbridge.core.interface.errors import SchemaTranslationError
from tbridge.core.interface.thinking import inject_thinking_blocks
from tbridge.core.interface.transpiler import Transpiler
from tbridge.core.interface.transpilers.anthropic import AnthropicTranspiler
from tbridge.core.transcript.models import GenerationOptions, Transcript
from tbridge.core.wire.models import (
    MessagesRequest,
    OutputFormat,
    ThinkingConfig,
    ThinkingContent,
    ToolChoice,
)
from tbridge.core.wire.schema import is_object_rooted, set_additional_properties_false

logger = logging.getLogger(__name__)

BETA_HEADER = "anthropic-beta"
STRUCTURED_OUTPUTS_BETA = "structured-outputs-2025-11-13"


class BuildResult(BaseModel):
    """A finalized request with the headers it must be sent with."""

    model_config = ConfigDict(frozen=True)

    request: MessagesRequest
    extra_headers: dict[str, str] = Field(default_factory=dict)
    response_schema: dict[str, Any] | None = None


def to_output_format(schema: Any) -> OutputFormat:
    """Build the ``output_format`` envelope for a response schema.

    Raises:
        SchemaTranslationError: *schema* is not an object-rooted,
            JSON-serializable schema.
    """
    if not isinstance(schema, dict):
        raise SchemaTranslationError(f"expected a JSON object, got {type(schema).__name__}")
    if not is_object_rooted(schema):
        raise SchemaTranslationError(f"root type must be 'object', got {schema.get('type')!r}")
    try:
        json.dumps(schema)
    except (TypeError, ValueError) as exc:
        raise SchemaTranslationError(f"schema is not JSON-serializable ({exc})") from exc
    return OutputFormat(json_schema=set_additional_properties_false(schema))


def build_request(
    transcript: Transcript,
    options: GenerationOptions | None = None,
    *,
    model: str,
    default_max_tokens: int = DEFAULT_MAX_TOKENS,
    thinking_budget_tokens: int | None = None,
    pending_thinking_blocks: Sequence[ThinkingContent] = (),
    stream: bool = False,
    tool_choice: ToolChoice | None = None,
    transpiler: Transpiler | None = None,
) -> BuildResult:
    """Resolve *transcript* and *options* into a ``MessagesRequest``.

    Args:
        transcript: The conversation so far.
        options: Caller options; they replace the options of the latest prompt.
        model: Provider model id.
        default_max_tokens: Text budget when no option sets one.
        thinking_budget_tokens: Enables extended thinking with this budget.
        pending_thinking_blocks: Blocks from the previous tool-use turn,
            injected at the head of the last assistant message.
        stream: Whether the request asks for an event stream.
        tool_choice: Overrides the ``auto`` choice used when tools exist.
        transpiler: Converter to use; defaults to :class:`AnthropicTranspiler`.

    Raises:
        SchemaTranslationError: the active output or tool schema cannot be
            expressed on the wire.
    """
    transpiler = transpiler or AnthropicTranspiler()

    messages, system_prompt = transpiler.to_provider(transcript)
    if pending_thinking_blocks:
        messages = inject_thinking_blocks(pending_thinking_blocks, messages)

    effective = options if options is not None else transpiler.extract_options(transcript)
    effective = effective or GenerationOptions()

    text_budget = effective.maximum_response_tokens or default_max_tokens
    temperature = effective.temperature
    top_k = effective.top_k
    thinking: ThinkingConfig | None = None
    if thinking_budget_tokens is not None:
        thinking = ThinkingConfig.enabled(thinking_budget_tokens)
        max_tokens = thinking_budget_tokens + text_budget
        temperature = None
        top_k = None
    else:
        max_tokens = text_budget

    tools = transpiler.extract_tools(transcript)
    if tools and tool_choice is None:
        tool_choice = ToolChoice.auto()

    extra_headers: dict[str, str] = {}
    output_format: OutputFormat | None = None
    response_schema = transpiler.extract_response_schema(transcript)
    if response_schema is not None:
        output_format = to_output_format(response_schema)
        extra_headers[BETA_HEADER] = STRUCTURED_OUTPUTS_BETA

    request = MessagesRequest(
        model=model,
        messages=messages,
        max_tokens=max_tokens,
        system=system_prompt,
        tools=tools,
        tool_choice=tool_choice,
        stream=True if stream else None,
        temperature=temperature,
        top_k=top_k,
        top_p=effective.top_p,
        thinking=thinking,
        output_format=output_format,
    )
    logger.debug(
        "Built request: model=%s messages=%d max_tokens=%d thinking=%s tools=%d schema=%s",
        model,
        len(messages),
        max_tokens,
        thinking_budget_tokens,
        len(tools or []),
        response_schema is not None,
    )
    return BuildResult(
        request=request,
        extra_headers=extra_headers,
        response_schema=response_schema,
    )

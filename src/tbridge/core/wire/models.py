"""Anthropic Messages API wire models.

Field names and ``type`` discriminants are fixed by the provider; these
models only give them Python shape. Requests are dumped with ``None``
fields omitted.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------


class TextBlock(BaseModel):
    """A text content block."""

    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    """A tool invocation emitted by the assistant."""

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    """The result of a tool invocation, sent back in a user message."""

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str = ""
    is_error: bool | None = None


class ThinkingBlock(BaseModel):
    """An extended-thinking trace; ``signature`` must be echoed back verbatim."""

    type: Literal["thinking"] = "thinking"
    thinking: str
    signature: str | None = None


class RedactedThinkingBlock(BaseModel):
    """An encrypted thinking trace."""

    type: Literal["redacted_thinking"] = "redacted_thinking"
    data: str


ContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ToolResultBlock, ThinkingBlock, RedactedThinkingBlock],
    Field(discriminator="type"),
]

ResponseContentBlock = Annotated[
    Union[TextBlock, ToolUseBlock, ThinkingBlock, RedactedThinkingBlock],
    Field(discriminator="type"),
]

ThinkingContent = Union[ThinkingBlock, RedactedThinkingBlock]

THINKING_BLOCK_TYPES = (ThinkingBlock, RedactedThinkingBlock)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class Message(BaseModel):
    """A request message: a role and either text shorthand or content blocks."""

    role: Literal["user", "assistant"]
    content: str | list[ContentBlock]

    @property
    def blocks(self) -> list[ContentBlock]:
        """The content as a block list; text shorthand becomes one text block."""
        if isinstance(self.content, str):
            return [TextBlock(text=self.content)]
        return list(self.content)

    @classmethod
    def user(cls, content: str | list[ContentBlock]) -> Message:
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str | list[ContentBlock]) -> Message:
        return cls(role="assistant", content=content)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


class CacheControl(BaseModel):
    """Prompt-caching marker."""

    type: Literal["ephemeral"] = "ephemeral"
    ttl: Literal["5m", "1h"] | None = None


class Tool(BaseModel):
    """A tool declaration."""

    name: str
    description: str | None = None
    input_schema: dict[str, Any] = Field(default_factory=lambda: {"type": "object"})
    cache_control: CacheControl | None = None


class ToolChoice(BaseModel):
    """How the model should pick tools."""

    type: Literal["auto", "any", "none", "tool"] = "auto"
    name: str | None = None
    disable_parallel_tool_use: bool | None = None

    @classmethod
    def auto(cls) -> ToolChoice:
        return cls(type="auto")

    @classmethod
    def none(cls) -> ToolChoice:
        return cls(type="none")

    @classmethod
    def tool(cls, name: str) -> ToolChoice:
        return cls(type="tool", name=name)


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


class ThinkingConfig(BaseModel):
    """Extended thinking configuration."""

    type: Literal["enabled", "disabled"] = "enabled"
    budget_tokens: int | None = None

    @classmethod
    def enabled(cls, budget_tokens: int) -> ThinkingConfig:
        return cls(type="enabled", budget_tokens=budget_tokens)


class OutputFormat(BaseModel):
    """Structured-output envelope."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["json_schema"] = "json_schema"
    json_schema: dict[str, Any] = Field(alias="schema")


class RequestMetadata(BaseModel):
    """Request metadata."""

    user_id: str | None = None


class MessagesRequest(BaseModel):
    """Body of ``POST /v1/messages``."""

    model: str
    messages: list[Message]
    max_tokens: int = 4096
    system: str | None = None
    tools: list[Tool] | None = None
    tool_choice: ToolChoice | None = None
    stream: bool | None = None
    temperature: float | None = None
    top_k: int | None = None
    top_p: float | None = None
    stop_sequences: list[str] | None = None
    metadata: RequestMetadata | None = None
    thinking: ThinkingConfig | None = None
    output_format: OutputFormat | None = None

    def to_payload(self) -> dict[str, Any]:
        """Dump as a JSON-ready dict with provider field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------


class CacheCreation(BaseModel):
    """Cache creation breakdown by TTL."""

    ephemeral_1h_input_tokens: int | None = None
    ephemeral_5m_input_tokens: int | None = None


class Usage(BaseModel):
    """Token usage reported by the provider."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation: CacheCreation | None = None
    cache_creation_input_tokens: int | None = None
    cache_read_input_tokens: int | None = None


class MessagesResponse(BaseModel):
    """A complete (non-streaming) response."""

    id: str
    type: str = "message"
    role: str = "assistant"
    content: list[ResponseContentBlock] = Field(default_factory=list)
    model: str
    stop_reason: str | None = None
    stop_sequence: str | None = None
    usage: Usage = Field(default_factory=Usage)
    service_tier: Literal["standard", "priority", "batch"] | None = None

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [block for block in self.content if isinstance(block, ToolUseBlock)]

    @property
    def text(self) -> str:
        """Concatenated text blocks."""
        return "".join(block.text for block in self.content if isinstance(block, TextBlock))


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """The ``error`` object of a provider error."""

    type: str
    message: str


class ErrorResponse(BaseModel):
    """Error envelope returned with HTTP status >= 400."""

    type: str = "error"
    error: ErrorDetail

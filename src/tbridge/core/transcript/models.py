"""Transcript — the provider-agnostic conversation log.

A transcript is an ordered, append-only sequence of entries: instructions,
prompts, responses, tool calls and tool outputs. Entries are frozen once
built; converting a transcript to a provider payload is a pure fold over it.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from tbridge.core.content.value import StructureValue, Value, to_json


def _new_id() -> str:
    return uuid4().hex


# ---------------------------------------------------------------------------
# Segments — the content of a single entry
# ---------------------------------------------------------------------------


class TextSegment(BaseModel):
    """Plain text content."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    id: str = Field(default_factory=_new_id)
    content: str


class StructuredSegment(BaseModel):
    """Structured content, e.g. a schema-guided model response."""

    model_config = ConfigDict(frozen=True)

    type: Literal["structure"] = "structure"
    id: str = Field(default_factory=_new_id)
    source: str = ""
    content: Value


Segment = Annotated[Union[TextSegment, StructuredSegment], Field(discriminator="type")]


def segments_text(segments: list[Segment]) -> str:
    """Join segment contents with single spaces.

    Structured segments contribute their canonical JSON serialization.
    """
    parts: list[str] = []
    for segment in segments:
        if isinstance(segment, TextSegment):
            parts.append(segment.content)
        else:
            parts.append(to_json(segment.content))
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Tools & options
# ---------------------------------------------------------------------------


class ToolDefinition(BaseModel):
    """A tool the model may call; ``parameters`` is a JSON Schema object."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)


class GenerationOptions(BaseModel):
    """Sampling and length controls for one generation."""

    model_config = ConfigDict(frozen=True)

    temperature: float | None = None
    top_k: int | None = None
    top_p: float | None = None
    maximum_response_tokens: int | None = Field(default=None, gt=0)


class ToolCall(BaseModel):
    """A single tool invocation requested by the model."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    tool_name: str
    arguments: Value = Field(default_factory=StructureValue)


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


class Instructions(BaseModel):
    """System-level instructions and the tools available to the model."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["instructions"] = "instructions"
    id: str = Field(default_factory=_new_id)
    segments: list[Segment] = Field(default_factory=list)
    tool_definitions: list[ToolDefinition] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return segments_text(self.segments)

    @classmethod
    def from_text(
        cls, text: str, tool_definitions: list[ToolDefinition] | None = None
    ) -> Instructions:
        """Create instructions with a single text segment."""
        return cls(
            segments=[TextSegment(content=text)],
            tool_definitions=tool_definitions or [],
        )


class Prompt(BaseModel):
    """A user turn, optionally carrying options and an output schema."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["prompt"] = "prompt"
    id: str = Field(default_factory=_new_id)
    segments: list[Segment] = Field(default_factory=list)
    options: GenerationOptions | None = None
    response_schema: dict[str, Any] | None = None

    @property
    def text(self) -> str:
        return segments_text(self.segments)

    @classmethod
    def from_text(
        cls,
        text: str,
        options: GenerationOptions | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> Prompt:
        """Create a prompt with a single text segment."""
        return cls(
            segments=[TextSegment(content=text)],
            options=options,
            response_schema=response_schema,
        )


class Response(BaseModel):
    """An assistant turn."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["response"] = "response"
    id: str = Field(default_factory=_new_id)
    asset_ids: list[str] = Field(default_factory=list)
    segments: list[Segment] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return segments_text(self.segments)

    @property
    def structured(self) -> Value | None:
        """The content of the first structured segment, if any."""
        for segment in self.segments:
            if isinstance(segment, StructuredSegment):
                return segment.content
        return None

    @classmethod
    def from_text(cls, text: str) -> Response:
        """Create a response with a single text segment."""
        return cls(segments=[TextSegment(content=text)])


class ToolCalls(BaseModel):
    """An assistant turn made of one or more tool invocations."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["tool_calls"] = "tool_calls"
    id: str = Field(default_factory=_new_id)
    calls: list[ToolCall] = Field(default_factory=list)

    def __iter__(self) -> Iterator[ToolCall]:  # type: ignore[override]
        return iter(self.calls)

    def __len__(self) -> int:
        return len(self.calls)


class ToolOutput(BaseModel):
    """The result of running a tool."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["tool_output"] = "tool_output"
    id: str = Field(default_factory=_new_id)
    tool_name: str = ""
    segments: list[Segment] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return segments_text(self.segments)

    @classmethod
    def from_text(cls, id: str, text: str, tool_name: str = "") -> ToolOutput:  # noqa: A002
        """Create a tool output with a single text segment."""
        return cls(id=id, tool_name=tool_name, segments=[TextSegment(content=text)])


Entry = Annotated[
    Union[Instructions, Prompt, Response, ToolCalls, ToolOutput],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Transcript — ordered container of entries
# ---------------------------------------------------------------------------


class Transcript(BaseModel):
    """An ordered, append-only log of conversation entries."""

    entries: list[Entry] = Field(default_factory=list)

    def append(self, entry: Entry) -> None:
        """Append an entry; existing entries are never modified."""
        self.entries.append(entry)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:  # type: ignore[override]
        return iter(self.entries)

    def __reversed__(self) -> Iterator[Entry]:
        return reversed(self.entries)

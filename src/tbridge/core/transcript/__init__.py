"""Provider-agnostic conversation transcripts."""

from tbridge.core.transcript.models import (
    Entry,
    GenerationOptions,
    Instructions,
    Prompt,
    Response,
    Segment,
    StructuredSegment,
    TextSegment,
    ToolCall,
    ToolCalls,
    ToolDefinition,
    ToolOutput,
    Transcript,
)

__all__ = [
    "Entry",
    "GenerationOptions",
    "Instructions",
    "Prompt",
    "Response",
    "Segment",
    "StructuredSegment",
    "TextSegment",
    "ToolCall",
    "ToolCalls",
    "ToolDefinition",
    "ToolOutput",
    "Transcript",
]

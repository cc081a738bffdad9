"""Anthropic Messages API wire records."""

from tbridge.core.wire.events import ServerSentEventDecoder, StreamingEvent, parse_event
from tbridge.core.wire.models import (
    ContentBlock,
    Message,
    MessagesRequest,
    MessagesResponse,
    RedactedThinkingBlock,
    TextBlock,
    ThinkingBlock,
    ThinkingConfig,
    ThinkingContent,
    Tool,
    ToolChoice,
    ToolResultBlock,
    ToolUseBlock,
    Usage,
)

__all__ = [
    "ContentBlock",
    "Message",
    "MessagesRequest",
    "MessagesResponse",
    "RedactedThinkingBlock",
    "ServerSentEventDecoder",
    "StreamingEvent",
    "TextBlock",
    "ThinkingBlock",
    "ThinkingConfig",
    "ThinkingContent",
    "Tool",
    "ToolChoice",
    "ToolResultBlock",
    "ToolUseBlock",
    "Usage",
    "parse_event",
]

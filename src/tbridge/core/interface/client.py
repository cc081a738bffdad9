"""ClaudeModel — transcript-native async interface to the Messages API.

Callers only deal with transcripts and entries. Each model handle owns one
``ThinkingBlockStore``, so thinking blocks from a tool-use turn are sent
back with the next request made through the same handle.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing

import httpx

from tbridge.core.interface.config import ModelConfig
from tbridge.core.interface.http import AnthropicHTTPClient
from tbridge.core.interface.request_builder import BuildResult, build_request
from tbridge.core.interface.streaming import reconstruct
from tbridge.core.interface.thinking import ThinkingBlockStore
from tbridge.core.interface.transpilers.anthropic import AnthropicTranspiler
from tbridge.core.transcript.models import Entry, GenerationOptions, Transcript
from tbridge.core.wire.events import MessageDeltaEvent, MessageStartEvent, StreamingEvent
from tbridge.core.wire.models import Usage
from tbridge.utils.telemetry import get_tracer, record_request, record_usage

_tracer = get_tracer(__name__)

# Known model identifiers. Any string the provider accepts works as well.
CLAUDE_OPUS_4_5 = "claude-opus-4-5-20251101"
CLAUDE_SONNET_4_5 = "claude-sonnet-4-5-20250929"
CLAUDE_HAIKU_4_5 = "claude-haiku-4-5-20251001"
CLAUDE_OPUS_4 = "claude-opus-4-20250514"
CLAUDE_SONNET_4 = "claude-sonnet-4-20250514"
CLAUDE_3_7_SONNET = "claude-3-7-sonnet-20250219"
CLAUDE_3_5_SONNET = "claude-3-5-sonnet-20241022"
CLAUDE_3_5_HAIKU = "claude-3-5-haiku-20241022"

KNOWN_MODELS = (
    CLAUDE_OPUS_4_5,
    CLAUDE_SONNET_4_5,
    CLAUDE_HAIKU_4_5,
    CLAUDE_OPUS_4,
    CLAUDE_SONNET_4,
    CLAUDE_3_7_SONNET,
    CLAUDE_3_5_SONNET,
    CLAUDE_3_5_HAIKU,
)


class ClaudeModel:
    """Async client for generating transcript entries with Claude.

    Usage::

        config = ModelConfig(model=CLAUDE_SONNET_4_5, api_key="sk-...")
        async with ClaudeModel(config) as model:
            entry = await model.generate(transcript)
    """

    def __init__(
        self,
        config: ModelConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.transpiler = AnthropicTranspiler()
        self.thinking_store = ThinkingBlockStore()
        self.http = AnthropicHTTPClient(config, transport=transport)

    async def __aenter__(self) -> ClaudeModel:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    def _build(
        self, transcript: Transcript, options: GenerationOptions | None, stream: bool
    ) -> BuildResult:
        # Taken before building so a schema error still consumes the set.
        pending = self.thinking_store.take()
        return build_request(
            transcript,
            options,
            model=self.config.model,
            default_max_tokens=self.config.default_max_tokens,
            thinking_budget_tokens=self.config.thinking_budget_tokens,
            pending_thinking_blocks=pending,
            stream=stream,
            transpiler=self.transpiler,
        )

    async def generate(
        self, transcript: Transcript, options: GenerationOptions | None = None
    ) -> Entry:
        """Generate the next entry for *transcript*.

        Returns a ``ToolCalls`` entry when the model invokes tools, otherwise
        a text or structured ``Response``.
        """
        with _tracer.start_as_current_span("model.generate") as span:
            built = self._build(transcript, options, stream=False)
            record_request(span, built.request)

            response = await self.http.send(built.request, built.extra_headers)
            record_usage(span, response.usage, response.stop_reason)

            if response.tool_uses:
                self.thinking_store.store_from_response(response.content)
            return self.transpiler.from_provider(response, built.response_schema)

    async def stream(
        self, transcript: Transcript, options: GenerationOptions | None = None
    ) -> AsyncIterator[Entry]:
        """Stream entries for *transcript*.

        Each text delta yields a ``Response`` with the full text so far;
        tool calls and structured output arrive once the message stops.
        """
        with _tracer.start_as_current_span("model.stream") as span:
            built = self._build(transcript, options, stream=True)
            record_request(span, built.request)

            usage = Usage()
            stop_reason: str | None = None

            def track(event: StreamingEvent) -> None:
                nonlocal usage, stop_reason
                if isinstance(event, MessageStartEvent) and event.message.usage is not None:
                    usage = event.message.usage
                elif isinstance(event, MessageDeltaEvent):
                    stop_reason = event.delta.stop_reason or stop_reason
                    if event.usage is not None:
                        output_tokens = event.usage.output_tokens
                        usage = usage.model_copy(update={"output_tokens": output_tokens})

            entries = reconstruct(
                self.http.stream(built.request, built.extra_headers),
                built.response_schema,
                self.thinking_store,
                on_event=track,
            )
            async with aclosing(entries):
                async for entry in entries:
                    yield entry
            record_usage(span, usage, stop_reason)

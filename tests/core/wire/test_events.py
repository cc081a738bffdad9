"""Tests for streaming event parsing and SSE decoding."""

import json

import pytest

from tbridge.core.wire.events import (
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ErrorEvent,
    InputJSONDelta,
    MessageDeltaEvent,
    MessageStartEvent,
    MessageStopEvent,
    PingEvent,
    RedactedThinkingStart,
    ServerSentEventDecoder,
    SignatureDelta,
    TextDelta,
    ThinkingStart,
    ToolUseStart,
    parse_event,
)


class TestParseEvent:
    def test_message_start(self) -> None:
        data = json.dumps(
            {
                "type": "message_start",
                "message": {
                    "id": "msg_1",
                    "type": "message",
                    "role": "assistant",
                    "model": "m",
                    "content": [],
                    "usage": {"input_tokens": 7, "output_tokens": 1},
                },
            }
        )
        event = parse_event("message_start", data)
        assert isinstance(event, MessageStartEvent)
        assert event.message.usage is not None
        assert event.message.usage.input_tokens == 7

    def test_content_block_starts(self) -> None:
        tool = parse_event(
            "content_block_start",
            '{"index":1,"content_block":{"type":"tool_use","id":"t","name":"n","input":{}}}',
        )
        assert isinstance(tool, ContentBlockStartEvent)
        assert isinstance(tool.content_block, ToolUseStart)
        assert tool.index == 1

        thinking = parse_event(
            "content_block_start", '{"content_block":{"type":"thinking","thinking":""}}'
        )
        assert isinstance(thinking, ContentBlockStartEvent)
        assert isinstance(thinking.content_block, ThinkingStart)

        redacted = parse_event(
            "content_block_start", '{"content_block":{"type":"redacted_thinking","data":"x"}}'
        )
        assert isinstance(redacted, ContentBlockStartEvent)
        assert isinstance(redacted.content_block, RedactedThinkingStart)

    def test_deltas(self) -> None:
        text = parse_event("content_block_delta", '{"delta":{"type":"text_delta","text":"Hi"}}')
        assert isinstance(text, ContentBlockDeltaEvent)
        assert text.delta == TextDelta(text="Hi")

        partial = parse_event(
            "content_block_delta",
            '{"delta":{"type":"input_json_delta","partial_json":"{\\"a\\""}}',
        )
        assert isinstance(partial, ContentBlockDeltaEvent)
        assert partial.delta == InputJSONDelta(partial_json='{"a"')

        signature = parse_event(
            "content_block_delta", '{"delta":{"type":"signature_delta","signature":"s"}}'
        )
        assert isinstance(signature, ContentBlockDeltaEvent)
        assert isinstance(signature.delta, SignatureDelta)

    def test_message_delta(self) -> None:
        event = parse_event(
            "message_delta",
            '{"delta":{"stop_reason":"end_turn","stop_sequence":null},"usage":{"output_tokens":9}}',
        )
        assert isinstance(event, MessageDeltaEvent)
        assert event.delta.stop_reason == "end_turn"
        assert event.usage is not None
        assert event.usage.output_tokens == 9

    def test_stop_ping_error(self) -> None:
        assert isinstance(parse_event("message_stop", '{"type":"message_stop"}'), MessageStopEvent)
        assert isinstance(parse_event("ping", "{}"), PingEvent)
        error = parse_event(
            "error", '{"error":{"type":"overloaded_error","message":"Overloaded"}}'
        )
        assert isinstance(error, ErrorEvent)
        assert error.error.message == "Overloaded"

    def test_unknown_event_is_skipped(self) -> None:
        assert parse_event("future_event", "{}") is None

    def test_malformed_payload_is_skipped(self) -> None:
        assert parse_event("content_block_delta", '{"delta":{"type":"bogus"}}') is None
        assert parse_event("content_block_delta", "not json") is None
        assert parse_event("content_block_delta", "[1, 2]") is None

    @pytest.mark.parametrize("data", ['{"error":{"kind":"x"}}', "not json", '"oops"', ""])
    def test_undecodable_error_still_reported(self, data: str) -> None:
        event = parse_event("error", data)
        assert isinstance(event, ErrorEvent)
        assert event.error.type == "api_error"
        assert "undecodable error event" in event.error.message


class TestServerSentEventDecoder:
    def test_decodes_frames(self) -> None:
        decoder = ServerSentEventDecoder()
        lines = [
            "event: ping",
            "data: {}",
            "",
            ": comment",
            "event: message_stop",
            'data: {"type":"message_stop"}',
            "",
        ]
        events = [e for e in (decoder.feed(line) for line in lines) if e is not None]
        assert [type(e) for e in events] == [PingEvent, MessageStopEvent]

    def test_multiline_data_joined(self) -> None:
        decoder = ServerSentEventDecoder()
        decoder.feed("event: content_block_delta")
        decoder.feed('data: {"delta":')
        decoder.feed('data: {"type":"text_delta","text":"x"}}')
        event = decoder.feed("")
        assert isinstance(event, ContentBlockDeltaEvent)
        assert event.delta == TextDelta(text="x")

    def test_frame_without_event_line_uses_payload_type(self) -> None:
        decoder = ServerSentEventDecoder()
        decoder.feed('data: {"type":"message_stop"}')
        assert isinstance(decoder.feed(""), MessageStopEvent)

    def test_crlf_lines(self) -> None:
        decoder = ServerSentEventDecoder()
        decoder.feed("event: ping\r")
        decoder.feed("data: {}\r")
        assert isinstance(decoder.feed("\r"), PingEvent)

    def test_flush_dispatches_trailing_frame(self) -> None:
        decoder = ServerSentEventDecoder()
        decoder.feed("event: message_stop")
        decoder.feed("data: {}")
        assert isinstance(decoder.flush(), MessageStopEvent)
        assert decoder.flush() is None

    def test_blank_lines_alone_yield_nothing(self) -> None:
        decoder = ServerSentEventDecoder()
        assert decoder.feed("") is None
        assert decoder.feed("") is None

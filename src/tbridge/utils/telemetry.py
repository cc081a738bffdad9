"""OpenTelemetry tracing helpers for transcript-bridge.

Model calls open spans through :func:`get_tracer`. Without a configured SDK
the OpenTelemetry API hands back no-op tracers, so instrumentation costs
nothing unless a host application opts in.

Usage::

    from tbridge.utils.telemetry import get_tracer

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("model.generate") as span:
        span.set_attribute(ATTR_MODEL, "claude-sonnet-4-5-20250929")

:func:`configure_telemetry` installs a real tracer provider (requires the
``otel`` extra: ``pip install transcript-bridge[otel]``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opentelemetry import trace

if TYPE_CHECKING:
    from tbridge.core.wire.models import MessagesRequest, Usage

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_MODEL = "tbridge.model"
ATTR_STREAM = "tbridge.stream"
ATTR_THINKING_BUDGET = "tbridge.thinking.budget"
ATTR_STRUCTURED_OUTPUT = "tbridge.structured_output"
ATTR_TOOL_COUNT = "tbridge.tool.count"
ATTR_TOKENS_PROMPT = "tbridge.tokens.prompt"
ATTR_TOKENS_COMPLETION = "tbridge.tokens.completion"
ATTR_TOKENS_TOTAL = "tbridge.tokens.total"
ATTR_FINISH_REASON = "tbridge.finish_reason"

_INSTRUMENTATION_NAME = "tbridge"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def record_request(span: Any, request: MessagesRequest) -> None:
    """Annotate *span* with the shape of an outgoing request."""
    span.set_attribute(ATTR_MODEL, request.model)
    span.set_attribute(ATTR_STREAM, bool(request.stream))
    span.set_attribute(ATTR_STRUCTURED_OUTPUT, request.output_format is not None)
    span.set_attribute(ATTR_TOOL_COUNT, len(request.tools or []))
    if request.thinking is not None and request.thinking.budget_tokens is not None:
        span.set_attribute(ATTR_THINKING_BUDGET, request.thinking.budget_tokens)


def record_usage(span: Any, usage: Usage | None, finish_reason: str | None) -> None:
    """Annotate *span* with token usage and the stop reason."""
    if usage is not None:
        span.set_attribute(ATTR_TOKENS_PROMPT, usage.input_tokens)
        span.set_attribute(ATTR_TOKENS_COMPLETION, usage.output_tokens)
        span.set_attribute(ATTR_TOKENS_TOTAL, usage.input_tokens + usage.output_tokens)
    if finish_reason is not None:
        span.set_attribute(ATTR_FINISH_REASON, finish_reason)


def configure_telemetry(
    *,
    service_name: str = "transcript-bridge",
    export_to_console: bool = False,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider (requires ``transcript-bridge[otel]``).

    Parameters
    ----------
    service_name:
        The ``service.name`` resource attribute.
    export_to_console:
        If ``True``, print finished spans as JSON to stdout.
    otlp_endpoint:
        If set, batch-export spans via OTLP/gRPC to this endpoint.

    Raises
    ------
    ImportError
        If the SDK or the OTLP exporter is needed but not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install transcript-bridge[otel]"
        )
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            msg = (
                "opentelemetry-exporter-otlp is required for OTLP export. "
                "Install it with: pip install transcript-bridge[otel]"
            )
            raise ImportError(msg) from exc
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))

    trace.set_tracer_provider(provider)

"""``tbridge generate`` — run one prompt through Claude."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv

from tbridge.cli_commands._output import console, print_entry
from tbridge.core.interface.client import CLAUDE_SONNET_4_5, ClaudeModel
from tbridge.core.interface.config import ModelConfig
from tbridge.core.interface.errors import BridgeError
from tbridge.core.transcript.models import (
    Entry,
    GenerationOptions,
    Instructions,
    Prompt,
    Response,
    Transcript,
)
from tbridge.utils.telemetry import configure_telemetry


@click.command()
@click.argument("prompt")
@click.option("--system", "-s", default=None, help="System instructions.")
@click.option("--model", "-m", default=CLAUDE_SONNET_4_5, show_default=True, help="Model id.")
@click.option("--max-tokens", type=click.IntRange(min=1), default=None, help="Text token budget.")
@click.option("--temperature", type=float, default=None, help="Sampling temperature.")
@click.option(
    "--thinking-budget",
    type=click.IntRange(min=1),
    default=None,
    help="Enable extended thinking with this token budget.",
)
@click.option(
    "--schema",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON Schema file for structured output.",
)
@click.option("--stream", is_flag=True, help="Stream the response as it is generated.")
@click.option("--trace-console", is_flag=True, help="Export trace spans to the console.")
@click.option("--otlp-endpoint", default=None, help="Export trace spans to this OTLP endpoint.")
def generate(
    prompt: str,
    system: str | None,
    model: str,
    max_tokens: int | None,
    temperature: float | None,
    thinking_budget: int | None,
    schema: str | None,
    stream: bool,
    trace_console: bool,
    otlp_endpoint: str | None,
) -> None:
    """Send PROMPT to Claude and print the reply."""
    load_dotenv()

    if trace_console or otlp_endpoint:
        try:
            configure_telemetry(export_to_console=trace_console, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            console.print(f"[red]Telemetry unavailable:[/red] {exc}")
            sys.exit(1)

    response_schema: dict[str, Any] | None = None
    if schema is not None:
        try:
            response_schema = json.loads(Path(schema).read_text())
        except (OSError, json.JSONDecodeError) as exc:
            console.print(f"[red]Invalid schema file:[/red] {exc}")
            sys.exit(1)

    try:
        config = ModelConfig.from_environment(model=model, thinking_budget_tokens=thinking_budget)
    except ValueError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        sys.exit(1)
    if config is None:
        console.print("[red]ANTHROPIC_API_KEY is not set.[/red]")
        sys.exit(1)

    transcript = Transcript()
    if system:
        transcript.append(Instructions.from_text(system))
    options = GenerationOptions(temperature=temperature, maximum_response_tokens=max_tokens)
    transcript.append(Prompt.from_text(prompt, options=options, response_schema=response_schema))

    try:
        if stream:
            asyncio.run(_stream(config, transcript))
        else:
            entry = asyncio.run(_generate(config, transcript))
            print_entry(entry)
    except BridgeError as exc:
        console.print(f"[red]Generation error:[/red] {exc}")
        sys.exit(1)


async def _generate(config: ModelConfig, transcript: Transcript) -> Entry:
    async with ClaudeModel(config) as model:
        return await model.generate(transcript)


async def _stream(config: ModelConfig, transcript: Transcript) -> None:
    printed = ""
    async with ClaudeModel(config) as model:
        async for entry in model.stream(transcript):
            if isinstance(entry, Response) and entry.structured is None:
                # Each entry carries the full text so far; print only what is new.
                text = entry.text
                if text.startswith(printed):
                    console.print(text[len(printed) :], end="", markup=False, highlight=False)
                    printed = text
                continue
            if printed:
                console.print()
                printed = ""
            print_entry(entry)
    if printed:
        console.print()

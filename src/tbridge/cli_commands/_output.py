"""Shared CLI output formatters."""

from __future__ import annotations

from rich.console import Console

from tbridge.core.content.value import to_json
from tbridge.core.transcript.models import Entry, Response, ToolCalls

console = Console()


def print_entry(entry: Entry) -> None:
    """Print a generated entry: text as is, structured output as JSON."""
    if isinstance(entry, ToolCalls):
        print_tool_calls(entry)
        return
    if isinstance(entry, Response) and entry.structured is not None:
        console.print_json(to_json(entry.structured))
        return
    console.print(getattr(entry, "text", ""), markup=False, highlight=False)


def print_tool_calls(entry: ToolCalls) -> None:
    console.print("[bold]Tool calls:[/bold]")
    for call in entry:
        console.print(f"  [cyan]{call.tool_name}[/cyan] ({call.id})")
        console.print(f"    {_truncate(to_json(call.arguments))}", markup=False)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."

"""Transpiler protocol — converts between transcripts and a provider's wire format.

A transpiler folds a transcript into the provider's message list and maps a
provider response back into a transcript entry.
"""

from typing import Any, Protocol

from tbridge.core.transcript.models import Entry, GenerationOptions, Transcript
from tbridge.core.wire.models import Message, MessagesResponse, Tool


class Transpiler(Protocol):
    """Protocol for provider-specific transcript transpilers."""

    def to_provider(self, transcript: Transcript) -> tuple[list[Message], str | None]:
        """Convert a transcript into wire messages and a system prompt.

        The system prompt is ``None`` when no instructions carry text.
        """
        ...

    def extract_tools(self, transcript: Transcript) -> list[Tool] | None:
        """Return the active tool declarations, or ``None``."""
        ...

    def extract_response_schema(self, transcript: Transcript) -> dict[str, Any] | None:
        """Return the active output schema, or ``None``."""
        ...

    def extract_options(self, transcript: Transcript) -> GenerationOptions | None:
        """Return the active generation options, or ``None``."""
        ...

    def from_provider(
        self, response: MessagesResponse, response_schema: dict[str, Any] | None = None
    ) -> Entry:
        """Convert a complete provider response into a transcript entry."""
        ...

"""Thinking continuity — carrying thinking blocks across a tool-use round trip.

When extended thinking is enabled and the model calls a tool, the provider
requires the thinking blocks of that assistant turn to be sent back,
unchanged, at the head of the same assistant message in the next request.
The transcript has nowhere to keep them, so a model handle holds them in a
``ThinkingBlockStore`` between calls.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from typing import Any

from tbridge.core.wire.models import THINKING_BLOCK_TYPES, Message, ThinkingContent

logger = logging.getLogger(__name__)


class ThinkingBlockStore:
    """Pending thinking blocks for one conversational session.

    All operations hold one lock, so ``take`` never observes a partially
    replaced set and no update is lost between threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._blocks: list[ThinkingContent] = []

    def take(self) -> list[ThinkingContent]:
        """Return the pending blocks and clear the store."""
        with self._lock:
            blocks, self._blocks = self._blocks, []
        return blocks

    def store_from_response(self, content: Iterable[Any]) -> None:
        """Keep the thinking blocks found in a response's content.

        Non-thinking blocks are ignored. When *content* holds no thinking
        blocks the current set is left untouched.
        """
        blocks = [block for block in content if isinstance(block, THINKING_BLOCK_TYPES)]
        if not blocks:
            return
        with self._lock:
            self._blocks = blocks
        logger.debug("Stored %d thinking block(s) for the next request", len(blocks))

    def store(self, blocks: Sequence[ThinkingContent]) -> None:
        """Replace the pending set unconditionally."""
        with self._lock:
            self._blocks = list(blocks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._blocks)


def inject_thinking_blocks(
    blocks: Sequence[ThinkingContent], messages: list[Message]
) -> list[Message]:
    """Prepend *blocks* to the content of the last assistant message.

    Returns a new list; *messages* is not modified. Text shorthand content
    becomes a single trailing text block. Without an assistant message the
    input is returned as is.
    """
    if not blocks:
        return messages
    for index in range(len(messages) - 1, -1, -1):
        message = messages[index]
        if message.role != "assistant":
            continue
        updated = Message.assistant([*blocks, *message.blocks])
        logger.debug("Injected %d thinking block(s) into message %d", len(blocks), index)
        return [*messages[:index], updated, *messages[index + 1 :]]
    return messages

"""Conversation history for a single task execution."""

import logging
from collections.abc import Iterator
from typing import assert_never

from mobclaw.platform.agent.messages import (
    AssistantToolCalls,
    Chat,
    ChatMessage,
    ConversationEntry,
    ToolResults,
)

logger = logging.getLogger(__name__)


def is_system_entry(entry: ConversationEntry) -> bool:
    """Return True for system chat entries, which trimming never drops."""
    match entry:
        case Chat():
            return entry.is_system
        case AssistantToolCalls() | ToolResults():
            return False
        case _:
            assert_never(entry)


class ConversationHistory:
    """Ordered transcript of conversation entries.

    Entries are appended and never mutated or reordered. The only removal is
    `trim`, which drops the oldest non-system entries.
    """

    def __init__(self) -> None:
        self._entries: list[ConversationEntry] = []

    def reset(self, system_prompt: str) -> None:
        """Clear the transcript and seed it with the system instruction entry."""
        self._entries = [Chat(ChatMessage.system(system_prompt))]

    def append(self, entry: ConversationEntry) -> None:
        self._entries.append(entry)

    def trim(self, max_entries: int) -> int:
        """Bound the transcript to roughly max_entries.

        All system entries are kept. Of the remaining entries only the most
        recent (max_entries - system_count) survive.

        Args:
            max_entries: Upper bound on the number of entries

        Returns:
            Number of entries dropped
        """
        if len(self._entries) <= max_entries:
            return 0

        system_count = sum(1 for e in self._entries if is_system_entry(e))
        others_count = len(self._entries) - system_count
        keep = max(max_entries - system_count, 0)
        dropped = others_count - keep
        if dropped <= 0:
            return 0

        # Drop the oldest non-system entries, keeping relative order of the rest
        kept: list[ConversationEntry] = []
        remaining_to_drop = dropped
        for entry in self._entries:
            if remaining_to_drop and not is_system_entry(entry):
                remaining_to_drop -= 1
                continue
            kept.append(entry)
        self._entries = kept
        logger.debug("Trimmed %d history entries, %d remain", dropped, len(self._entries))
        return dropped

    @property
    def entries(self) -> tuple[ConversationEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ConversationEntry]:
        return iter(tuple(self._entries))

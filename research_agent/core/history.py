"""
In-memory conversation history for one agent. Oldest turn first; never persisted.
"""

import logging
from typing import Iterator, NamedTuple

logger = logging.getLogger(__name__)


class Turn(NamedTuple):
    """One successful exchange."""

    query: str
    response: str


class ConversationHistory:
    """Ordered list of turns owned by a single ResearchAgent."""

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    @property
    def turns(self) -> tuple[Turn, ...]:
        """Snapshot of the turns (tuple so callers cannot mutate the history)."""
        return tuple(self._turns)

    def append(self, query: str, response: str) -> None:
        self._turns.append(Turn(query, response))
        logger.debug("[history:append] turns=%d response_len=%d", len(self._turns), len(response))

    def clear(self) -> None:
        """Drop all turns. Safe to call on an empty history."""
        dropped = len(self._turns)
        self._turns.clear()
        logger.debug("[history:clear] dropped=%d", dropped)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.turns)

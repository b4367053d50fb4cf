"""Bounded list of recent search queries."""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel

DEFAULT_HISTORY_SIZE = 8


class HistoryEntry(BaseModel):
    """A previously issued query."""

    query: str
    timestamp: datetime


class SearchHistory:
    """Most-recent-first query history holding at most ``max_size`` entries."""

    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE):
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self._entries: List[HistoryEntry] = []

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def record(self, query: str) -> None:
        """Add a query to the front, moving it up if already present.

        Queries are stored lower-cased, the form the search engine matches on.
        """
        query = query.strip().lower()
        if not query:
            return

        self._entries = [entry for entry in self._entries if entry.query != query]
        self._entries.insert(0, HistoryEntry(query=query, timestamp=datetime.now(timezone.utc)))
        del self._entries[self.max_size:]

    def remove(self, index: int) -> None:
        del self._entries[index]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

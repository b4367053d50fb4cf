"""Step scoring, ranking and search history."""

from .engine import list_test_cases, search, summarize
from .history import SearchHistory
from .scorer import parse_query, score

__all__ = ["list_test_cases", "search", "summarize", "SearchHistory", "parse_query", "score"]

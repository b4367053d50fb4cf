"""Gherkin step dictionary: extract, deduplicate and search reusable test steps."""

__version__ = "0.1.0"

from .config import get_config, reset_config
from .models import (
    SearchResult,
    SearchResults,
    SearchState,
    Snapshot,
    SortMode,
    SourceRecord,
    StepEntry,
    UsageReference,
)

__all__ = [
    "get_config",
    "reset_config",
    "SearchResult",
    "SearchResults",
    "SearchState",
    "Snapshot",
    "SortMode",
    "SourceRecord",
    "StepEntry",
    "UsageReference",
]

"""Search and ranking over a step snapshot."""

from typing import Callable, Dict, List, Optional

from gherkin_dictionary.models import (
    ALL_CATEGORIES,
    SearchResult,
    SearchResults,
    SearchState,
    Snapshot,
    SnapshotStats,
    SortMode,
    StepEntry,
)
from gherkin_dictionary.search.scorer import parse_query, round_half_up, score

DEFAULT_THRESHOLD = 30
HIGH_REUSE_COUNT = 3


def search(
    snapshot: Snapshot,
    state: SearchState,
    threshold: int = DEFAULT_THRESHOLD,
    reuse_denominator: Optional[int] = None,
) -> SearchResults:
    """Filter, score and sort snapshot steps for a search state.

    With neither a query nor a test case filter the engine runs in browse
    mode: only the category filter and the sort apply and no scores are
    computed.

    Args:
        snapshot: Step snapshot, never modified
        state: Query text, filters and sort mode
        threshold: Query results must score strictly above this value
        reuse_denominator: Test case count for the reuse sort (defaults to
            the snapshot's record count)

    Returns:
        Ordered search results
    """
    query = state.query.strip().lower()
    total = snapshot.total_source_records

    if not query and not state.test_case:
        entries = [entry for entry in snapshot.steps if _in_category(entry, state.category)]
        ordered = _sort(
            [SearchResult(entry=entry, reuse_rate=reuse_rate(entry, total)) for entry in entries],
            state.sort,
            has_query=False,
            step_total=len(snapshot.steps),
            denominator=reuse_denominator or total,
        )
        return SearchResults(browse=True, items=ordered)

    residual, parameters = parse_query(query)

    matched = []
    for entry in snapshot.steps:
        similarity = score(residual, entry.text.lower(), parameters)

        if not _in_category(entry, state.category):
            continue
        if state.test_case and not any(
            ref.label == state.test_case for ref in entry.usage_references
        ):
            continue
        if query and similarity <= threshold:
            continue

        matched.append(
            SearchResult(entry=entry, score=similarity, reuse_rate=reuse_rate(entry, total))
        )

    ordered = _sort(
        matched,
        state.sort,
        has_query=bool(residual),
        step_total=len(snapshot.steps),
        denominator=reuse_denominator or total,
    )
    return SearchResults(browse=False, items=ordered)


def _in_category(entry: StepEntry, category: str) -> bool:
    return category == ALL_CATEGORIES or entry.keyword == category


def _sort(
    results: List[SearchResult],
    mode: SortMode,
    has_query: bool,
    step_total: int,
    denominator: int,
) -> List[SearchResult]:
    """Order results; every mode is stable over snapshot order."""
    mode = SortMode(mode)

    if mode is SortMode.FREQUENCY:
        key: Callable[[SearchResult], object] = lambda r: -r.entry.usage_count
    elif mode is SortMode.ALPHABETIC:
        key = lambda r: r.entry.text
    elif mode is SortMode.REUSE:
        # Reuse relative to the average number of steps per test case
        steps_per_case = step_total / denominator if denominator else 0
        key = lambda r: -(r.entry.usage_count / steps_per_case * 100 if steps_per_case else 0)
    elif has_query:
        key = lambda r: (-(r.score or 0), -r.entry.usage_count)
    else:
        key = lambda r: -r.entry.usage_count

    return sorted(results, key=key)


def reuse_rate(entry: StepEntry, total_source_records: int) -> int:
    """Percentage of source records that use a step."""
    if total_source_records <= 0:
        return 0
    return round_half_up(entry.usage_count / total_source_records * 100)


def reuse_badge(count: int) -> str:
    """Marker for frequently reused steps."""
    if count >= 5:
        return "🔥"
    if count >= HIGH_REUSE_COUNT:
        return "🌟"
    return ""


def list_test_cases(snapshot: Snapshot) -> List[str]:
    """Sorted distinct test case labels, the choices for the test case filter."""
    labels = {ref.label for entry in snapshot.steps for ref in entry.usage_references}
    return sorted(labels)


def summarize(snapshot: Snapshot) -> SnapshotStats:
    """Compute headline figures for a snapshot."""
    counts = [entry.usage_count for entry in snapshot.steps]
    average = round_half_up(sum(counts) / len(counts) * 10) / 10 if counts else 0.0

    return SnapshotStats(
        total_steps=len(counts),
        total_source_records=snapshot.total_source_records,
        average_reuse=average,
        high_reuse_steps=sum(1 for count in counts if count >= HIGH_REUSE_COUNT),
    )


def group_by_keyword(snapshot: Snapshot) -> Dict[str, int]:
    """Number of steps per leading keyword."""
    groups: Dict[str, int] = {}
    for entry in snapshot.steps:
        groups[entry.keyword] = groups.get(entry.keyword, 0) + 1
    return groups

"""Tiered string similarity used to rank steps against a query."""

import math
import re
from typing import List, Sequence, Tuple

PARAMETER_PATTERN = re.compile(r'"([^"]+)"')
QUOTED_SEGMENT = re.compile(r'"[^"]*"')

EMPTY_QUERY_SCORE = 50
EXACT_SCORE = 100
CONTAINMENT_BASE = 75
CONTAINMENT_SPAN = 25
PARAMETER_BONUS = 10


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up."""
    return int(math.floor(value + 0.5))


def parse_query(query: str) -> Tuple[str, List[str]]:
    """Split quoted literal parameters out of a query.

    Args:
        query: Raw query, e.g. ``'login as "admin"'``

    Returns:
        Tuple of (residual text with quoted segments removed, parameters)
    """
    parameters = PARAMETER_PATTERN.findall(query)
    residual = QUOTED_SEGMENT.sub("", query).strip()
    return residual, parameters


def score(query: str, candidate: str, parameters: Sequence[str] = ()) -> int:
    """Score how well a candidate step matches a query.

    Both strings must already be lower-cased. Parameters are hard
    constraints: a candidate missing any of them scores 0. Containment scores
    are not clamped and may exceed 100.

    Args:
        query: Query text with parameters removed
        candidate: Step text
        parameters: Literal substrings the candidate must contain

    Returns:
        Relevance score, 0 for no match
    """
    if any(parameter not in candidate for parameter in parameters):
        return 0

    if not query:
        return EMPTY_QUERY_SCORE + (PARAMETER_BONUS if parameters else 0)

    if candidate == query:
        return EXACT_SCORE

    if query in candidate:
        ratio = len(query) / len(candidate)
        return round_half_up(CONTAINMENT_BASE + ratio * CONTAINMENT_SPAN + PARAMETER_BONUS)

    query_words = query.split()
    candidate_words = candidate.split()
    matches = sum(
        1
        for word in query_words
        if any(other in word or word in other for other in candidate_words)
    )

    if matches == 0:
        return 0

    overlap = matches / max(len(query_words), len(candidate_words)) * 100
    return round_half_up(overlap) + PARAMETER_BONUS

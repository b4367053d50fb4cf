"""Gherkin keyword normalization across English and Spanish."""

from typing import Dict, Tuple

KEYWORD_LABELS: Tuple[str, ...] = ("Given", "When", "Then", "And", "But")

KEYWORD_MAP: Dict[str, str] = {
    "given": "Given",
    "when": "When",
    "then": "Then",
    "and": "And",
    "but": "But",
    "dado": "Given",
    "cuando": "When",
    "entonces": "Then",
    "y": "And",
    "pero": "But",
}


def normalize_keyword(token: str) -> str:
    """Map a keyword token to its canonical English label.

    Matching is case-insensitive. Unknown tokens are returned unchanged.

    Args:
        token: Leading word of a step line

    Returns:
        Canonical label, or the token itself
    """
    return KEYWORD_MAP.get(str(token).lower(), token)

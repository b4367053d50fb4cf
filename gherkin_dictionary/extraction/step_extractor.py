"""Extraction of canonical Gherkin step lines from free text."""

import re
from typing import Iterator, Optional

from gherkin_dictionary.extraction.keywords import KEYWORD_MAP, normalize_keyword

STEP_PATTERN = re.compile(
    r"^\s*(" + "|".join(KEYWORD_MAP) + r")\b\s*(.*)$",
    re.IGNORECASE,
)

_WHITESPACE = re.compile(r"\s+")


def extract_steps(text: Optional[str]) -> Iterator[str]:
    """Yield canonical steps found in text, in line order.

    Lines must start with a recognized keyword followed by some text. Other
    lines are narrative and are skipped.

    Args:
        text: Free text, possibly empty or None

    Yields:
        Steps such as ``"Given a logged-in user"``
    """
    if not text or not isinstance(text, str):
        return

    for line in re.split(r"\r?\n", text):
        match = STEP_PATTERN.match(line)
        if not match:
            continue

        rest = _WHITESPACE.sub(" ", match.group(2)).strip()
        if not rest:
            continue

        yield f"{normalize_keyword(match.group(1))} {rest}"

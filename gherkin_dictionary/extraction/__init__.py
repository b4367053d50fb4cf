"""Keyword normalization and step extraction."""

from .keywords import KEYWORD_LABELS, normalize_keyword
from .step_extractor import extract_steps

__all__ = ["KEYWORD_LABELS", "normalize_keyword", "extract_steps"]

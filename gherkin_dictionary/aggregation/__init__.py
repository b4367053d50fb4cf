"""Step index building."""

from .step_index import StepIndexBuilder, build_snapshot

__all__ = ["StepIndexBuilder", "build_snapshot"]

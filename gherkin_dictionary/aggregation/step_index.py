"""Deduplicated step index building."""

from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional

from tqdm import tqdm

from gherkin_dictionary.extraction.step_extractor import extract_steps
from gherkin_dictionary.models import Snapshot, SourceRecord, StepEntry, UsageReference
from gherkin_dictionary.utils.logging_config import get_logger

logger = get_logger()


class StepIndexBuilder:
    """Accumulates extracted steps from source records into a snapshot.

    Steps are keyed by their exact canonical text. Each record counts at most
    once per step, however many times the step appears in it.
    """

    def __init__(self):
        self._references: Dict[str, List[UsageReference]] = {}
        self.records_seen = 0
        self.records_skipped = 0

    def add_record(self, record: SourceRecord, steps: Iterable[str]) -> int:
        """Merge one record's steps into the index.

        Args:
            record: Source record the steps came from
            steps: Canonical steps extracted from the record's free text

        Returns:
            Number of distinct steps contributed by the record
        """
        self.records_seen += 1

        record_id = (record.identifier or "").strip()
        if not record_id:
            self.records_skipped += 1
            logger.debug(f"Skipping record without identifier: {record.display_name!r}")
            return 0

        reference = UsageReference(
            record_id=record_id,
            cross_reference_id=record.cross_reference,
            display_name=record.display_name or f"Test Case {record_id}",
        )

        contributed = 0
        for step in dict.fromkeys(steps):
            references = self._references.setdefault(step, [])
            if any(ref.record_id == record_id for ref in references):
                continue
            references.append(reference)
            contributed += 1

        return contributed

    def build(self, generated_at: Optional[datetime] = None, **metadata) -> Snapshot:
        """Finalize the index into an immutable snapshot.

        Steps are ordered by usage count descending, then by text ascending, so
        identical input always produces identical output.

        Args:
            generated_at: Snapshot timestamp (defaults to now, UTC)
            **metadata: Extra snapshot fields (jira_base_url, project_id, ...)

        Returns:
            Snapshot of all accumulated steps
        """
        entries = [
            StepEntry(
                text=text,
                usage_count=len(references),
                usage_references=tuple(references),
            )
            for text, references in self._references.items()
        ]
        entries.sort(key=lambda entry: (-entry.usage_count, entry.text))

        logger.info(
            f"Step index built: {len(entries)} unique steps from "
            f"{self.records_seen} records ({self.records_skipped} skipped)"
        )

        return Snapshot(
            generated_at=generated_at or datetime.now(timezone.utc),
            steps=tuple(entries),
            total_source_records=self.records_seen,
            **metadata,
        )


def build_snapshot(
    records: Iterable[SourceRecord],
    extractor: Callable[[Optional[str]], Iterable[str]] = extract_steps,
    show_progress: bool = False,
    generated_at: Optional[datetime] = None,
    **metadata,
) -> Snapshot:
    """Extract steps from every record and build a snapshot.

    Args:
        records: Source records, processed in order
        extractor: Function turning free text into canonical steps
        show_progress: Whether to display a progress bar
        generated_at: Snapshot timestamp (defaults to now, UTC)
        **metadata: Extra snapshot fields

    Returns:
        Snapshot of the deduplicated steps
    """
    builder = StepIndexBuilder()

    for record in tqdm(records, desc="Indexing steps", disable=not show_progress):
        builder.add_record(record, extractor(record.free_text))

    return builder.build(generated_at=generated_at, **metadata)

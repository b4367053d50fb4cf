"""Pydantic models for domain objects."""

from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gherkin_dictionary.extraction.keywords import KEYWORD_LABELS

ALL_CATEGORIES = "all"


class SourceRecord(BaseModel):
    """One test case or issue supplying free text to mine for steps."""

    model_config = ConfigDict(frozen=True)

    identifier: Optional[str] = None
    display_name: str = ""
    free_text: Optional[str] = None
    cross_reference: Optional[str] = None


class UsageReference(BaseModel):
    """A source record that contains a given step."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    record_id: str = Field(alias="id")
    cross_reference_id: Optional[str] = Field(default=None, alias="issueId")
    display_name: str = Field(default="", alias="name")

    @property
    def label(self) -> str:
        """Name shown to users and matched by the test case filter."""
        return self.display_name or self.record_id


class StepEntry(BaseModel):
    """A deduplicated step with the records that use it."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str = Field(alias="step")
    usage_count: int = Field(alias="count", ge=1)
    usage_references: Tuple[UsageReference, ...] = Field(default=(), alias="testCases")

    @model_validator(mode="after")
    def _check_references(self) -> "StepEntry":
        record_ids = [ref.record_id for ref in self.usage_references]
        if self.usage_count != len(record_ids):
            raise ValueError(
                f"Step {self.text!r} has count {self.usage_count} "
                f"but {len(record_ids)} test case references"
            )
        if len(set(record_ids)) != len(record_ids):
            raise ValueError(f"Step {self.text!r} references the same test case twice")
        return self

    @property
    def keyword(self) -> str:
        """First whitespace-delimited word of the step."""
        parts = self.text.split()
        return parts[0] if parts else ""


class Snapshot(BaseModel):
    """Immutable step index produced by one generation run."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    generated_at: datetime = Field(alias="generatedAt")
    steps: Tuple[StepEntry, ...] = ()
    total_source_records: int = Field(default=0, alias="totalIssues", ge=0)
    jira_base_url: str = Field(default="", alias="jiraBaseUrl")
    agiletest_base_url: str = Field(default="", alias="agileTestBaseUrl")
    project_id: str = Field(default="", alias="projectId")
    project_name: Optional[str] = Field(default=None, alias="projectName")

    @property
    def total_steps(self) -> int:
        return len(self.steps)


class SortMode(str, Enum):
    """Result orderings offered by the search engine."""

    RELEVANCE = "relevance"
    FREQUENCY = "frequency"
    ALPHABETIC = "alphabetic"
    REUSE = "reuse"


class SearchState(BaseModel):
    """Everything a single search call depends on besides the snapshot."""

    model_config = ConfigDict(frozen=True)

    query: str = ""
    category: str = ALL_CATEGORIES
    test_case: str = ""
    sort: SortMode = SortMode.RELEVANCE

    @field_validator("category")
    @classmethod
    def _check_category(cls, value: str) -> str:
        if value != ALL_CATEGORIES and value not in KEYWORD_LABELS:
            raise ValueError(
                f"Unknown category: {value}. "
                f"Valid categories: {', '.join((ALL_CATEGORIES,) + KEYWORD_LABELS)}"
            )
        return value


class SearchResult(BaseModel):
    """A step paired with its relevance score."""

    entry: StepEntry
    score: Optional[int] = None  # None in browse mode
    reuse_rate: int = 0


class SearchResults(BaseModel):
    """Ordered search output.

    ``browse`` is True when no query or test case filter was given, which lets
    callers tell "nothing searched" apart from "searched, nothing found".
    """

    browse: bool
    items: List[SearchResult] = []

    @property
    def top_score(self) -> Optional[int]:
        if self.browse or not self.items:
            return None
        return self.items[0].score


class SnapshotStats(BaseModel):
    """Summary figures for a snapshot."""

    total_steps: int
    total_source_records: int
    average_reuse: float
    high_reuse_steps: int

"""Reading and writing the persisted snapshot document."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from gherkin_dictionary.models import Snapshot, UsageReference
from gherkin_dictionary.utils.logging_config import get_logger

logger = get_logger()

AGILETEST_PLUGIN_PATH = "/plugins/servlet/ac/com.devsamurai.plugin.jira.agile-test/main-page"


def snapshot_to_document(snapshot: Snapshot) -> Dict[str, Any]:
    """Convert a snapshot into the published JSON document layout."""
    document = {
        "generatedAt": snapshot.generated_at.isoformat().replace("+00:00", "Z"),
        "jiraBaseUrl": snapshot.jira_base_url,
        "agileTestBaseUrl": snapshot.agiletest_base_url,
        "projectId": snapshot.project_id,
        "projectName": snapshot.project_name,
        "totalIssues": snapshot.total_source_records,
        "totalSteps": snapshot.total_steps,
        "steps": [
            entry.model_dump(mode="json", by_alias=True) for entry in snapshot.steps
        ],
    }
    if not snapshot.project_name:
        del document["projectName"]
    return document


def save_snapshot(snapshot: Snapshot, path: Path) -> None:
    """Write a snapshot document to disk.

    Args:
        snapshot: Snapshot to persist
        path: Destination JSON file
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(snapshot_to_document(snapshot), f, indent=2, ensure_ascii=False)

    logger.info(f"Saved {snapshot.total_steps} steps to {path}")


def load_snapshot(path: Path) -> Snapshot:
    """Load a snapshot document from disk.

    Args:
        path: Snapshot JSON file

    Returns:
        Loaded snapshot

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a valid snapshot document
    """
    if not path.exists():
        raise FileNotFoundError(f"Snapshot not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Snapshot is not valid JSON: {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("steps"), list):
        raise ValueError(f"Snapshot has no steps array: {path}")

    try:
        snapshot = Snapshot.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid snapshot document {path}: {e}") from e

    logger.info(f"Loaded snapshot with {snapshot.total_steps} steps from {path}")

    return snapshot


def reference_url(snapshot: Snapshot, reference: UsageReference) -> Optional[str]:
    """Link to a step's source record.

    Snapshots generated from AgileTest link into the AgileTest Jira plugin;
    snapshots generated straight from Jira link to the issue itself.

    Args:
        snapshot: Snapshot holding the Jira base URL and project id
        reference: Test case reference

    Returns:
        URL, or None when the snapshot lacks the Jira base URL or project id
    """
    if not snapshot.jira_base_url:
        return None

    base = snapshot.jira_base_url.rstrip("/")
    if not snapshot.agiletest_base_url:
        return f"{base}/browse/{reference.record_id}"

    if not snapshot.project_id:
        return None

    url = f"{base}{AGILETEST_PLUGIN_PATH}?ac.projectId={snapshot.project_id}"
    if reference.cross_reference_id:
        url += f"#!selectedIssueId={reference.cross_reference_id}&pluginPage=testCases"
    return url

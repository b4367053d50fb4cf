"""Adapters from raw Jira and AgileTest payloads to source records.

Upstream payloads come in several shapes (``id`` vs ``testCaseId``, ``name``
vs ``title`` and so on). All of that field lookup lives here so the rest of the
package only ever sees :class:`SourceRecord`.
"""

import re
from typing import Any, Dict, List, Optional

from gherkin_dictionary.models import SourceRecord

TEST_CASE_LIST_KEYS = ("data", "testCases", "items", "results")
TEST_CASE_ID_KEYS = ("id", "testCaseId", "testcaseId")
TEST_CASE_NAME_KEYS = ("name", "testName", "title", "testCaseName")
ISSUE_REFERENCE_KEYS = ("issueId", "jiraIssueId", "issueKey", "jiraIssueKey")

ISSUE_KEY_PATTERN = re.compile(r"[A-Z][A-Z0-9]+-\d+", re.IGNORECASE)


def unwrap_test_cases(payload: Any) -> List[Dict[str, Any]]:
    """Pull the list of test cases out of a search response."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in TEST_CASE_LIST_KEYS:
            if isinstance(payload.get(key), list):
                return payload[key]
    return []


def find_test_case_id(test_case: Dict[str, Any]) -> Optional[str]:
    for key in TEST_CASE_ID_KEYS:
        value = test_case.get(key)
        if value:
            return str(value)
    return None


def find_test_case_name(test_case: Dict[str, Any]) -> str:
    for key in TEST_CASE_NAME_KEYS:
        value = test_case.get(key)
        if value and isinstance(value, str):
            return value.strip()
    return ""


def find_issue_reference(test_case: Dict[str, Any]) -> Optional[str]:
    """Numeric Jira issue id linked to a test case.

    Numeric values are used as-is; keys such as ``"PROJ-123"`` yield their
    first run of digits.
    """
    for key in ISSUE_REFERENCE_KEYS:
        value = test_case.get(key)
        if not value:
            continue

        text = str(value).strip()
        try:
            number = float(text)
        except ValueError:
            number = 0
        if number > 0 and number.is_integer():
            return str(int(number))

        match = re.search(r"\d+", text)
        if match:
            return match.group(0)

    return None


def issue_key(value: Any) -> str:
    """Upper-cased Jira issue key found in value, or an empty string."""
    if not value:
        return ""
    match = ISSUE_KEY_PATTERN.search(str(value))
    return match.group(0).upper() if match else ""


def agiletest_record(test_case: Dict[str, Any], scenario: Optional[str]) -> SourceRecord:
    """Build a source record from an AgileTest test case and its scenario.

    Args:
        test_case: Raw test case from the search endpoint
        scenario: Cucumber scenario text of the test case

    Returns:
        Source record (identifier is None when the payload has no id)
    """
    identifier = find_test_case_id(test_case)
    name = find_test_case_name(test_case)
    if not name and identifier:
        name = f"Test Case {identifier}"

    return SourceRecord(
        identifier=identifier,
        display_name=name,
        free_text=scenario,
        cross_reference=find_issue_reference(test_case),
    )


def jira_record(issue: Dict[str, Any], field_id: str) -> SourceRecord:
    """Build a source record from a Jira search result issue.

    Args:
        issue: Raw issue from the search endpoint
        field_id: Id of the field holding the Gherkin text

    Returns:
        Source record keyed by issue key
    """
    key = issue.get("key") or None
    fields = issue.get("fields") or {}
    text = fields.get(field_id)
    issue_id = issue.get("id")

    return SourceRecord(
        identifier=key,
        display_name=key or "",
        free_text=text if isinstance(text, str) else None,
        cross_reference=str(issue_id) if issue_id else None,
    )

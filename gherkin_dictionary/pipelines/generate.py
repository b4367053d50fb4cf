"""Snapshot generation from AgileTest and Jira."""

from typing import List, Optional

from tqdm import tqdm

from gherkin_dictionary.aggregation.step_index import build_snapshot
from gherkin_dictionary.config import Config
from gherkin_dictionary.models import Snapshot, SourceRecord
from gherkin_dictionary.sources.adapters import agiletest_record, find_test_case_id, jira_record
from gherkin_dictionary.sources.agiletest_client import AgileTestClient
from gherkin_dictionary.sources.jira_client import JiraClient, default_jql
from gherkin_dictionary.utils.logging_config import get_logger

logger = get_logger()


def generate_from_agiletest(
    config: Config,
    client: Optional[AgileTestClient] = None,
    show_progress: bool = True,
) -> Snapshot:
    """Build a snapshot from the Cucumber scenarios of AgileTest test cases.

    Args:
        config: Configuration
        client: AgileTest client (built from config if omitted)
        show_progress: Whether to display progress bars

    Returns:
        Snapshot of the project's steps

    Raises:
        ValueError: If required AgileTest settings are missing
    """
    missing = config.missing_agiletest_settings()
    if missing:
        raise ValueError(f"Missing settings: {', '.join(missing)}")

    if client is None:
        client = AgileTestClient(
            auth_base_url=config.agiletest_auth_base_url,
            api_base_url=config.agiletest_api_base_url,
            client_id=config.agiletest_client_id,
            client_secret=config.agiletest_client_secret,
            project_id=config.agiletest_project_id,
            timeout=config.request_timeout,
        )

    client.authenticate()
    test_cases = client.search_test_cases(limit=config.agiletest_limit)
    logger.info(f"Fetched {len(test_cases)} test cases from AgileTest")

    records: List[SourceRecord] = []
    for test_case in tqdm(test_cases, desc="Fetching scenarios", disable=not show_progress):
        test_case_id = find_test_case_id(test_case)
        scenario = client.fetch_scenario(test_case_id) if test_case_id else None
        records.append(agiletest_record(test_case, scenario))

    return build_snapshot(
        records,
        show_progress=show_progress,
        jira_base_url=config.jira_base_url,
        agiletest_base_url=(config.agiletest_api_base_url or "").rstrip("/"),
        project_id=config.agiletest_project_id,
        project_name=config.project_name or None,
    )


def generate_from_jira(
    config: Config,
    project_key: Optional[str] = None,
    jql: Optional[str] = None,
    field: Optional[str] = None,
    limit: Optional[int] = None,
    client: Optional[JiraClient] = None,
    show_progress: bool = True,
) -> Snapshot:
    """Build a snapshot from a Gherkin text field of Jira issues.

    Args:
        config: Configuration
        project_key: Project to search when no JQL is given
        jql: Explicit JQL query
        field: Field name or id holding the Gherkin text
        limit: Maximum number of issues
        client: Jira client (built from config if omitted)
        show_progress: Whether to display a progress bar

    Returns:
        Snapshot of the matching issues' steps

    Raises:
        ValueError: If settings are missing, neither project nor JQL is
            given, or the field cannot be resolved
    """
    missing = config.missing_jira_settings()
    if missing:
        raise ValueError(f"Missing settings: {', '.join(missing)}")

    jql = (jql or "").strip()
    if not jql:
        if not project_key:
            raise ValueError("project_key or jql is required")
        jql = default_jql(project_key, config.jira_issue_type)

    if client is None:
        client = JiraClient(
            base_url=config.jira_base_url,
            email=config.jira_email,
            api_token=config.jira_api_token,
            timeout=config.request_timeout,
        )

    field_name = (field or config.jira_gherkin_field).strip()
    field_id = client.resolve_field_id(field_name)
    if not field_id:
        raise ValueError(f"Field not found in Jira: {field_name}")

    logger.info(f"Searching Jira: {jql} (field {field_id})")
    issues = client.search_issues(jql, field_id, limit=limit or config.jira_limit)
    logger.info(f"Fetched {len(issues)} issues from Jira")

    records = [jira_record(issue, field_id) for issue in issues]

    return build_snapshot(
        records,
        show_progress=show_progress,
        jira_base_url=config.jira_base_url,
        project_id=project_key or "",
        project_name=config.project_name or None,
    )

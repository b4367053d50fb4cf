"""Jira REST API client for field discovery and issue search."""

from typing import Any, Dict, List, Optional

import requests

from gherkin_dictionary.utils.logging_config import get_logger

logger = get_logger()
LOG_EXTRA = {"source": "jira"}

SEARCH_PAGE_SIZE = 50
DIRECT_FIELDS = {"description", "summary"}
PREVIEW_LENGTH = 200


class JiraError(RuntimeError):
    """Raised when a Jira request fails or answers with an error status."""

    def __init__(self, status: Optional[int], details: str):
        prefix = f"Jira API error {status}" if status else "Jira API error"
        super().__init__(f"{prefix}: {details}")
        self.status = status
        self.details = details


class JiraClient:
    """Client for the Jira Cloud REST API (v3) using basic auth."""

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize Jira client.

        Args:
            base_url: Jira site URL
            email: Account email
            api_token: API token for the account
            timeout: Timeout in seconds for each request
            session: Optional requests session (a new one is created if omitted)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (email, api_token)
        self.session.headers.update({"Accept": "application/json"})

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"GET {url} {params or ''}")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Jira request failed: {url}: {e}", extra=LOG_EXTRA)
            raise JiraError(None, f"request failed: {e}") from e

        if not response.ok:
            logger.error(f"Jira request failed: {response.status_code} {url}", extra=LOG_EXTRA)
            raise JiraError(response.status_code, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise JiraError(response.status_code, f"response is not JSON: {e}") from e

    def list_fields(self, query: str = "") -> List[Dict[str, Any]]:
        """List fields, optionally filtered by a name substring.

        Args:
            query: Case-insensitive substring of the field name

        Returns:
            List of ``{id, name, custom}`` dictionaries
        """
        query = query.strip().lower()
        fields = self._get("/rest/api/3/field")

        if query:
            fields = [f for f in fields if query in str(f.get("name") or "").lower()]

        return [
            {"id": f.get("id"), "name": f.get("name"), "custom": bool(f.get("custom"))}
            for f in fields
        ]

    def resolve_field_id(self, field_name: str) -> Optional[str]:
        """Resolve a field name to its id.

        ``description``, ``summary`` and ``customfield_*`` ids are returned as
        given. Otherwise an exact (case-insensitive) name match wins over the
        first partial match.

        Args:
            field_name: Field name or id

        Returns:
            Field id, or None if no field matches
        """
        if not field_name or not field_name.strip():
            return None

        name = field_name.strip()
        lower = name.lower()

        if lower in DIRECT_FIELDS or name.startswith("customfield_"):
            return name

        try:
            fields = self._get("/rest/api/3/field")
        except JiraError as e:
            if e.status is None:
                raise
            logger.warning(f"Could not list Jira fields: {e}", extra=LOG_EXTRA)
            return None

        for field in fields:
            if str(field.get("name") or "").lower() == lower:
                return field.get("id")

        for field in fields:
            if lower in str(field.get("name") or "").lower():
                return field.get("id")

        return None

    def issue_fields(self, issue_key: str) -> List[Dict[str, Any]]:
        """Describe the non-empty fields of one issue.

        Args:
            issue_key: Issue key, e.g. ``PROJ-42``

        Returns:
            List of ``{id, name, preview}`` dictionaries sorted by name
        """
        data = self._get(f"/rest/api/3/issue/{issue_key}", params={"expand": "names"})
        names = data.get("names") or {}
        fields = data.get("fields") or {}

        results = [
            {"id": field_id, "name": names.get(field_id) or field_id, "preview": preview_value(value)}
            for field_id, value in fields.items()
            if not is_empty_value(value)
        ]
        results.sort(key=lambda item: item["name"])
        return results

    def search_issues(self, jql: str, field_id: str, limit: int = 500) -> List[Dict[str, Any]]:
        """Fetch issues matching a JQL query, page by page.

        Stops once Jira's reported total or ``limit`` is reached.

        Args:
            jql: JQL query
            field_id: Field to fetch alongside the summary
            limit: Maximum number of issues

        Returns:
            Raw issues
        """
        issues: List[Dict[str, Any]] = []
        start_at = 0

        while True:
            data = self._get(
                "/rest/api/3/search",
                params={
                    "jql": jql,
                    "startAt": start_at,
                    "maxResults": SEARCH_PAGE_SIZE,
                    "fields": f"summary,{field_id}",
                },
            )
            total = data.get("total") or 0
            batch = data.get("issues") or []
            issues.extend(batch)

            logger.debug(f"Fetched {len(issues)}/{total} issues")

            if not batch or len(issues) >= total or len(issues) >= limit:
                break

            start_at += SEARCH_PAGE_SIZE

        return issues[:limit]


def default_jql(project_key: str, issue_type: Optional[str] = None) -> str:
    """JQL selecting a project's test issues, most recently updated first."""
    issue_type_clause = f' AND issuetype = "{escape_jql(issue_type)}"' if issue_type else ""
    return f"project = {project_key}{issue_type_clause} ORDER BY updated DESC"


def escape_jql(value: str) -> str:
    return str(value).replace('"', '\\"')


def is_empty_value(value: Any) -> bool:
    """Whether a Jira field value carries no content."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict)):
        return not value
    return False


def preview_value(value: Any) -> str:
    """Short human readable rendering of a field value."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value[:PREVIEW_LENGTH] + "..." if len(value) > PREVIEW_LENGTH else value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, list):
        return f"Array({len(value)})"
    if isinstance(value, dict):
        return "Object"
    return ""

"""AgileTest API client for test cases and their Cucumber scenarios."""

from typing import Any, Dict, List, Optional

import requests

from gherkin_dictionary.sources.adapters import unwrap_test_cases
from gherkin_dictionary.utils.logging_config import get_logger

logger = get_logger()
LOG_EXTRA = {"source": "agiletest"}

PAGE_SIZE = 100
MIN_PAGE_SIZE = 10
INCORRECT_PATH_MARKER = "incorrect path"


class AgileTestError(RuntimeError):
    """Raised when an AgileTest request fails or is rejected."""

    def __init__(self, status: Optional[int], details: str):
        prefix = f"AgileTest API error {status}" if status else "AgileTest API error"
        super().__init__(f"{prefix}: {details}")
        self.status = status
        self.details = details


def strip_trailing_slash(value: Optional[str]) -> str:
    return str(value or "").rstrip("/")


def unique_bases(candidates: List[Optional[str]]) -> List[str]:
    """Non-empty, slash-stripped candidates in order, without duplicates."""
    seen = set()
    bases = []
    for candidate in candidates:
        base = strip_trailing_slash(candidate)
        if base and base not in seen:
            seen.add(base)
            bases.append(base)
    return bases


def page_limit(value: int) -> int:
    """Clamp a requested page size to what the search endpoint accepts."""
    return max(MIN_PAGE_SIZE, int(value))


class AgileTestClient:
    """Client for the AgileTest data service API.

    Authenticates with an API key pair, then discovers which base URL serves
    the ``/ds`` endpoints since deployments differ on the ``/api`` prefix.
    """

    def __init__(
        self,
        auth_base_url: str,
        api_base_url: Optional[str],
        client_id: str,
        client_secret: str,
        project_id: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.auth_base_url = strip_trailing_slash(auth_base_url)
        self.api_base_url = strip_trailing_slash(api_base_url) or self.auth_base_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.project_id = project_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

        self.token: Optional[str] = None
        self.resolved_base: Optional[str] = None

    def authenticate(self) -> str:
        """Exchange the API key pair for a token.

        Returns:
            Token used in the ``Authorization: JWT`` header

        Raises:
            AgileTestError: If authentication fails or no token is returned
        """
        url = f"{self.auth_base_url}/api/apikeys/authenticate"
        try:
            response = self.session.post(
                url,
                json={"clientId": self.client_id, "clientSecret": self.client_secret},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"AgileTest authentication request failed: {e}", extra=LOG_EXTRA)
            raise AgileTestError(None, f"authentication request failed: {e}") from e

        if not response.ok:
            raise AgileTestError(response.status_code, f"authentication failed: {response.text}")

        token = ""
        if "application/json" in response.headers.get("content-type", ""):
            try:
                data = response.json()
            except ValueError as e:
                raise AgileTestError(response.status_code, f"authentication response is not JSON: {e}") from e
            if isinstance(data, dict):
                token = data.get("token") or data.get("jwt") or data.get("accessToken") or ""
        else:
            token = response.text.strip()

        if not token:
            raise AgileTestError(response.status_code, "authentication response missing token")

        logger.info("Authenticated with AgileTest", extra=LOG_EXTRA)
        self.token = token
        return token

    def _headers(self) -> Dict[str, str]:
        if self.token is None:
            self.authenticate()
        return {"Authorization": f"JWT {self.token}"}

    def _search(self, base: str, offset: int, limit: int) -> requests.Response:
        headers = self._headers()
        try:
            return self.session.post(
                f"{base}/ds/test-cases/search",
                json={"projectId": self.project_id, "offset": offset, "limit": limit},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"AgileTest search request failed at {base}: {e}", extra=LOG_EXTRA)
            raise AgileTestError(None, f"search request failed: {e}") from e

    def resolve_api_base(self) -> str:
        """Find the base URL that serves the test case search endpoint.

        Returns:
            Working base URL

        Raises:
            AgileTestError: If a candidate fails for a reason other than a
                wrong path, or if no candidate works
        """
        if self.resolved_base:
            return self.resolved_base

        candidates = unique_bases([
            self.api_base_url,
            self.auth_base_url,
            f"{self.api_base_url}/api",
            f"{self.auth_base_url}/api",
        ])

        for base in candidates:
            response = self._search(base, offset=0, limit=MIN_PAGE_SIZE)
            if response.ok:
                logger.info(f"Using AgileTest API base {base}", extra=LOG_EXTRA)
                self.resolved_base = base
                return base

            if INCORRECT_PATH_MARKER not in response.text.lower():
                raise AgileTestError(response.status_code, f"search failed: {response.text}")

            logger.debug(f"AgileTest base {base} rejected: incorrect path")

        raise AgileTestError(None, "API base not found, check AGILETEST_API_BASE_URL")

    def search_test_cases(self, limit: int = 500) -> List[Dict[str, Any]]:
        """Fetch test cases of the project, page by page.

        Args:
            limit: Maximum number of test cases to request

        Returns:
            Raw test cases
        """
        base = self.resolve_api_base()
        results: List[Dict[str, Any]] = []
        offset = 0

        while len(results) < limit:
            response = self._search(base, offset=offset, limit=page_limit(min(PAGE_SIZE, limit - len(results))))
            if not response.ok:
                raise AgileTestError(response.status_code, f"search failed: {response.text}")

            try:
                payload = response.json()
            except ValueError as e:
                raise AgileTestError(response.status_code, f"search response is not JSON: {e}") from e

            batch = unwrap_test_cases(payload)
            results.extend(batch)
            logger.debug(f"Fetched {len(results)} test cases")

            if not batch:
                break
            offset += len(batch)

        return results[:limit]

    def fetch_scenario(self, test_case_id: str) -> str:
        """Fetch the Cucumber scenario text of a test case.

        Failures are logged and yield an empty scenario so one broken test
        case does not abort a whole run.

        Args:
            test_case_id: Test case id

        Returns:
            Scenario text, possibly empty
        """
        base = self.resolve_api_base()
        url = f"{base}/ds/test-cases/{test_case_id}/cucumber"

        try:
            response = self.session.get(
                url,
                params={"projectId": self.project_id},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"AgileTest cucumber request failed for {test_case_id}: {e}", extra=LOG_EXTRA)
            return ""

        if not response.ok:
            logger.error(f"AgileTest cucumber error {response.status_code}: {response.text}", extra=LOG_EXTRA)
            return ""

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"AgileTest cucumber response for {test_case_id} is not JSON: {e}", extra=LOG_EXTRA)
            return ""

        scenario = data.get("scenario") if isinstance(data, dict) else None
        return scenario if isinstance(scenario, str) else ""

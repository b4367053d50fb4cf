"""Pytest configuration and fixtures."""

import json
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from gherkin_dictionary.aggregation.step_index import build_snapshot
from gherkin_dictionary.config import Config, reset_config
from gherkin_dictionary.models import SourceRecord

GENERATED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir):
    """Create a test configuration with no credentials."""
    reset_config()

    config = Config(
        _env_file=None,
        data_dir=temp_dir / ".gherkin_dictionary",
        output_file=temp_dir / "data.json",
        log_level="WARNING",
    )
    config.ensure_directories()

    yield config

    reset_config()


@pytest.fixture
def agiletest_config(temp_dir):
    """Configuration with AgileTest credentials set."""
    reset_config()

    config = Config(
        _env_file=None,
        data_dir=temp_dir / ".gherkin_dictionary",
        output_file=temp_dir / "data.json",
        agiletest_auth_base_url="https://agiletest.example.com/",
        agiletest_client_id="client",
        agiletest_client_secret="secret",
        agiletest_project_id=" 10001 ",
        jira_base_url="https://acme.atlassian.net",
        project_name="Checkout",
        log_level="WARNING",
    )

    yield config

    reset_config()


@pytest.fixture
def jira_config(temp_dir):
    """Configuration with Jira credentials set."""
    reset_config()

    config = Config(
        _env_file=None,
        data_dir=temp_dir / ".gherkin_dictionary",
        output_file=temp_dir / "data.json",
        jira_base_url="https://acme.atlassian.net",
        jira_email="qa@example.com",
        jira_api_token="token",
        log_level="WARNING",
    )

    yield config

    reset_config()


@pytest.fixture
def sample_records():
    """Source records sharing some steps."""
    return [
        SourceRecord(
            identifier="101",
            display_name="Login works",
            cross_reference="5001",
            free_text=(
                "Scenario: login\n"
                "Given a registered user\n"
                "When the user logs in as \"admin\"\n"
                "Then the dashboard is shown\n"
            ),
        ),
        SourceRecord(
            identifier="102",
            display_name="Logout works",
            cross_reference="5002",
            free_text=(
                "Given a registered user\n"
                "When the user logs out\n"
                "Then the login page is shown\n"
            ),
        ),
        SourceRecord(
            identifier="103",
            display_name="Spanish login",
            free_text=(
                "Dado a registered user\n"
                "Cuando the user logs in as \"guest\"\n"
                "Entonces the dashboard is shown\n"
                "Y a welcome banner appears\n"
            ),
        ),
    ]


@pytest.fixture
def sample_snapshot(sample_records):
    """Snapshot built from the sample records."""
    return build_snapshot(
        sample_records,
        generated_at=GENERATED_AT,
        jira_base_url="https://acme.atlassian.net",
        agiletest_base_url="https://agiletest.example.com",
        project_id="10001",
        project_name="Checkout",
    )


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, payload=None, text=None, content_type="application/json"):
        self.status_code = status_code
        self._payload = payload
        self.text = text if text is not None else json.dumps(payload)
        self.headers = {"content-type": content_type}

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakeSession:
    """Records requests and answers them from a routing function."""

    def __init__(self, router):
        self.router = router
        self.calls = []
        self.headers = {}
        self.auth = None

    def _handle(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.router(method, url, kwargs)

    def get(self, url, **kwargs):
        return self._handle("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._handle("POST", url, **kwargs)


@pytest.fixture
def fake_session():
    """Factory for fake sessions driven by a router callable."""
    return FakeSession


@pytest.fixture
def fake_response():
    """Factory for fake responses."""
    return FakeResponse

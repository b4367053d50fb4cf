"""Configuration management using Pydantic settings."""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Jira
    jira_base_url: str = Field(
        default="",
        description="Jira site URL, e.g. https://acme.atlassian.net",
    )
    jira_email: str = Field(default="", description="Jira account email")
    jira_api_token: str = Field(default="", description="Jira API token")
    jira_gherkin_field: str = Field(
        default="Details",
        description="Name or id of the issue field holding Gherkin text",
    )
    jira_issue_type: str = Field(
        default="Classic Test",
        description="Issue type used to build the default JQL",
    )
    jira_limit: int = Field(default=500, description="Maximum issues to fetch")

    # AgileTest
    agiletest_auth_base_url: str = Field(default="", description="AgileTest auth base URL")
    agiletest_api_base_url: Optional[str] = Field(
        default=None,
        description="AgileTest API base URL (defaults to the auth base URL)",
    )
    agiletest_client_id: str = Field(default="", description="AgileTest API key client id")
    agiletest_client_secret: str = Field(default="", description="AgileTest API key secret")
    agiletest_project_id: str = Field(default="", description="AgileTest project id")
    agiletest_limit: int = Field(default=500, description="Maximum test cases to fetch")
    project_name: Optional[str] = Field(
        default=None,
        description="Optional project display name stored in the snapshot",
    )

    # Snapshot
    output_file: Path = Field(
        default=Path("public") / "data.json",
        description="Snapshot JSON document path",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for each HTTP request",
    )

    # Search
    similarity_threshold: int = Field(
        default=30,
        description="Scores at or below this value are dropped from query results",
    )
    reuse_denominator: Optional[int] = Field(
        default=None,
        description="Override for the test case count used by the reuse sort",
    )
    history_size: int = Field(default=8, description="Recent queries kept per session")

    # Logging
    data_dir: Path = Field(
        default=Path(".gherkin_dictionary"),
        description="Working directory for logs",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Log file path")
    log_json: bool = Field(default=False, description="Write JSON formatted file logs")

    def __init__(self, **kwargs):
        """Initialize config and set dependent values."""
        super().__init__(**kwargs)

        self.agiletest_project_id = self.agiletest_project_id.strip()
        if not self.agiletest_api_base_url:
            self.agiletest_api_base_url = self.agiletest_auth_base_url
        if self.log_file is None:
            self.log_file = self.data_dir / "gherkin_dictionary.log"

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def missing_agiletest_settings(self) -> List[str]:
        """Names of unset settings required to fetch from AgileTest."""
        required = {
            "AGILETEST_AUTH_BASE_URL": self.agiletest_auth_base_url,
            "AGILETEST_CLIENT_ID": self.agiletest_client_id,
            "AGILETEST_CLIENT_SECRET": self.agiletest_client_secret,
            "AGILETEST_PROJECT_ID": self.agiletest_project_id,
        }
        return [name for name, value in required.items() if not value]

    def missing_jira_settings(self) -> List[str]:
        """Names of unset settings required to fetch from Jira."""
        required = {
            "JIRA_BASE_URL": self.jira_base_url,
            "JIRA_EMAIL": self.jira_email,
            "JIRA_API_TOKEN": self.jira_api_token,
        }
        return [name for name, value in required.items() if not value]


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        _config = Config()
        _config.ensure_directories()
    return _config


def reset_config() -> None:
    """Reset global config (mainly for testing)."""
    global _config
    _config = None

"""Clients and adapters for Jira and AgileTest."""

from .agiletest_client import AgileTestClient, AgileTestError
from .jira_client import JiraClient, JiraError

__all__ = ["AgileTestClient", "AgileTestError", "JiraClient", "JiraError"]

"""
Test fixtures for Xray unit tests.

The Xray facade is built over a mocked Jira facade whose invoker is a
MagicMock, so Jira lookups and Xray commands can be stubbed separately.
"""

from unittest.mock import MagicMock

import pytest

from mcp_xray.commands.invoker import CommandInvoker
from mcp_xray.jira import JiraFetcher
from mcp_xray.xray import XrayFetcher


@pytest.fixture
def xray_invoker(jira_config):
    invoker = MagicMock(spec=CommandInvoker)
    invoker.config = jira_config
    invoker.send_json.return_value = {}
    invoker.send_many.return_value = []
    return invoker


@pytest.fixture
def mock_jira(jira_config, xray_invoker):
    """A JiraFetcher double sharing the mocked invoker."""
    jira = MagicMock(spec=JiraFetcher)
    jira.config = jira_config
    jira.invoker = xray_invoker
    jira.max_workers = jira_config.max_workers
    jira.get_issues.return_value = []
    jira.get_issues_by_jql.return_value = []
    return jira


@pytest.fixture
def xray_fetcher(mock_jira, xray_config):
    return XrayFetcher(jira=mock_jira, config=xray_config)

"""
Test fixtures for Jira unit tests.

The fetcher under test talks to a MagicMock invoker, so every test decides
exactly which documents Jira answers with.
"""

from unittest.mock import MagicMock

import pytest

from mcp_xray.commands.invoker import CommandInvoker
from mcp_xray.jira import JiraFetcher


@pytest.fixture
def mock_invoker(jira_config):
    """A CommandInvoker double answering ``{}`` unless a test says otherwise."""
    invoker = MagicMock(spec=CommandInvoker)
    invoker.config = jira_config
    invoker.max_workers = jira_config.max_workers
    invoker.send_json.return_value = {}
    invoker.send_many.return_value = []
    return invoker


@pytest.fixture
def jira_fetcher(jira_config, mock_invoker):
    """A JiraFetcher wired to the mock invoker."""
    return JiraFetcher(config=jira_config, invoker=mock_invoker)

"""
Root test configuration for MCP Xray.

Provides fixtures shared by every test package: the async backend, clean
environment handling and a clean process-wide metadata cache.
"""

import os
from unittest.mock import patch

import pytest

from mcp_xray.jira.fields import PROJECT_META_CACHE
from tests.utils.factories import ConfigFactory


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture(autouse=True)
def clean_project_meta_cache():
    """The metadata cache is process-wide, so each test starts empty."""
    PROJECT_META_CACHE.clear()
    yield
    PROJECT_META_CACHE.clear()


@pytest.fixture
def clean_environment():
    """Remove every Jira, Xray and server variable for the duration of a test."""
    prefixes = ("JIRA_", "XRAY_", "READ_ONLY_MODE", "LOG_")
    kept = {k: v for k, v in os.environ.items() if not k.startswith(prefixes)}
    with patch.dict(os.environ, kept, clear=True):
        yield


@pytest.fixture
def jira_config():
    """A standard JiraConfig for tests that do not need custom values."""
    return ConfigFactory.jira()


@pytest.fixture
def xray_config():
    """An XrayConfig that retries without sleeping."""
    return ConfigFactory.xray()

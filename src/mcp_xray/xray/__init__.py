"""Xray Cloud API module for mcp_xray.

This module provides the Xray facade built on top of the Jira facade.
"""

from .client import XrayClient, build_invoker
from .config import XrayConfig
from .executions import ExecutionsMixin
from .plans import PlansMixin
from .repository import RepositoryMixin
from .tests import TestsMixin


class XrayFetcher(TestsMixin, ExecutionsMixin, PlansMixin, RepositoryMixin):
    """
    The main Xray client class providing access to all Xray operations.

    This class inherits from multiple mixins that provide specific functionality:
    - TestsMixin: Tests, their steps and the sets, plans and preconditions they belong to
    - ExecutionsMixin: Test executions and test runs
    - PlansMixin: Test plans and test sets
    - RepositoryMixin: Test repository folders
    """

    pass


__all__ = ["XrayFetcher", "XrayConfig", "XrayClient", "build_invoker"]

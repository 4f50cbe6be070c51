"""Module for Xray test plan and test set operations."""

from collections.abc import Iterable
from typing import Any

from ..commands import xray as xray_commands
from ..commands.base import IssueRef
from ..commands.retry import RetryOutcome
from .client import XrayClient


class PlansMixin(XrayClient):
    """Mixin for Xray test plan and test set operations."""

    def add_tests_to_plan(self, plan: IssueRef, test_ids: Iterable[str]) -> RetryOutcome[Any]:
        """
        Add tests to a test plan, retrying transient failures.

        Args:
            plan: Id and key of the test plan
            test_ids: Issue ids of the tests

        Returns:
            The outcome of the last attempt
        """
        return self._send_repeatable(xray_commands.add_tests_to_plan(plan, list(test_ids)))

    def add_execution_to_plan(self, plan: IssueRef, execution_id: str) -> Any:
        return self._send(xray_commands.add_execution_to_plan(plan, execution_id))

    def add_tests_to_set(self, test_set: IssueRef, test_ids: Iterable[str]) -> Any:
        return self._send(xray_commands.add_tests_to_set(test_set, test_ids))

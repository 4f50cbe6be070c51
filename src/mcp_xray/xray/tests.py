"""Module for Xray test operations."""

import logging
from typing import Any

from ..commands import xray as xray_commands
from ..commands.base import IssueRef
from ..commands.batching import for_each_parallel, key_query
from .client import XrayClient

logger = logging.getLogger("mcp-xray.xray")


def _ids_of(items: Any, field: str = "id") -> list[str]:
    """Collect the non-empty ``field`` values of a list response."""
    if not isinstance(items, list):
        return []
    return [str(i[field]) for i in items if isinstance(i, dict) and i.get(field)]


class TestsMixin(XrayClient):
    """Mixin for Xray test operations."""

    def get_test_case(self, id_or_key: str) -> dict[str, Any] | None:
        """
        Get a test: the Jira issue with its Xray ``steps`` merged in.

        Args:
            id_or_key: The test issue id or key

        Returns:
            The test document, or None when the issue does not exist
        """
        test_cases = self.get_test_cases(id_or_key)
        return test_cases[0] if test_cases else None

    def get_test_cases(self, *ids_or_keys: str) -> list[dict[str, Any]]:
        """Get several tests with their steps, loading steps concurrently. Order is not kept."""
        issues = self.jira.get_issues(*ids_or_keys)
        return for_each_parallel(issues, self._with_steps, self.max_workers)

    def _with_steps(self, issue: dict[str, Any]) -> dict[str, Any]:
        test = IssueRef(str(issue.get("id", "")), str(issue.get("key", "")))
        response = self._send(xray_commands.get_steps(test))
        steps = response.get("steps") if isinstance(response, dict) else None
        return {**issue, "steps": steps or []}

    def get_tests_by_sets(self, *ids_or_keys: str) -> list[dict[str, Any]]:
        """Get the tests (with steps) that belong to the given test sets."""
        if not ids_or_keys:
            return []
        test_sets = self.jira.get_issues_by_jql(key_query(ids_or_keys), "key")
        commands = [
            xray_commands.get_tests_by_set(IssueRef(str(s["id"]), str(s["key"])))
            for s in test_sets
        ]
        test_ids = {
            test_id
            for response in self.invoker.send_many(commands)
            for test_id in _ids_of(response)
        }
        return self.get_test_cases(*sorted(test_ids))

    def get_tests_by_plans(self, *ids_or_keys: str) -> list[dict[str, Any]]:
        """Get the tests (with steps) that belong to the given test plans."""
        if not ids_or_keys:
            return []
        test_plans = self.jira.get_issues_by_jql(key_query(ids_or_keys), "key")
        commands = [
            xray_commands.get_tests_by_plan(IssueRef(str(p["id"]), str(p["key"])))
            for p in test_plans
        ]
        test_ids = {
            test_id
            for response in self.invoker.send_many(commands)
            for test_id in _ids_of(response, "issueId")
        }
        return self.get_test_cases(*sorted(test_ids))

    def get_tests_by_executions(self, *ids_or_keys: str) -> list[dict[str, Any]]:
        """Get the tests (with steps) that have a run in the given test executions."""

        def _test_ids(id_or_key: str) -> list[str]:
            execution = self.get_issue_ref(id_or_key)
            if execution is None:
                return []
            runs = self._send(xray_commands.get_runs_by_execution(execution), [])
            return _ids_of(runs, "testIssueId")

        test_ids = {
            test_id
            for ids in for_each_parallel(ids_or_keys, _test_ids, self.max_workers)
            for test_id in ids
        }
        return self.get_test_cases(*sorted(test_ids))

    def get_sets_by_test(self, test: IssueRef) -> list[str]:
        """Ids of the test sets a test belongs to."""
        return _ids_of(self._send(xray_commands.get_sets_by_test(test), []))

    def get_plans_by_test(self, test: IssueRef) -> list[str]:
        """Ids of the test plans a test belongs to."""
        return _ids_of(self._send(xray_commands.get_plans_by_test(test), []))

    def get_preconditions_by_test(self, test: IssueRef) -> list[str]:
        """Ids of the preconditions linked to a test."""
        return _ids_of(self._send(xray_commands.get_preconditions_by_test(test), []))

    def new_test_step(self, test: IssueRef, action: str, result: str, index: int) -> Any:
        """
        Add a manual step to a test.

        Args:
            test: Id and key of the test
            action: What the tester does
            result: Expected result
            index: Zero-based position of the step

        Returns:
            Xray's response, or the failure envelope
        """
        return self._send(xray_commands.new_test_step(test, action, result, index))

    def remove_test_step(
        self, test: IssueRef, step_id: str, remove_from_jira: bool = False
    ) -> Any:
        """Delete one step of a test."""
        return self._send(xray_commands.remove_test_step(test, step_id, remove_from_jira))

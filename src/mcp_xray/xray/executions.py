"""Module for Xray test execution and test run operations."""

import logging
from typing import Any

from ..commands import xray as xray_commands
from ..commands.base import IssueRef
from ..commands.batching import ADD_TO_EXECUTION_BUCKET_SIZE, for_each_parallel, key_query, split
from .client import XrayClient

logger = logging.getLogger("mcp-xray.xray")


def _find(issues: list[dict[str, Any]], id_or_key: str) -> IssueRef | None:
    for issue in issues:
        if id_or_key in (str(issue.get("id", "")), str(issue.get("key", ""))):
            return IssueRef(str(issue["id"]), str(issue["key"]))
    return None


class ExecutionsMixin(XrayClient):
    """Mixin for Xray test execution and test run operations."""

    def add_tests_to_execution(self, execution: str, *tests: str) -> list[Any]:
        """
        Add tests to a test execution, in buckets of 49 sent concurrently.

        Args:
            execution: The execution issue id or key
            *tests: Ids or keys of the tests to add

        Returns:
            Xray's responses, one per bucket, in completion order
        """
        target = self.get_issue_ref(execution)
        if target is None or not tests:
            return []

        def _add(bucket: list[str]) -> Any:
            issues = self.jira.get_issues_by_jql(key_query(bucket), "key")
            test_ids = sorted({str(i["id"]) for i in issues if i.get("id")})
            return self._send(xray_commands.add_tests_to_execution(target, test_ids))

        buckets = split(tests, ADD_TO_EXECUTION_BUCKET_SIZE)
        return for_each_parallel(buckets, _add, self.max_workers)

    def get_runs_by_execution(self, execution: IssueRef) -> list[dict[str, Any]]:
        """Get the test runs of an execution (status and test of each run)."""
        runs = self._send(xray_commands.get_runs_by_execution(execution), [])
        return runs if isinstance(runs, list) else []

    def get_execution_details(self, execution: str, test: str) -> dict[str, Any]:
        """
        Get the run of one test inside one execution.

        Args:
            execution: The execution issue id or key
            test: The test issue id or key

        Returns:
            The ``testRun`` document, or {} when either issue or the run is missing
        """
        execution, test = execution.upper(), test.upper()
        issues = self.jira.get_issues(execution, test)
        on_execution = _find(issues, execution)
        on_test = _find(issues, test)
        if on_execution is None or on_test is None:
            return {}

        response = self._send(xray_commands.get_load_test_run(on_execution.key, on_test.key))
        run = response.get("testRun") if isinstance(response, dict) else None
        return run or {}

    def update_test_run_status(
        self, execution: IssueRef, project_id: str, run_id: str, status: str
    ) -> Any:
        return self._send(
            xray_commands.update_test_run_status(execution, project_id, run_id, status)
        )

    def update_step_status(
        self, execution: IssueRef, run_id: str, step_id: str, status: str
    ) -> Any:
        return self._send(xray_commands.update_step_status(execution, run_id, step_id, status))

    def update_step_actual(
        self, execution: IssueRef, run_id: str, step_id: str, actual: str
    ) -> Any:
        return self._send(xray_commands.update_step_actual(execution, run_id, step_id, actual))

    def add_comment_to_test_run(self, execution: IssueRef, run_id: str, comment: str) -> Any:
        return self._send(xray_commands.new_comment_on_test_run(execution, run_id, comment))

    def add_defect_to_test_run(self, execution: IssueRef, run_id: str, defect_id: str) -> Any:
        return self._send(xray_commands.add_defect_to_test_run(execution, run_id, defect_id))

    def add_precondition(self, precondition: str, test: str) -> Any:
        """
        Link a precondition issue to a test.

        Returns:
            Xray's response, or None when either issue does not exist
        """
        precondition, test = precondition.upper(), test.upper()
        issues = self.jira.get_issues(precondition, test)
        on_precondition = _find(issues, precondition)
        on_test = _find(issues, test)
        if on_precondition is None or on_test is None:
            logger.warning(f"Cannot link precondition {precondition} to {test}: issue not found")
            return None
        return self._send(xray_commands.add_precondition(on_test, [on_precondition.id]))

"""Tests for the Xray command factories."""

import json

import pytest
from pydantic import ValidationError

from mcp_xray.commands import xray as xray_commands
from mcp_xray.commands.base import XRAY_CONTEXT_HEADER, HttpMethod, IssueRef
from mcp_xray.commands.invoker import serialize_body

TEST = IssueRef("20001", "DEMO-1")
EXECUTION = IssueRef("20009", "DEMO-9")


def _payload(command):
    return json.loads(serialize_body(command.data))


class TestXrayCommands:
    """Every Xray command is scoped by the X-acpt context header."""

    @pytest.mark.parametrize(
        "command, context_key",
        [
            (xray_commands.get_steps(TEST), "DEMO-1"),
            (xray_commands.add_tests_to_plan(IssueRef("3", "DEMO-3"), ["1"]), "DEMO-3"),
            (xray_commands.get_folders("DEMO", "10000"), "DEMO"),
            (xray_commands.get_load_test_run("DEMO-9", "DEMO-1"), "DEMO-9"),
            (xray_commands.add_defect_to_test_run(EXECUTION, "run-1", "20010"), "DEMO-9"),
        ],
    )
    def test_context_header(self, command, context_key):
        assert command.headers[XRAY_CONTEXT_HEADER] == context_key
        assert command.route.startswith("/api/internal/")

    def test_new_test_step(self):
        command = xray_commands.new_test_step(TEST, "click login", "page loads", 0)

        assert command.route == "/api/internal/test/20001/step"
        assert command.method == HttpMethod.POST
        assert _payload(command) == {"action": "click login", "result": "page loads", "index": 0}

    def test_new_test_step_rejects_negative_index(self):
        with pytest.raises(ValidationError):
            xray_commands.new_test_step(TEST, "click login", "page loads", -1)

    def test_remove_test_step(self):
        command = xray_commands.remove_test_step(TEST, "step-1")

        assert command.route == "/api/internal/test/20001/step/step-1?removeFromJira=false"
        assert command.method == HttpMethod.DELETE
        assert (
            xray_commands.remove_test_step(TEST, "step-1", True).route.endswith(
                "removeFromJira=true"
            )
        )

    def test_get_steps(self):
        assert (
            xray_commands.get_steps(TEST).route
            == "/api/internal/test/20001/steps?startAt=0&maxResults=1000"
        )

    def test_add_tests_to_plan(self):
        command = xray_commands.add_tests_to_plan(IssueRef("3", "DEMO-3"), ["1", "2"])

        assert command.route == "/api/internal/testplan/3/addTests"
        assert command.data == ["1", "2"]

    def test_add_execution_to_plan(self):
        command = xray_commands.add_execution_to_plan(IssueRef("3", "DEMO-3"), "20009")

        assert command.route == "/api/internal/testplan/3/addTestExecs"
        assert command.data == ["20009"]

    def test_get_tests_by_plan(self):
        command = xray_commands.get_tests_by_plan(IssueRef("3", "DEMO-3"))

        assert command.method == HttpMethod.POST
        assert command.data == {"isFinal": True}

    def test_issue_links(self):
        assert xray_commands.get_sets_by_test(TEST).route == (
            "/api/internal/issuelinks/testset/20001/tests?direction=inward"
        )
        assert xray_commands.get_plans_by_test(TEST).route == (
            "/api/internal/issuelinks/testPlan/20001/tests?direction=inward"
        )
        assert xray_commands.get_preconditions_by_test(TEST).route == (
            "/api/internal/issuelinks/test/20001/preConditions"
        )
        assert xray_commands.get_tests_by_set(IssueRef("5", "DEMO-5")).route == (
            "/api/internal/issuelinks/testset/5/tests"
        )

    def test_add_precondition(self):
        command = xray_commands.add_precondition(TEST, ["20002"])

        assert command.route == "/api/internal/issuelinks/test/20001/preConditions"
        assert command.data == ["20002"]

    def test_add_tests_to_execution_and_set(self):
        execution = xray_commands.add_tests_to_execution(EXECUTION, ["1"])
        test_set = xray_commands.add_tests_to_set(IssueRef("5", "DEMO-5"), ("1", "2"))

        assert execution.route == "/api/internal/issuelinks/testexec/20009/tests"
        assert test_set.data == ["1", "2"]

    def test_get_runs_by_execution(self):
        command = xray_commands.get_runs_by_execution(EXECUTION)

        assert command.route == "/api/internal/testruns?testExecIssueId=20009"
        assert command.data == {"fields": ["status", "key"]}

    def test_get_load_test_run(self):
        command = xray_commands.get_load_test_run("DEMO-9", "DEMO-1")

        assert command.route == (
            "/api/internal/load-test-run?testIssueKey=DEMO-1&testExecIssueKey=DEMO-9"
        )

    def test_run_updates(self):
        status = xray_commands.update_test_run_status(EXECUTION, "10000", "run-1", "passed")
        step_status = xray_commands.update_step_status(EXECUTION, "run-1", "s-1", "failed")
        actual = xray_commands.update_step_actual(EXECUTION, "run-1", "s-1", "it broke")
        comment = xray_commands.new_comment_on_test_run(EXECUTION, "run-1", "flaky")

        assert status.route == "/api/internal/testrun/run-1/status"
        assert _payload(status) == {"projectId": "10000", "status": "PASSED"}
        assert step_status.route == "/api/internal/testRun/run-1/step/s-1/status"
        assert _payload(step_status) == {"status": "FAILED"}
        assert actual.route == "/api/internal/testRun/run-1/step/s-1/actualresult"
        assert _payload(actual) == {"actualResult": "it broke"}
        assert comment.route == "/api/internal/testRun/run-1/comment"
        assert _payload(comment) == {"comment": "flaky"}

    def test_new_test_repository_folder(self):
        command = xray_commands.new_test_repository_folder("DEMO", "10000", "Login", "f-1")

        assert command.route == "/api/internal/test-repository/folders"
        assert _payload(command) == {
            "projectId": "10000",
            "name": "Login",
            "parentFolderId": "f-1",
        }

    def test_new_test_repository_folder_at_root(self):
        command = xray_commands.new_test_repository_folder("DEMO", "10000", "Login", "")

        assert "parentFolderId" not in _payload(command)

    def test_folder_name_cannot_contain_separator(self):
        with pytest.raises(ValidationError):
            xray_commands.new_test_repository_folder("DEMO", "10000", "a/b")

    def test_add_tests_to_folder(self):
        command = xray_commands.add_tests_to_folder("DEMO", "10000", "f-1", ["1", "2"])

        assert command.route == "/api/internal/test-repository/move-tests"
        assert _payload(command) == {"projectId": "10000", "folderId": "f-1", "testIds": ["1", "2"]}

    def test_get_folders(self):
        assert (
            xray_commands.get_folders("DEMO", "10000").route
            == "/api/internal/test-repository?projectId=10000"
        )

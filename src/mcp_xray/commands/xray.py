"""Command factories for the Xray Cloud internal API.

Every command carries the ``X-acpt`` header with the issue (or project)
context key; the invoker trades it for a session token and sends the
request to the Xray base address instead of Jira.
"""

from collections.abc import Iterable
from urllib.parse import urlencode

from ..models.xray import (
    MoveTestsRequest,
    NewFolderRequest,
    RunCommentRequest,
    StepActualRequest,
    StepStatusRequest,
    TestRunStatusRequest,
    TestStepRequest,
)
from .base import XRAY_CONTEXT_HEADER, HttpCommand, HttpMethod, IssueRef

API_ROUTE = "/api/internal"


def _command(
    context_key: str, path: str, method: HttpMethod = HttpMethod.GET, data=None
) -> HttpCommand:
    return HttpCommand(
        route=f"{API_ROUTE}{path}",
        method=method,
        data=data,
        headers={XRAY_CONTEXT_HEADER: context_key},
    )


def add_defect_to_test_run(run: IssueRef, run_id: str, defect_id: str) -> HttpCommand:
    """Link a defect issue to a test run; ``run`` is the execution scoping the session."""
    return _command(run.key, f"/testrun/{run_id}/defects", HttpMethod.POST, [defect_id])


def add_execution_to_plan(plan: IssueRef, execution_id: str) -> HttpCommand:
    return _command(plan.key, f"/testplan/{plan.id}/addTestExecs", HttpMethod.POST, [execution_id])


def add_precondition(test: IssueRef, precondition_ids: Iterable[str]) -> HttpCommand:
    return _command(
        test.key,
        f"/issuelinks/test/{test.id}/preConditions",
        HttpMethod.POST,
        list(precondition_ids),
    )


def add_tests_to_execution(execution: IssueRef, test_ids: Iterable[str]) -> HttpCommand:
    return _command(
        execution.key, f"/issuelinks/testexec/{execution.id}/tests", HttpMethod.POST, list(test_ids)
    )


def add_tests_to_folder(
    context_key: str, project_id: str, folder_id: str, test_ids: Iterable[str]
) -> HttpCommand:
    payload = MoveTestsRequest(projectId=project_id, folderId=folder_id, testIds=list(test_ids))
    return _command(context_key, "/test-repository/move-tests", HttpMethod.POST, payload)


def add_tests_to_plan(plan: IssueRef, test_ids: Iterable[str]) -> HttpCommand:
    return _command(plan.key, f"/testplan/{plan.id}/addTests", HttpMethod.POST, list(test_ids))


def add_tests_to_set(test_set: IssueRef, test_ids: Iterable[str]) -> HttpCommand:
    return _command(
        test_set.key, f"/issuelinks/testset/{test_set.id}/tests", HttpMethod.POST, list(test_ids)
    )


def get_folders(context_key: str, project_id: str) -> HttpCommand:
    """Fetch the test repository folder tree of a project."""
    return _command(context_key, f"/test-repository?{urlencode({'projectId': project_id})}")


def get_load_test_run(execution_key: str, test_key: str) -> HttpCommand:
    query = urlencode({"testIssueKey": test_key, "testExecIssueKey": execution_key})
    return _command(execution_key, f"/load-test-run?{query}")


def get_plans_by_test(test: IssueRef) -> HttpCommand:
    return _command(test.key, f"/issuelinks/testPlan/{test.id}/tests?direction=inward")


def get_preconditions_by_test(test: IssueRef) -> HttpCommand:
    return _command(test.key, f"/issuelinks/test/{test.id}/preConditions")


def get_runs_by_execution(execution: IssueRef) -> HttpCommand:
    return _command(
        execution.key,
        f"/testruns?testExecIssueId={execution.id}",
        HttpMethod.POST,
        {"fields": ["status", "key"]},
    )


def get_sets_by_test(test: IssueRef) -> HttpCommand:
    return _command(test.key, f"/issuelinks/testset/{test.id}/tests?direction=inward")


def get_steps(test: IssueRef) -> HttpCommand:
    return _command(test.key, f"/test/{test.id}/steps?startAt=0&maxResults=1000")


def get_tests_by_plan(plan: IssueRef) -> HttpCommand:
    return _command(plan.key, f"/testplan/{plan.id}/tests", HttpMethod.POST, {"isFinal": True})


def get_tests_by_set(test_set: IssueRef) -> HttpCommand:
    return _command(test_set.key, f"/issuelinks/testset/{test_set.id}/tests")


def new_comment_on_test_run(execution: IssueRef, run_id: str, comment: str) -> HttpCommand:
    return _command(
        execution.key,
        f"/testRun/{run_id}/comment",
        HttpMethod.POST,
        RunCommentRequest(comment=comment),
    )


def new_test_repository_folder(
    context_key: str, project_id: str, name: str, parent_folder_id: str | None = None
) -> HttpCommand:
    payload = NewFolderRequest(
        projectId=project_id, name=name, parentFolderId=parent_folder_id or None
    )
    return _command(context_key, "/test-repository/folders", HttpMethod.POST, payload)


def new_test_step(test: IssueRef, action: str, result: str, index: int) -> HttpCommand:
    payload = TestStepRequest(action=action, result=result, index=index)
    return _command(test.key, f"/test/{test.id}/step", HttpMethod.POST, payload)


def remove_test_step(test: IssueRef, step_id: str, remove_from_jira: bool = False) -> HttpCommand:
    flag = "true" if remove_from_jira else "false"
    return _command(
        test.key, f"/test/{test.id}/step/{step_id}?removeFromJira={flag}", HttpMethod.DELETE
    )


def update_step_actual(execution: IssueRef, run_id: str, step_id: str, actual: str) -> HttpCommand:
    return _command(
        execution.key,
        f"/testRun/{run_id}/step/{step_id}/actualresult",
        HttpMethod.POST,
        StepActualRequest(actualResult=actual),
    )


def update_step_status(execution: IssueRef, run_id: str, step_id: str, status: str) -> HttpCommand:
    return _command(
        execution.key,
        f"/testRun/{run_id}/step/{step_id}/status",
        HttpMethod.POST,
        StepStatusRequest(status=status),
    )


def update_test_run_status(
    execution: IssueRef, project_id: str, run_id: str, status: str
) -> HttpCommand:
    return _command(
        execution.key,
        f"/testrun/{run_id}/status",
        HttpMethod.POST,
        TestRunStatusRequest(projectId=project_id, status=status),
    )

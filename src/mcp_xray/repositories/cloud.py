"""Composite test-management operations against Jira Cloud and Xray Cloud."""

import logging
from typing import Any

from ..commands.base import IssueRef
from ..commands.batching import for_each_parallel
from ..commands.retry import is_accepted
from ..exceptions import (
    JiraIssueNotCreatedError,
    JiraIssueNotFoundError,
    XrayTestCaseNotAppliedError,
    XrayTestRepositoryFolderNotCreatedError,
    XrayTestRepositoryFolderNotFoundError,
    XrayTestStepNotCreatedError,
)
from ..jira import JiraConfig, JiraFetcher
from ..logging_config import log_operation
from ..models.jira import NewIssueRequest
from ..models.xray import (
    FolderAssignment,
    FolderReference,
    IssueReference,
    NewIssue,
    PartialFailure,
    TestCase,
    TestPlan,
)
from ..utils.documents import status_code_of
from ..xray import XrayConfig, XrayFetcher, build_invoker
from .protocols import XrayRepository

logger = logging.getLogger("mcp-xray.repositories")

TEST_ISSUE_TYPE = "Test"
TEST_PLAN_ISSUE_TYPE = "Test Plan"
ISSUE_TYPE_CONTEXT_ENTRY = "IssueType"

TEST_STEPS_FAILED_MESSAGE = (
    "Xray test was created, but an error occurred while creating test steps."
)
TEST_STEPS_NOT_UPDATED_MESSAGE = (
    "Xray test was updated, but an error occurred while creating test steps."
)
TEST_STEPS_NOT_REMOVED_MESSAGE = (
    "Xray test was not updated, because an error occurred while removing its test steps."
)
TEST_PLAN_FAILED_MESSAGE = (
    "Xray test plan was created, but an error occurred while adding test cases."
)
ADD_TESTS_TO_PLAN_FAILED_MESSAGE = "Failed to add test cases to the Xray Test Plan."
ADD_TESTS_TO_FOLDER_FAILED_MESSAGE = (
    "Failed to move test cases to the Xray test repository folder."
)


def root_message(error: BaseException) -> str:
    """Message of the innermost exception of an exception chain."""
    while error.__cause__ is not None:
        error = error.__cause__
    return str(error)


def _issue_ids(issues: list[dict[str, Any]]) -> list[str]:
    ids: list[str] = []
    for issue in issues:
        issue_id = str(issue.get("id") or "").strip()
        if issue_id and issue_id not in ids:
            ids.append(issue_id)
    return ids


class XrayCloudRepository(XrayRepository):
    """Xray Cloud implementation of the composite operations.

    Issue creation and each step creation run under the configured retry
    policy; steps are created concurrently under the parallelism cap, each
    carrying its own index.
    """

    def __init__(self, xray: XrayFetcher | None = None) -> None:
        self.xray = xray or XrayFetcher()
        self.jira: JiraFetcher = self.xray.jira
        self.config: XrayConfig = self.xray.config

    @classmethod
    def from_env(cls) -> "XrayCloudRepository":
        """Build the repository and its clients from environment variables.

        Raises:
            ValueError: If required environment variables are missing or invalid
        """
        jira_config = JiraConfig.from_env()
        xray_config = XrayConfig.from_env()
        invoker = build_invoker(jira_config, xray_config)
        jira = JiraFetcher(config=jira_config, invoker=invoker)
        return cls(XrayFetcher(jira=jira, config=xray_config))

    # Reads

    def get_test(self, id_or_key: str) -> dict[str, Any] | None:
        return self.xray.get_test_case(id_or_key)

    def resolve_folder_path(self, id_or_key: str, path: str | None) -> str:
        return self.xray.resolve_folder_path(id_or_key, path)

    # Tests

    def new_test(self, project: str, test_case: TestCase) -> dict[str, Any]:
        with log_operation(logger, "new_test", project=project):
            try:
                reference = self._new_issue(project, TEST_ISSUE_TYPE, test_case)
            except JiraIssueNotCreatedError as e:
                logger.error(f"Test was not created in {project}: {e}")
                return e.response

            try:
                self._new_test_steps(IssueRef(reference.id, reference.key), test_case)
            except Exception as e:  # noqa: BLE001 - reported as a partial failure
                logger.error(f"Steps of {reference.key} were not created: {e}")
                return PartialFailure(
                    data=reference.to_api_dict(),
                    error=root_message(e),
                    message=TEST_STEPS_FAILED_MESSAGE,
                ).to_api_dict()

            logger.info(f"Created test {reference.key} with {len(test_case.steps)} step(s)")
            return reference.to_api_dict()

    def update_test(self, key: str, test_case: TestCase) -> dict[str, Any]:
        with log_operation(logger, "update_test", key=key):
            test = self.xray.get_test_case(key)
            if not test or not test.get("id"):
                raise JiraIssueNotFoundError(f"Xray test {key} was not found.")

            ref = IssueRef(str(test["id"]), str(test.get("key") or key))
            step_ids = [
                str(step["id"])
                for step in test.get("steps") or []
                if isinstance(step, dict) and step.get("id")
            ]

            # No rollback: a failure below leaves the test with fewer steps
            responses = for_each_parallel(
                step_ids,
                lambda step_id: self.xray.remove_test_step(ref, step_id),
                self.jira.max_workers,
            )
            reference = IssueReference(
                id=ref.id, key=ref.key, link=self.jira.config.browse_link(ref.key)
            )

            # Steps are recreated only once every old step is gone
            not_removed = sum(1 for response in responses if not is_accepted(response))
            if not_removed:
                error = f"{not_removed} of {len(step_ids)} step(s) of {ref.key} were not removed"
                logger.error(error)
                return PartialFailure(
                    data=reference.to_api_dict(),
                    error=error,
                    message=TEST_STEPS_NOT_REMOVED_MESSAGE,
                ).to_api_dict()

            try:
                self._new_test_steps(ref, test_case)
            except Exception as e:  # noqa: BLE001 - reported as a partial failure
                logger.error(f"Steps of {ref.key} were not recreated: {e}")
                return PartialFailure(
                    data=reference.to_api_dict(),
                    error=root_message(e),
                    message=TEST_STEPS_NOT_UPDATED_MESSAGE,
                ).to_api_dict()

            return reference.to_api_dict()

    # Test plans

    def new_test_plan(self, project: str, test_plan: TestPlan) -> dict[str, Any]:
        with log_operation(logger, "new_test_plan", project=project):
            try:
                reference = self._new_issue(project, TEST_PLAN_ISSUE_TYPE, test_plan)
            except JiraIssueNotCreatedError as e:
                logger.error(f"Test plan was not created in {project}: {e}")
                return e.response

            if not (test_plan.jql or "").strip():
                return reference.to_api_dict()

            try:
                self._add_tests(reference.id, test_plan.jql)
            except Exception as e:  # noqa: BLE001 - reported as a partial failure
                logger.error(f"Tests were not added to {reference.key}: {e}")
                return PartialFailure(
                    data=reference.to_api_dict(),
                    error=root_message(e),
                    message=TEST_PLAN_FAILED_MESSAGE,
                ).to_api_dict()

            return reference.to_api_dict()

    def add_tests_to_plan(self, id_or_key: str, jql: str) -> Any:
        with log_operation(logger, "add_tests_to_plan", plan=id_or_key):
            try:
                return self._add_tests(id_or_key, jql)
            except Exception as e:  # noqa: BLE001 - reported as an error object
                logger.error(f"Tests were not added to {id_or_key}: {e}")
                return {"error": root_message(e), "message": ADD_TESTS_TO_PLAN_FAILED_MESSAGE}

    # Test repository

    def add_tests_to_folder(self, id_or_key: str, path: str, jql: str) -> dict[str, Any]:
        with log_operation(logger, "add_tests_to_folder", project=id_or_key, path=path):
            folder_id = self.xray.resolve_folder_path(id_or_key, path)
            if not folder_id:
                raise XrayTestRepositoryFolderNotFoundError(
                    f"Xray test repository folder not found at path {path}."
                )

            test_ids = _issue_ids(self.jira.get_issues_by_jql(jql, "key"))
            response = self.xray.add_tests_to_folder(id_or_key, folder_id, test_ids)
            if not is_accepted(response):
                logger.error(f"Tests were not moved to folder '{path}' of {id_or_key}: {response}")
                return PartialFailure(
                    data=FolderAssignment(
                        added=0,
                        folderId=folder_id,
                        path=path,
                        skipped=len(test_ids),
                        data=response,
                    ).to_api_dict(),
                    error=f"remote call failed with status {status_code_of(response)}",
                    message=ADD_TESTS_TO_FOLDER_FAILED_MESSAGE,
                ).to_api_dict()

            return FolderAssignment(
                added=len(test_ids), folderId=folder_id, path=path, data=response
            ).to_api_dict()

    def new_test_repository_folder(
        self, id_or_key: str, name: str, path: str | None
    ) -> dict[str, Any]:
        with log_operation(logger, "new_test_repository_folder", project=id_or_key, name=name):
            parent_path = (path or "").strip().strip("/")
            parent_id = self.xray.resolve_folder_path(id_or_key, parent_path)
            if parent_path and not parent_id:
                raise XrayTestRepositoryFolderNotFoundError(
                    f"Xray test repository folder not found at path {path}."
                )

            output_path = f"/{parent_path}/{name}" if parent_path else f"/{name}"
            response = self.xray.new_test_repository_folder(id_or_key, name, parent_id or None)
            result = response.get("result") if isinstance(response, dict) else None
            folder_id = result.get("folderId") if isinstance(result, dict) else None
            if not folder_id:
                raise XrayTestRepositoryFolderNotCreatedError(
                    "Xray test repository folder was not created successfully "
                    f"at path {output_path}."
                )
            return FolderReference(id=str(folder_id), path=output_path).to_api_dict()

    # Steps shared by the operations above

    def _new_issue(self, project: str, issue_type: str, issue: NewIssue) -> IssueReference:
        """Create an issue under the retry policy.

        Raises:
            JiraIssueNotCreatedError: If the last response carries no id and key;
                the response is kept on the exception
        """
        request = self._new_issue_request(project, issue_type, issue)
        outcome = self.config.retry_policy.invoke(lambda: self.jira.new_issue(request))
        response = outcome.value
        if response is None:
            response = {"error": outcome.describe_failure()}
        issue_id = response.get("id") if isinstance(response, dict) else None
        key = response.get("key") if isinstance(response, dict) else None
        if not issue_id or not key or issue_id == "-1":
            raise JiraIssueNotCreatedError(
                "Jira issue was not created successfully. "
                "The response did not contain an issue id or key.",
                response=response,
            )
        return IssueReference(
            id=str(issue_id), key=str(key), link=self.jira.config.browse_link(str(key))
        )

    def _new_issue_request(
        self, project: str, issue_type: str, issue: NewIssue
    ) -> NewIssueRequest:
        requested_type = issue.context_value(ISSUE_TYPE_CONTEXT_ENTRY)
        request = NewIssueRequest.build(
            project,
            str(requested_type) if requested_type else issue_type,
            issue.summary,
            issue.description,
        )
        if not self.config.resolve_custom_fields:
            return request

        for custom_field in issue.custom_fields:
            field_id = self.jira.get_custom_field(project, custom_field.name)
            if not field_id:
                logger.debug(f"Custom field '{custom_field.name}' is not defined in {project}")
                continue
            request.set_field(field_id, custom_field.value)
        return request

    def _new_test_steps(self, test: IssueRef, test_case: TestCase) -> None:
        """Create every step of a test concurrently, each under the retry policy.

        Raises:
            XrayTestStepNotCreatedError: If a step was not created after all attempts
        """

        def _create(indexed: tuple[int, Any]) -> None:
            index, step = indexed
            outcome = self.config.retry_policy.invoke(
                lambda: self.xray.new_test_step(test, step.action, step.result, index)
            )
            if not outcome.succeeded:
                raise XrayTestStepNotCreatedError(
                    f"Xray test step was not created successfully for test {test.key} "
                    f"at index {index}: {outcome.describe_failure()}"
                ) from outcome.error

        for_each_parallel(list(enumerate(test_case.steps)), _create, self.jira.max_workers)

    def _add_tests(self, plan_id_or_key: str, jql: str) -> Any:
        test_ids = _issue_ids(self.jira.get_issues_by_jql(jql, "key"))
        plan = self.xray.get_issue_ref(plan_id_or_key)
        if plan is None:
            raise JiraIssueNotFoundError(f"Xray test plan {plan_id_or_key} was not found.")

        outcome = self.xray.add_tests_to_plan(plan, test_ids)
        if not outcome.succeeded:
            raise XrayTestCaseNotAppliedError(
                "Failed to apply one or more test cases to the Xray Test Plan: "
                f"{outcome.describe_failure()}"
            ) from outcome.error
        return outcome.value

"""Module for Xray repository protocol definitions."""

from abc import abstractmethod
from typing import Any, Protocol, runtime_checkable

from ..models.xray import TestCase, TestPlan


@runtime_checkable
class XrayRepository(Protocol):
    """Protocol defining the composite test-management operations.

    Every operation returns a JSON-shaped value: the intended payload, a
    partial-failure object ``{"data", "error", "message"}``, or the raw
    remote response when nothing could be done.
    """

    @abstractmethod
    def add_tests_to_folder(self, id_or_key: str, path: str, jql: str) -> dict[str, Any]:
        """
        Move the tests matching a JQL query into a test repository folder.

        Args:
            id_or_key: The project id or key, or the key of an issue in the project
            path: Folder path, e.g. 'Regression/Login'
            jql: JQL selecting the tests

        Returns:
            ``{"added", "folderId", "link", "path", "skipped", "data"}``, or
            ``{"data", "error", "message"}`` when Xray rejected the move

        Raises:
            XrayTestRepositoryFolderNotFoundError: If the path does not resolve
        """

    @abstractmethod
    def add_tests_to_plan(self, id_or_key: str, jql: str) -> Any:
        """
        Add the tests matching a JQL query to a test plan.

        Returns:
            Xray's response, or ``{"error", "message"}`` when the tests could not be added
        """

    @abstractmethod
    def get_test(self, id_or_key: str) -> dict[str, Any] | None:
        """Get a test issue with its steps."""

    @abstractmethod
    def new_test(self, project: str, test_case: TestCase) -> dict[str, Any]:
        """
        Create a test and its steps.

        Returns:
            ``{"id", "key", "link"}``; a partial failure when steps could not
            be created; the raw response when the issue was not created
        """

    @abstractmethod
    def new_test_plan(self, project: str, test_plan: TestPlan) -> dict[str, Any]:
        """
        Create a test plan, filled with the tests matching its JQL when set.

        Returns:
            ``{"id", "key", "link"}``; a partial failure when tests could not
            be added; the raw response when the issue was not created
        """

    @abstractmethod
    def new_test_repository_folder(
        self, id_or_key: str, name: str, path: str | None
    ) -> dict[str, Any]:
        """
        Create a folder below ``path`` (the repository root when empty).

        Returns:
            ``{"id", "path"}``

        Raises:
            XrayTestRepositoryFolderNotFoundError: If the parent path does not resolve
            XrayTestRepositoryFolderNotCreatedError: If Xray returned no folder id
        """

    @abstractmethod
    def resolve_folder_path(self, id_or_key: str, path: str | None) -> str:
        """Return the folder id at ``path``, or "" when it does not exist."""

    @abstractmethod
    def update_test(self, key: str, test_case: TestCase) -> dict[str, Any]:
        """
        Replace every step of an existing test.

        Existing steps are deleted, then the new ones are created. The update
        is not transactional. When a step could not be deleted no step is
        created.

        Returns:
            ``{"id", "key", "link"}``, or a partial failure when steps could
            not be deleted or created
        """

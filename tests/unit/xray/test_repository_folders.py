"""Tests for the Xray test repository folder operations."""

import pytest

from mcp_xray.commands.base import IssueRef
from mcp_xray.xray.repository import RepositoryScope, find_folder
from tests.utils.factories import XrayDataFactory

PROJECT = {"id": "10000", "key": "DEMO"}


class TestFindFolder:
    @pytest.mark.parametrize(
        "path, expected",
        [
            (None, "root"),
            ("", "root"),
            ("/", "root"),
            ("Regression", "f-regression"),
            ("/regression/LOGIN/", "f-login"),
            ("Regression//Login", "f-login"),
            (" Smoke ", "f-smoke"),
            ("Regression/Missing", ""),
            ("Smoke/Login", ""),
        ],
    )
    def test_paths(self, path, expected):
        assert find_folder(XrayDataFactory.folder_tree(), path) == expected


class TestRepositoryMixin:
    """Tests for RepositoryMixin."""

    @pytest.fixture
    def demo_project(self, mock_jira):
        """DEMO exists and its first issue is DEMO-7."""
        mock_jira.get_project.return_value = PROJECT
        mock_jira.get_issues_by_jql.return_value = [{"id": "20007", "key": "DEMO-7"}]
        return mock_jira

    def test_get_project_ref(self, xray_fetcher, mock_jira):
        mock_jira.get_project.return_value = PROJECT

        assert xray_fetcher.get_project_ref("demo") == IssueRef("10000", "DEMO")

    def test_get_project_ref_missing(self, xray_fetcher, mock_jira):
        mock_jira.get_project.return_value = {"code": 404, "reason": "", "body": "", "id": "-1"}

        assert xray_fetcher.get_project_ref("NOPE") is None

    def test_scope_of_project_key_uses_an_issue_of_the_project(
        self, xray_fetcher, demo_project
    ):
        scope = xray_fetcher.get_repository_scope("DEMO")

        assert scope == RepositoryScope(IssueRef("10000", "DEMO"), "DEMO-7")
        demo_project.get_issues_by_jql.assert_called_once_with(
            'project = "DEMO"', "key", limit=1
        )

    def test_scope_of_issue_key_uses_the_issue(self, xray_fetcher, demo_project):
        demo_project.get_issue.return_value = {
            "id": "20003",
            "key": "DEMO-3",
            "fields": {"project": {"id": "10000", "key": "DEMO"}},
        }

        scope = xray_fetcher.get_repository_scope("demo-3")

        assert scope == RepositoryScope(IssueRef("10000", "DEMO"), "DEMO-3")
        demo_project.get_issue.assert_called_once_with("demo-3", "project")
        demo_project.get_project.assert_called_once_with("DEMO")
        demo_project.get_issues_by_jql.assert_not_called()

    def test_scope_of_missing_issue(self, xray_fetcher, mock_jira):
        mock_jira.get_issue.return_value = {"code": 404, "reason": "", "body": "", "id": "-1"}

        assert xray_fetcher.get_repository_scope("DEMO-404") is None
        mock_jira.get_project.assert_not_called()

    def test_project_without_issues_sends_nothing(self, xray_fetcher, mock_jira, xray_invoker):
        mock_jira.get_project.return_value = PROJECT

        assert xray_fetcher.get_repository_scope("DEMO") is None
        assert xray_fetcher.get_test_repository("DEMO") == {}
        assert xray_fetcher.new_test_repository_folder("DEMO", "Checkout") == {}
        xray_invoker.send_json.assert_not_called()

    def test_get_test_repository(self, xray_fetcher, demo_project, xray_invoker):
        xray_invoker.send_json.return_value = XrayDataFactory.folder_tree()

        assert xray_fetcher.get_test_repository("DEMO")["folderId"] == "root"
        command = xray_invoker.send_json.call_args.args[0]
        assert command.route == "/api/internal/test-repository?projectId=10000"
        assert command.context_key == "DEMO-7"

    def test_get_test_repository_unavailable(self, xray_fetcher, demo_project, xray_invoker):
        xray_invoker.send_json.return_value = {"code": 401, "reason": "", "body": "", "id": "-1"}

        assert xray_fetcher.get_test_repository("DEMO") == {}
        assert xray_fetcher.resolve_folder_path("DEMO", "Regression") == ""

    def test_resolve_folder_path(self, xray_fetcher, demo_project, xray_invoker):
        xray_invoker.send_json.return_value = XrayDataFactory.folder_tree()

        assert xray_fetcher.resolve_folder_path("DEMO", "Regression/Login") == "f-login"

    def test_new_test_repository_folder(self, xray_fetcher, demo_project, xray_invoker):
        xray_invoker.send_json.return_value = {"result": {"folderId": "f-new"}}

        result = xray_fetcher.new_test_repository_folder("DEMO", "Checkout", "f-regression")

        assert result == {"result": {"folderId": "f-new"}}
        command = xray_invoker.send_json.call_args.args[0]
        assert command.route == "/api/internal/test-repository/folders"
        assert command.context_key == "DEMO-7"
        assert command.data.parent_folder_id == "f-regression"

    def test_new_folder_in_missing_project(self, xray_fetcher, mock_jira, xray_invoker):
        mock_jira.get_project.return_value = {}

        assert xray_fetcher.new_test_repository_folder("NOPE", "Checkout") == {}
        xray_invoker.send_json.assert_not_called()

    def test_add_tests_to_folder(self, xray_fetcher, demo_project, xray_invoker):
        xray_invoker.send_json.return_value = {"moved": 2}

        assert xray_fetcher.add_tests_to_folder("DEMO", "f-login", ["20001", "20002"]) == {
            "moved": 2
        }
        command = xray_invoker.send_json.call_args.args[0]
        assert command.route == "/api/internal/test-repository/move-tests"
        assert command.context_key == "DEMO-7"
        assert command.data.test_ids == ["20001", "20002"]

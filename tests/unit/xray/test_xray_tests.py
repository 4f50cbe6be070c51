"""Tests for the Xray test operations (tests, steps and their memberships)."""

from mcp_xray.commands.base import XRAY_CONTEXT_HEADER, HttpMethod, IssueRef
from tests.utils.factories import JiraIssueFactory, XrayDataFactory

TEST = IssueRef("20001", "DEMO-1")


def _routes(xray_invoker):
    return [c.args[0].route for c in xray_invoker.send_json.call_args_list]


class TestGetTestCases:
    def test_get_test_case_merges_steps(self, xray_fetcher, mock_jira, xray_invoker):
        mock_jira.get_issues.return_value = [JiraIssueFactory.create("DEMO-1", "20001")]
        xray_invoker.send_json.return_value = {
            "steps": [XrayDataFactory.step("s-1", 0), XrayDataFactory.step("s-2", 1)]
        }

        test = xray_fetcher.get_test_case("DEMO-1")

        assert test["key"] == "DEMO-1"
        assert test["fields"]["summary"] == "Login works"
        assert [s["id"] for s in test["steps"]] == ["s-1", "s-2"]
        command = xray_invoker.send_json.call_args.args[0]
        assert command.route == "/api/internal/test/20001/steps?startAt=0&maxResults=1000"
        assert command.headers[XRAY_CONTEXT_HEADER] == "DEMO-1"

    def test_get_test_case_missing(self, xray_fetcher, mock_jira, xray_invoker):
        assert xray_fetcher.get_test_case("DEMO-404") is None
        xray_invoker.send_json.assert_not_called()

    def test_steps_default_to_empty(self, xray_fetcher, mock_jira, xray_invoker):
        mock_jira.get_issues.return_value = [JiraIssueFactory.create("DEMO-1", "20001")]
        xray_invoker.send_json.return_value = {"code": 401, "reason": "", "body": "", "id": "-1"}

        assert xray_fetcher.get_test_case("DEMO-1")["steps"] == []

    def test_get_test_cases(self, xray_fetcher, mock_jira, xray_invoker):
        mock_jira.get_issues.return_value = [
            JiraIssueFactory.create("DEMO-1", "20001"),
            JiraIssueFactory.create("DEMO-2", "20002"),
        ]
        xray_invoker.send_json.return_value = {"steps": []}

        tests = xray_fetcher.get_test_cases("DEMO-1", "DEMO-2")

        assert sorted(t["key"] for t in tests) == ["DEMO-1", "DEMO-2"]
        mock_jira.get_issues.assert_called_once_with("DEMO-1", "DEMO-2")


class TestMemberships:
    def test_get_tests_by_sets_returns_tests(self, xray_fetcher, mock_jira, xray_invoker):
        mock_jira.get_issues_by_jql.return_value = [
            {"id": "30001", "key": "DEMO-5"},
            {"id": "30002", "key": "DEMO-6"},
        ]
        xray_invoker.send_many.return_value = [
            [{"id": "20001"}, {"id": "20002"}],
            [{"id": "20002"}],
        ]
        mock_jira.get_issues.return_value = [JiraIssueFactory.create("DEMO-1", "20001")]
        xray_invoker.send_json.return_value = {"steps": []}

        tests = xray_fetcher.get_tests_by_sets("DEMO-5", "DEMO-6")

        assert [t["key"] for t in tests] == ["DEMO-1"]
        mock_jira.get_issues_by_jql.assert_called_once_with("key in (DEMO-5,DEMO-6)", "key")
        commands = xray_invoker.send_many.call_args.args[0]
        assert [c.route for c in commands] == [
            "/api/internal/issuelinks/testset/30001/tests",
            "/api/internal/issuelinks/testset/30002/tests",
        ]
        mock_jira.get_issues.assert_called_once_with("20001", "20002")

    def test_get_tests_by_plans(self, xray_fetcher, mock_jira, xray_invoker):
        mock_jira.get_issues_by_jql.return_value = [{"id": "30003", "key": "DEMO-7"}]
        xray_invoker.send_many.return_value = [[{"issueId": "20003"}, {"issueId": ""}]]

        xray_fetcher.get_tests_by_plans("DEMO-7")

        command = xray_invoker.send_many.call_args.args[0][0]
        assert command.route == "/api/internal/testplan/30003/tests"
        assert command.method == HttpMethod.POST
        mock_jira.get_issues.assert_called_once_with("20003")

    def test_get_tests_by_executions(self, xray_fetcher, mock_jira, xray_invoker):
        mock_jira.get_issue.return_value = {"id": "20009", "key": "DEMO-9"}
        xray_invoker.send_json.return_value = [
            {"testIssueId": "20001", "status": "PASS"},
            {"testIssueId": "20002", "status": "FAIL"},
        ]

        xray_fetcher.get_tests_by_executions("DEMO-9")

        assert "/api/internal/testruns?testExecIssueId=20009" in _routes(xray_invoker)
        mock_jira.get_issues.assert_called_once_with("20001", "20002")

    def test_empty_membership_queries(self, xray_fetcher, mock_jira):
        assert xray_fetcher.get_tests_by_sets() == []
        assert xray_fetcher.get_tests_by_plans() == []
        mock_jira.get_issues_by_jql.assert_not_called()

    def test_links_of_a_test(self, xray_fetcher, xray_invoker):
        xray_invoker.send_json.return_value = [{"id": "30001"}, {"name": "no id"}]

        assert xray_fetcher.get_sets_by_test(TEST) == ["30001"]
        assert xray_fetcher.get_plans_by_test(TEST) == ["30001"]
        assert xray_fetcher.get_preconditions_by_test(TEST) == ["30001"]
        assert _routes(xray_invoker) == [
            "/api/internal/issuelinks/testset/20001/tests?direction=inward",
            "/api/internal/issuelinks/testPlan/20001/tests?direction=inward",
            "/api/internal/issuelinks/test/20001/preConditions",
        ]

    def test_links_when_xray_fails(self, xray_fetcher, xray_invoker):
        xray_invoker.send_json.return_value = {"code": 500, "reason": "", "body": "", "id": "-1"}

        assert xray_fetcher.get_sets_by_test(TEST) == []


class TestSteps:
    def test_new_test_step(self, xray_fetcher, xray_invoker):
        xray_invoker.send_json.return_value = {"id": "s-9"}

        assert xray_fetcher.new_test_step(TEST, "click", "done", 3) == {"id": "s-9"}

        command = xray_invoker.send_json.call_args.args[0]
        assert command.route == "/api/internal/test/20001/step"
        assert command.data.index == 3
        assert command.data.result == "done"

    def test_remove_test_step(self, xray_fetcher, xray_invoker):
        xray_fetcher.remove_test_step(TEST, "s-1")

        command = xray_invoker.send_json.call_args.args[0]
        assert command.method == HttpMethod.DELETE
        assert command.route == "/api/internal/test/20001/step/s-1?removeFromJira=false"

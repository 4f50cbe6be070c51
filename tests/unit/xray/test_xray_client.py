"""Tests for the Xray base client."""

from unittest.mock import patch

from mcp_xray.commands.base import IssueRef
from mcp_xray.commands.xray import get_steps
from mcp_xray.xray import XrayFetcher, build_invoker
from tests.utils.factories import ConfigFactory


class TestXrayClient:
    """Tests for XrayClient."""

    def test_shares_the_jira_invoker(self, xray_fetcher, mock_jira, xray_invoker):
        assert xray_fetcher.jira is mock_jira
        assert xray_fetcher.invoker is xray_invoker
        assert xray_fetcher.max_workers == 4

    def test_get_issue_ref(self, xray_fetcher, mock_jira):
        mock_jira.get_issue.return_value = {"id": "20001", "key": "DEMO-1"}

        assert xray_fetcher.get_issue_ref("demo-1") == IssueRef("20001", "DEMO-1")
        mock_jira.get_issue.assert_called_once_with("demo-1", "key")

    def test_get_issue_ref_missing(self, xray_fetcher, mock_jira):
        mock_jira.get_issue.return_value = {"code": 404, "reason": "", "body": "", "id": "-1"}

        assert xray_fetcher.get_issue_ref("DEMO-404") is None

    def test_send_repeatable_retries_failures(self, mock_jira, xray_invoker):
        fetcher = XrayFetcher(jira=mock_jira, config=ConfigFactory.xray(max_attempts=3))
        xray_invoker.send_json.side_effect = [
            {"code": 503, "reason": "", "body": "", "id": "-1"},
            {"steps": []},
        ]

        outcome = fetcher._send_repeatable(get_steps(IssueRef("20001", "DEMO-1")))

        assert outcome.succeeded
        assert outcome.attempts == 2
        assert xray_invoker.send_json.call_count == 2

    def test_build_invoker_shares_one_session(self, jira_config):
        invoker = build_invoker(jira_config, ConfigFactory.xray(base_url="https://xray.test"))

        assert invoker.xray_base_url == "https://xray.test"
        assert invoker.session_resolver.session is invoker.session

    def test_clients_from_environment(self, jira_config, xray_config):
        with (
            patch("mcp_xray.xray.client.JiraConfig.from_env", return_value=jira_config),
            patch("mcp_xray.xray.client.XrayConfig.from_env", return_value=xray_config),
        ):
            fetcher = XrayFetcher()

        assert fetcher.config is xray_config
        assert fetcher.jira.config is jira_config

"""Base client module for Xray Cloud internal API interactions."""

import logging
from typing import Any

import requests

from ..commands.base import HttpCommand, IssueRef
from ..commands.invoker import CommandInvoker
from ..commands.retry import RetryOutcome
from ..commands.session import XraySessionResolver
from ..jira import JiraConfig, JiraFetcher
from .config import XrayConfig

# Configure logging
logger = logging.getLogger("mcp-xray.xray")


def build_invoker(jira_config: JiraConfig, xray_config: XrayConfig) -> CommandInvoker:
    """Create an invoker whose session and token cache serve both APIs."""
    session = requests.Session()
    resolver = XraySessionResolver(
        jira_config, session=session, refresh_margin=xray_config.token_refresh_margin
    )
    return CommandInvoker(
        jira_config, xray_config.base_url, session=session, session_resolver=resolver
    )


class XrayClient:
    """Base client for Xray Cloud interactions.

    Xray commands travel through the Jira client's invoker, which trades the
    issue context of each command for an Xray session token.
    """

    def __init__(
        self, jira: JiraFetcher | None = None, config: XrayConfig | None = None
    ) -> None:
        """Initialize the Xray client.

        Args:
            jira: Jira facade to reuse. If None, one is created from environment
                variables, with an invoker addressing ``config.base_url``.
            config: Xray configuration. If None, will be loaded from environment variables.

        Raises:
            ValueError: If configuration is missing or invalid.
        """
        self.config = config or XrayConfig.from_env()
        if jira is None:
            jira = JiraFetcher(invoker=build_invoker(JiraConfig.from_env(), self.config))
        self.jira = jira

    @property
    def invoker(self) -> CommandInvoker:
        return self.jira.invoker

    @property
    def max_workers(self) -> int:
        return self.jira.max_workers

    def _send(self, command: HttpCommand, default: Any = None) -> Any:
        return self.invoker.send_json(command, default)

    def _send_repeatable(self, command: HttpCommand) -> RetryOutcome[Any]:
        """Send a command under the configured fixed-delay retry policy."""
        return self.config.retry_policy.invoke(lambda: self._send(command))

    def get_issue_ref(self, id_or_key: str) -> IssueRef | None:
        """Resolve an issue id or key to both its id and key, or None when it does not exist."""
        issue = self.jira.get_issue(id_or_key, "key")
        issue_id = issue.get("id") if isinstance(issue, dict) else None
        key = issue.get("key") if isinstance(issue, dict) else None
        if not issue_id or not key or issue_id == "-1":
            logger.warning(f"Issue {id_or_key} was not found")
            return None
        return IssueRef(str(issue_id), str(key))

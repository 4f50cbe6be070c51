"""Base client module for Jira API interactions."""

import logging
from typing import Any

from ..commands.base import HttpCommand
from ..commands.invoker import CommandInvoker
from ..exceptions import MCPXrayAuthenticationError
from ..utils.documents import status_code_of
from .config import JiraConfig

# Configure logging
logger = logging.getLogger("mcp-xray.jira")

# Jira answers updates, comments and transitions with an empty 204
NO_CONTENT = 204


class JiraClient:
    """Base client for Jira API interactions."""

    def __init__(
        self, config: JiraConfig | None = None, invoker: CommandInvoker | None = None
    ) -> None:
        """Initialize the Jira client with a given configuration.

        Args:
            config: Jira configuration object. If None, will be loaded from environment variables.
            invoker: Command invoker to share with other clients. If None, one is created.

        Raises:
            ValueError: If configuration is missing or invalid.
        """
        self.config = config or (invoker.config if invoker else JiraConfig.from_env())
        self.invoker = invoker or CommandInvoker(self.config)

    @property
    def api_version(self) -> str:
        return self.config.api_version

    @property
    def max_workers(self) -> int:
        return self.config.max_workers

    def _send(self, command: HttpCommand, default: Any = None) -> Any:
        return self.invoker.send_json(command, default)

    @staticmethod
    def _is_no_content(response: Any) -> bool:
        return status_code_of(response) == NO_CONTENT

    @staticmethod
    def _raise_for_auth(response: Any, action: str) -> None:
        """Raise MCPXrayAuthenticationError for 401/403 failure envelopes."""
        code = status_code_of(response)
        if code in (401, 403):
            logger.error(f"Authentication failed while trying to {action} (status {code})")
            raise MCPXrayAuthenticationError(
                f"Authentication failed for Jira API while trying to {action} ({code}). "
                "Check JIRA_USERNAME and JIRA_API_TOKEN."
            )

"""Configuration module for Jira API interactions."""

import os
from dataclasses import dataclass

from ..utils.env import getenv_first, getenv_int, is_env_ssl_verify

DEFAULT_API_VERSION = "latest"
DEFAULT_BUCKET_SIZE = 4
DEFAULT_TIMEOUT = 75


@dataclass(frozen=True)
class JiraConfig:
    """Jira API configuration.

    This is the authentication context shared by every command a client
    issues: base address, principal, secret and optional project scope.
    """

    url: str  # Base URL for Jira
    username: str  # Email of the account (Cloud)
    api_token: str  # API token (Cloud)
    project: str | None = None  # Project scope for the Xray session query
    api_version: str = DEFAULT_API_VERSION  # /rest/api/{api_version}
    bucket_size: int = DEFAULT_BUCKET_SIZE  # Maximum degree of parallelism
    ssl_verify: bool = True  # Whether to verify SSL certificates
    timeout: int = DEFAULT_TIMEOUT  # Seconds per HTTP call

    @property
    def max_workers(self) -> int:
        """Degree of parallelism for fan-out work; a bucket size of 0 means 1."""
        return max(self.bucket_size, 1)

    @property
    def api_route(self) -> str:
        """Route prefix of the versioned REST API."""
        return f"/rest/api/{self.api_version}"

    def browse_link(self, key: str) -> str:
        """Return the browser link of an issue."""
        return f"{self.url}/browse/{key}"

    @classmethod
    def from_env(cls) -> "JiraConfig":
        """Create configuration from environment variables.

        Returns:
            JiraConfig with values from environment variables

        Raises:
            ValueError: If required environment variables are missing or invalid
        """
        url = getenv_first("JIRA_URL", "JIRA_BASE_URL")
        username = getenv_first("JIRA_USERNAME")
        api_token = getenv_first("JIRA_API_TOKEN", "JIRA_API_KEY")

        if not url:
            raise ValueError("Missing required JIRA_URL environment variable")
        if not username or not api_token:
            raise ValueError(
                "JIRA_USERNAME and JIRA_API_TOKEN environment variables are required"
            )

        bucket_size = getenv_int("JIRA_BUCKET_SIZE", DEFAULT_BUCKET_SIZE)
        if bucket_size < 0:
            raise ValueError("JIRA_BUCKET_SIZE must not be negative")

        return cls(
            url=url.rstrip("/"),
            username=username,
            api_token=api_token,
            project=getenv_first("JIRA_PROJECT"),
            api_version=os.getenv("JIRA_API_VERSION") or DEFAULT_API_VERSION,
            bucket_size=bucket_size,
            ssl_verify=is_env_ssl_verify("JIRA_SSL_VERIFY"),
            timeout=getenv_int("JIRA_TIMEOUT", DEFAULT_TIMEOUT),
        )

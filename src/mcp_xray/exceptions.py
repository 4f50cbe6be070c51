from typing import Any


class MCPXrayError(Exception):
    """Base exception for MCP-Xray errors."""

    pass


class MCPXrayAuthenticationError(MCPXrayError):
    """Raised when Jira or Xray authentication fails (401/403)."""

    pass


class JiraIssueNotCreatedError(MCPXrayError):
    """Raised when a create-issue response does not carry an issue id and key.

    The raw response is kept on the exception so callers can surface it.
    """

    def __init__(self, message: str, response: Any = None) -> None:
        super().__init__(message)
        self.response = response


class XrayTestStepNotCreatedError(MCPXrayError):
    """Raised when a test step could not be created after all retry attempts."""

    pass


class XrayTestCaseNotAppliedError(MCPXrayError):
    """Raised when test cases could not be assigned to a test plan."""

    pass


class XrayTestRepositoryFolderNotFoundError(MCPXrayError):
    """Raised when a test repository folder path does not resolve."""

    pass


class XrayTestRepositoryFolderNotCreatedError(MCPXrayError):
    """Raised when the folder creation response carries no folder id."""

    pass


class JiraIssueNotFoundError(MCPXrayError):
    """Raised when an issue an operation depends on does not exist."""

    pass

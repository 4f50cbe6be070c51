"""Module for Jira issue operations."""

import json
import logging
from datetime import datetime
from typing import Any

from ..commands import jira as jira_commands
from ..commands.invoker import GENERIC_RESPONSE_ID
from ..utils.documents import status_code_of
from .client import JiraClient

logger = logging.getLogger("mcp-xray.jira")

MIN_WORKLOG_SECONDS = 60


def default_comment() -> str:
    return f"{datetime.now():%Y-%m-%d %H:%M:%S}: Automatically created by MCP Xray."


class IssuesMixin(JiraClient):
    """Mixin for Jira issue operations."""

    def get_issue(self, id_or_key: str, *fields: str) -> dict[str, Any]:
        """
        Get a Jira issue by id or key.

        Args:
            id_or_key: The issue id or key (e.g. 'PROJ-123')
            *fields: Optional field names to restrict the response to

        Returns:
            The raw issue document, or a failure envelope when Jira rejects the call
        """
        return self._send(
            jira_commands.get_issue(id_or_key, fields, api_version=self.api_version)
        )

    def get_project(self, id_or_key: str) -> dict[str, Any]:
        """Get a Jira project (id, key, name, ...) by id or key."""
        return self._send(
            jira_commands.get_project(id_or_key, api_version=self.api_version)
        )

    def new_issue(self, data: Any, comment: str | None = None) -> dict[str, Any]:
        """
        Create a Jira issue.

        Args:
            data: The create-issue payload (model, dict or raw JSON string)
            comment: Optional comment added to the created issue

        Returns:
            Jira's response (``id``, ``key``, ``self`` on success), ``{}`` when
            the response carried nothing usable, or the failure envelope
        """
        return self._new_or_update("", data, comment)

    def update_issue(
        self, id_or_key: str, data: Any, comment: str | None = None
    ) -> dict[str, Any]:
        """
        Update the fields of a Jira issue.

        Returns:
            ``{"key": id_or_key}`` when Jira accepted the update, otherwise the
            failure envelope
        """
        return self._new_or_update(id_or_key, data, comment)

    def new_comment(self, id_or_key: str, comment: str) -> bool:
        """Add a comment to an issue. Returns True when Jira answered 204."""
        response = self._send(
            jira_commands.add_comment(id_or_key, comment, api_version=self.api_version)
        )
        return self._is_no_content(response)

    def new_issue_link(
        self, link_type: str, inward: str, outward: str, comment: str | None = None
    ) -> dict[str, Any]:
        """
        Link two issues.

        Args:
            link_type: Link type name (e.g. 'Blocks', 'Relates')
            inward: Key of the inward issue
            outward: Key of the outward issue
            comment: Comment attached to the link; a timestamped default when omitted
        """
        command = jira_commands.new_issue_link(
            link_type,
            inward,
            outward,
            comment if comment is not None else default_comment(),
            api_version=self.api_version,
        )
        return self._send(command)

    def new_worklog(self, issue_id: str, seconds: float) -> str:
        """
        Log work on an issue.

        Jira rejects worklogs shorter than one minute, so the logged time is
        raised to 60 seconds when needed; the comment records both values.

        Returns:
            The id of the created worklog, or "" when Jira did not create one
        """
        applied = max(int(round(seconds)), MIN_WORKLOG_SECONDS)
        comment = (
            "Worklog recorded by MCP Xray.\n"
            f"Actual runtime: {int(round(seconds)):,} seconds\n"
            f"Applied worklog: {applied:,} seconds (minimum unit enforced)"
        )
        response = self._send(
            jira_commands.new_worklog(issue_id, applied, comment, api_version=self.api_version)
        )
        worklog_id = response.get("id") if isinstance(response, dict) else None
        if not worklog_id or worklog_id == GENERIC_RESPONSE_ID:
            logger.warning(f"Worklog was not created for issue {issue_id}: {response}")
            return ""
        return str(worklog_id)

    def _new_or_update(self, id_or_key: str, data: Any, comment: str | None) -> dict[str, Any]:
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                # Not JSON: sent as it is
                pass

        if id_or_key:
            command = jira_commands.update_issue(id_or_key, data, api_version=self.api_version)
        else:
            command = jira_commands.new_issue(data, api_version=self.api_version)
        response = self._send(command)

        code = status_code_of(response)
        is_envelope = isinstance(response, dict) and response.get("id") == GENERIC_RESPONSE_ID
        if is_envelope and code is not None and code < 400:
            # Accepted without content (update)
            response = {"key": id_or_key} if id_or_key else {}
        elif is_envelope:
            logger.warning(
                f"Jira rejected the {'update of ' + id_or_key if id_or_key else 'new issue'}"
                f" with status {code}"
            )
            return response
        elif code is None and not response:
            return {}

        key = response.get("key") if isinstance(response, dict) else None
        if comment and key:
            self.new_comment(key, comment)
        return response

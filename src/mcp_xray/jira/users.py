"""Module for Jira user operations."""

import logging
from typing import Any

from ..commands import jira as jira_commands
from .client import JiraClient

logger = logging.getLogger("mcp-xray.jira")


class UsersMixin(JiraClient):
    """Mixin for Jira user operations."""

    def get_user(self, key: str, name_or_email: str) -> dict[str, Any] | None:
        """
        Find a user assignable to an issue by email address or display name.

        Args:
            key: The issue key the user must be assignable to
            name_or_email: Email address or display name, case-insensitive

        Returns:
            The user document, or None when no assignable user matches
        """
        users = self._send(
            jira_commands.get_assignable_users(key, api_version=self.api_version), []
        )
        if not isinstance(users, list):
            logger.warning(f"Could not list assignable users for {key}")
            return None

        wanted = name_or_email.lower()
        for user in users:
            if not isinstance(user, dict):
                continue
            email = str(user.get("emailAddress") or "").lower()
            display_name = str(user.get("displayName") or "").lower()
            if wanted in (email, display_name):
                return user
        return None

    def set_assignee(self, key: str, name_or_email: str | None = None) -> bool:
        """
        Assign an issue to a user.

        Uses the ``accountId`` of the user when Jira reports one, and falls
        back to ``fields.assignee.name`` otherwise.

        Args:
            key: The issue key
            name_or_email: The user to assign; the configured username when omitted

        Returns:
            True when the assignment was sent and accepted
        """
        user = self.get_user(key, name_or_email or self.config.username)
        if user is None:
            logger.warning(f"No assignable user '{name_or_email}' found for {key}")
            return False

        if user.get("accountId"):
            command = jira_commands.set_assignee(
                key, user["accountId"], api_version=self.api_version
            )
        else:
            payload = {"fields": {"assignee": {"name": user.get("displayName")}}}
            command = jira_commands.update_issue(key, payload, api_version=self.api_version)

        return self._is_no_content(self._send(command))

"""Module for Jira attachment operations."""

import logging
from pathlib import Path
from typing import Any

from ..commands import jira as jira_commands
from ..commands.batching import for_each_parallel
from .client import JiraClient

logger = logging.getLogger("mcp-xray.jira")


class AttachmentsMixin(JiraClient):
    """Mixin for Jira attachment operations."""

    def add_attachments(self, id_or_key: str, *files: str | Path) -> Any:
        """
        Upload files to an issue.

        Args:
            id_or_key: The issue id or key
            *files: Paths of the files to upload

        Returns:
            Jira's response: the list of created attachments on success

        Raises:
            OSError: If a file cannot be read
        """
        if not files:
            return []
        response = self.invoker.add_attachments(id_or_key, files)
        logger.info(
            f"Added attachments to issue {id_or_key}: {', '.join(str(f) for f in files)}"
        )
        return response

    def remove_attachments(self, id_or_key: str) -> int:
        """
        Delete every attachment of an issue, concurrently.

        Returns:
            The number of delete requests sent
        """
        issue = self._send(
            jira_commands.get_issue(id_or_key, ("attachment",), api_version=self.api_version)
        )
        attachments = ((issue or {}).get("fields") or {}).get("attachment") or []
        commands = [
            jira_commands.remove_attachment(str(a["id"]), api_version=self.api_version)
            for a in attachments
            if isinstance(a, dict) and a.get("id")
        ]
        self.invoker.send_many(commands)
        logger.debug(f"Removed {len(commands)} attachment(s) from {id_or_key}")
        return len(commands)

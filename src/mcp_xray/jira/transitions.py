"""Module for Jira transition operations."""

import logging
from typing import Any

from ..commands import jira as jira_commands
from .client import JiraClient
from .issues import default_comment

logger = logging.getLogger("mcp-xray.jira")


class TransitionsMixin(JiraClient):
    """Mixin for Jira transition operations."""

    def get_transitions(self, id_or_key: str) -> list[dict[str, str]]:
        """
        Get the available status transitions for an issue.

        Args:
            id_or_key: The issue id or key (e.g. 'PROJ-123')

        Returns:
            List of transitions as ``{"id", "name", "to"}``; ``to`` is the target
            status name, or 'N/A' when Jira does not report one
        """
        response = self._send(
            jira_commands.get_transitions(id_or_key, api_version=self.api_version)
        )
        transitions = response.get("transitions") if isinstance(response, dict) else None

        result: list[dict[str, str]] = []
        for transition in transitions or []:
            if not isinstance(transition, dict):
                continue
            to_status = (transition.get("to") or {}).get("name")
            result.append(
                {
                    "id": str(transition.get("id", "")),
                    "name": str(transition.get("name", "")),
                    "to": to_status or "N/A",
                }
            )
        return result

    def new_transition(
        self,
        id_or_key: str,
        transition: str,
        resolution: str | None = None,
        comment: str | None = None,
    ) -> bool:
        """
        Move an issue to the status named ``transition``.

        Args:
            id_or_key: The issue id or key
            transition: Target status name, case-insensitive
            resolution: Optional resolution name set by the transition
            comment: Comment added by the transition; a timestamped default when omitted

        Returns:
            True when Jira applied the transition (204), False when no
            transition leads to that status or Jira rejected it
        """
        transitions = self.get_transitions(id_or_key)
        match: dict[str, Any] | None = next(
            (t for t in transitions if t["to"].lower() == transition.lower()), None
        )
        if match is None:
            logger.info(
                f"No transition of {id_or_key} leads to '{transition}'; "
                f"available: {[t['to'] for t in transitions]}"
            )
            return False

        command = jira_commands.new_transition(
            id_or_key,
            match["id"],
            resolution,
            comment if comment is not None else default_comment(),
            api_version=self.api_version,
        )
        return self._is_no_content(self._send(command))

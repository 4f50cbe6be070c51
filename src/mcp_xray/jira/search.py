"""Module for Jira search operations."""

import logging
from typing import Any

from ..commands import jira as jira_commands
from ..commands.batching import FIND_BY_KEY_BUCKET_SIZE, flat_map_parallel, key_query, split
from ..commands.jira import SEARCH_PAGE_SIZE
from ..utils.documents import status_code_of
from .client import JiraClient

logger = logging.getLogger("mcp-xray.jira")


class SearchMixin(JiraClient):
    """Mixin for Jira search operations."""

    def get_issues_by_jql(
        self, jql: str, *fields: str, limit: int | None = None
    ) -> list[dict[str, Any]]:
        """
        Search issues with JQL, following ``nextPageToken`` until the last page.

        Args:
            jql: JQL query string
            *fields: Fields to return (all fields when omitted)
            limit: Stop after this many issues

        Returns:
            The matching issue documents; an empty list when Jira rejects the query

        Raises:
            MCPXrayAuthenticationError: Authentication failed (401/403 status)
        """
        issues: list[dict[str, Any]] = []
        next_page_token: str | None = None
        page_size = min(limit or SEARCH_PAGE_SIZE, SEARCH_PAGE_SIZE)

        while True:
            command = jira_commands.find_issues(
                jql,
                fields or ("*all",),
                next_page_token=next_page_token,
                max_results=page_size,
                api_version=self.api_version,
            )
            response = self._send(command)
            self._raise_for_auth(response, "search issues")

            if not isinstance(response, dict):
                break
            if status_code_of(response) is not None and "issues" not in response:
                logger.warning(
                    f"Search with JQL '{jql}' failed with status {status_code_of(response)}"
                )
                break

            page = response.get("issues")
            issues.extend(i for i in page or [] if isinstance(i, dict))
            if limit and len(issues) >= limit:
                del issues[limit:]
                break

            next_page_token = response.get("nextPageToken")
            if not next_page_token or response.get("isLast") or not page:
                break

        logger.debug(f"JQL '{jql}' returned {len(issues)} issue(s)")
        return issues

    def get_issues(self, *ids_or_keys: str) -> list[dict[str, Any]]:
        """
        Fetch issues by id or key in buckets of ten, querying buckets concurrently.

        The result order is not related to the order of the arguments.
        """
        ids_or_keys = tuple(i for i in ids_or_keys if i)
        if not ids_or_keys:
            return []
        logger.debug(f"Fetching issues {', '.join(ids_or_keys)}")
        buckets = split(ids_or_keys, FIND_BY_KEY_BUCKET_SIZE)
        return flat_map_parallel(
            buckets,
            lambda bucket: self.get_issues_by_jql(key_query(bucket)),
            self.max_workers,
        )

    def get_issue_type(self, id_or_key: str) -> str | None:
        """Return the issue type name of an issue, or None when the issue does not exist."""
        issues = self.get_issues_by_jql(key_query([id_or_key]), "issuetype")
        if not issues:
            return None
        issue_type = (issues[0].get("fields") or {}).get("issuetype") or {}
        return issue_type.get("name")

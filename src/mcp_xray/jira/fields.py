"""Module for Jira field operations.

Custom field ids and allowed values differ between Jira sites, so they are
resolved from the project's creation metadata, which is fetched once per
project and kept for the lifetime of the process.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any

from ..commands import jira as jira_commands
from ..utils.documents import find_first, iter_objects, status_code_of
from .client import JiraClient

logger = logging.getLogger("mcp-xray.jira")


class ProjectMetaCache:
    """Thread-safe map of project key (case-insensitive) to creation metadata."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, dict[str, Any]] = {}

    @staticmethod
    def _normalize(project: str) -> str:
        return (project or "").strip().upper()

    def get(self, project: str) -> dict[str, Any] | None:
        with self._lock:
            return self._entries.get(self._normalize(project))

    def get_or_add(
        self, project: str, factory: Callable[[str], dict[str, Any] | None]
    ) -> dict[str, Any] | None:
        """Return the cached metadata, loading it with ``factory`` on first access.

        Concurrent first accesses may each call the factory; the first value
        stored wins. A factory returning None stores nothing.
        """
        key = self._normalize(project)
        with self._lock:
            if key in self._entries:
                return self._entries[key]

        value = factory(project)
        if value is None:
            return None

        with self._lock:
            return self._entries.setdefault(key, value)

    def clear(self, project: str | None = None) -> None:
        """Forget one project's metadata, or all of it."""
        with self._lock:
            if project is None:
                self._entries.clear()
            else:
                self._entries.pop(self._normalize(project), None)

    def __contains__(self, project: object) -> bool:
        with self._lock:
            return isinstance(project, str) and self._normalize(project) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# Shared by every client of the process
PROJECT_META_CACHE = ProjectMetaCache()


def _matches(candidate: Any, value: str) -> bool:
    return isinstance(candidate, (str, int)) and str(candidate).lower() == value.lower()


class FieldsMixin(JiraClient):
    """Mixin for Jira field operations."""

    project_meta_cache: ProjectMetaCache = PROJECT_META_CACHE

    def get_project_meta(self, project: str) -> dict[str, Any]:
        """
        Get the creation metadata of a project (issue types and their fields).

        Args:
            project: The project key

        Returns:
            The createmeta document, or {} when it could not be loaded

        Raises:
            MCPXrayAuthenticationError: Authentication failed (401/403 status)
        """
        if not project:
            return {}
        return self.project_meta_cache.get_or_add(project, self._load_project_meta) or {}

    def _load_project_meta(self, project: str) -> dict[str, Any] | None:
        response = self._send(
            jira_commands.get_create_meta(project, api_version=self.api_version)
        )
        self._raise_for_auth(response, f"read metadata of project {project}")
        if status_code_of(response) is not None or "projects" not in response:
            logger.warning(f"Could not load creation metadata for project {project}")
            return None
        logger.debug(f"Cached creation metadata for project {project}")
        return response

    def get_custom_field(self, project: str, schema: str) -> str:
        """
        Resolve a custom field schema name to its field id.

        Args:
            project: The project key
            schema: Custom field schema, e.g.
                'com.atlassian.jira.plugin.system.customfieldtypes:select'

        Returns:
            The field id ('customfield_10010'), or "" when the schema is unknown
        """
        if not project or not schema:
            return ""
        for node in iter_objects(self.get_project_meta(project)):
            if _matches(node.get("custom"), schema) and node.get("customId") is not None:
                return f"customfield_{node['customId']}"
        return ""

    def get_field_definition(
        self, project: str, issue_type: str, field: str | None = None
    ) -> dict[str, Any]:
        """
        Get the metadata of an issue type, or of one of its fields.

        Args:
            project: The project key
            issue_type: Issue type name, case-insensitive
            field: Field id or display name; the whole issue type when omitted

        Returns:
            The definition, or {} when the issue type or field is unknown
        """
        projects = self.get_project_meta(project).get("projects") or []
        issue_types = (projects[0].get("issuetypes") or []) if projects else []
        definition = next(
            (i for i in issue_types if _matches(i.get("name"), issue_type or "")), None
        )
        if definition is None:
            return {}
        if not field:
            return definition

        fields = definition.get("fields") or {}
        if field in fields:
            return fields[field]
        return next(
            (
                value
                for value in fields.values()
                if isinstance(value, dict) and _matches(value.get("name"), field)
            ),
            {},
        )

    def get_allowed_value_id(
        self, project: str, issue_type: str, field: str, value: str
    ) -> str:
        """Return the id of the allowed value whose name or value matches, or ""."""
        definition = self.get_field_definition(project, issue_type, field)
        allowed_values = find_first(definition, "allowedValues") or []
        for allowed in allowed_values:
            if not isinstance(allowed, dict):
                continue
            if _matches(allowed.get("name"), value) or _matches(allowed.get("value"), value):
                return str(allowed.get("id", ""))
        return ""

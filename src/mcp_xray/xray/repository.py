"""Module for Xray test repository (folder tree) operations.

Xray session tokens are issued per issue, so folder commands of a project run
in the session of one of its issues: the issue named by the caller, or any
issue of the project found with a one-result search.
"""

import logging
from collections.abc import Iterable
from typing import Any, NamedTuple

from ..commands import xray as xray_commands
from ..commands.base import IssueRef
from ..commands.session import is_issue_key
from .client import XrayClient

logger = logging.getLogger("mcp-xray.xray")

PATH_SEPARATOR = "/"


def folder_id(folder: dict[str, Any]) -> str:
    return str(folder.get("folderId") or folder.get("id") or "")


def child_folders(folder: dict[str, Any]) -> list[dict[str, Any]]:
    children = folder.get("folders")
    if children is None:
        children = folder.get("children")
    return [c for c in children or [] if isinstance(c, dict)]


def find_folder(tree: dict[str, Any], path: str | None) -> str:
    """
    Walk a folder tree along a '/'-separated path.

    Segments are matched case-insensitively against folder names; empty
    segments are ignored.

    Returns:
        The folder id; the root id for an empty path; "" when the path does
        not exist
    """
    node = tree
    for segment in (s.strip() for s in (path or "").split(PATH_SEPARATOR)):
        if not segment:
            continue
        node = next(
            (
                child
                for child in child_folders(node)
                if str(child.get("name", "")).lower() == segment.lower()
            ),
            None,
        )
        if node is None:
            return ""
    return folder_id(node)


class RepositoryScope(NamedTuple):
    """A project and the issue key whose session authorizes its folder commands."""

    project: IssueRef
    context_key: str


class RepositoryMixin(XrayClient):
    """Mixin for Xray test repository operations."""

    def get_project_ref(self, project: str) -> IssueRef | None:
        """Resolve a project id or key to its id and key, or None when it does not exist."""
        response = self.jira.get_project(project)
        project_id = response.get("id") if isinstance(response, dict) else None
        key = response.get("key") if isinstance(response, dict) else None
        if not project_id or not key or project_id == "-1":
            logger.warning(f"Project {project} was not found")
            return None
        return IssueRef(str(project_id), str(key))

    def get_repository_scope(self, id_or_key: str) -> RepositoryScope | None:
        """
        Resolve the project of a test repository and the issue key to run its commands under.

        Args:
            id_or_key: A project id or key, or the key of an issue in the project

        Returns:
            The scope, or None when the project does not exist or has no issues
        """
        context_key = ""
        project = id_or_key
        if is_issue_key(id_or_key):
            issue = self.jira.get_issue(id_or_key, "project")
            fields = issue.get("fields") if isinstance(issue, dict) else None
            project_field = (fields or {}).get("project") or {}
            project = str(project_field.get("key") or project_field.get("id") or "")
            if not project:
                logger.warning(f"Issue {id_or_key} was not found")
                return None
            context_key = str(issue.get("key") or id_or_key).upper()

        ref = self.get_project_ref(project)
        if ref is None:
            return None

        if not context_key:
            issues = self.jira.get_issues_by_jql(f'project = "{ref.key}"', "key", limit=1)
            context_key = next((str(i["key"]) for i in issues if i.get("key")), "")
        if not context_key:
            logger.warning(
                f"Project {ref.key} has no issues, so no Xray session can be opened for it"
            )
            return None
        return RepositoryScope(ref, context_key)

    def get_test_repository(self, project: str) -> dict[str, Any]:
        """
        Get the folder tree of a project's test repository.

        Args:
            project: The project id or key, or the key of an issue in the project

        Returns:
            The root folder with its nested ``folders``, or {} when unavailable
        """
        scope = self.get_repository_scope(project)
        if scope is None:
            return {}
        ref = scope.project
        tree = self._send(xray_commands.get_folders(scope.context_key, ref.id))
        if not isinstance(tree, dict) or tree.get("id") == "-1":
            logger.warning(f"Test repository of project {ref.key} is unavailable: {tree}")
            return {}
        return tree

    def resolve_folder_path(self, project: str, path: str | None) -> str:
        """Return the id of the folder at ``path``, the root id for an empty path, or ""."""
        tree = self.get_test_repository(project)
        if not tree:
            return ""
        resolved = find_folder(tree, path)
        logger.debug(f"Folder path '{path}' of project {project} resolved to '{resolved}'")
        return resolved

    def new_test_repository_folder(
        self, project: str, name: str, parent_folder_id: str | None = None
    ) -> dict[str, Any]:
        """
        Create a folder in a project's test repository.

        Returns:
            Xray's response (``{"result": {"folderId": ...}}`` on success), or {}
            when the project does not exist
        """
        scope = self.get_repository_scope(project)
        if scope is None:
            return {}
        response = self._send(
            xray_commands.new_test_repository_folder(
                scope.context_key, scope.project.id, name, parent_folder_id
            )
        )
        return response if isinstance(response, dict) else {}

    def add_tests_to_folder(
        self, project: str, folder: str, test_ids: Iterable[str]
    ) -> Any:
        """Move tests into a test repository folder."""
        scope = self.get_repository_scope(project)
        if scope is None:
            return {}
        return self._send(
            xray_commands.add_tests_to_folder(
                scope.context_key, scope.project.id, folder, list(test_ids)
            )
        )

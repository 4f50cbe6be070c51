"""Jira API module for mcp_xray.

This module provides the Jira facade used by the Xray operations.
"""

from .attachments import AttachmentsMixin
from .client import JiraClient
from .config import JiraConfig
from .fields import PROJECT_META_CACHE, FieldsMixin, ProjectMetaCache
from .issues import IssuesMixin
from .search import SearchMixin
from .transitions import TransitionsMixin
from .users import UsersMixin


class JiraFetcher(
    IssuesMixin,
    SearchMixin,
    FieldsMixin,
    TransitionsMixin,
    UsersMixin,
    AttachmentsMixin,
):
    """
    The main Jira client class providing access to all Jira operations.

    This class inherits from multiple mixins that provide specific functionality:
    - IssuesMixin: Issue read, create, update, comment, link and worklog operations
    - SearchMixin: JQL and bucketed key search
    - FieldsMixin: Project metadata, custom field and allowed value resolution
    - TransitionsMixin: Status transitions
    - UsersMixin: Assignable users and assignment
    - AttachmentsMixin: Attachment upload and removal
    """

    pass


__all__ = [
    "JiraFetcher",
    "JiraConfig",
    "JiraClient",
    "PROJECT_META_CACHE",
    "ProjectMetaCache",
]

"""Command factories for the Jira REST API.

Every factory is pure: it only builds an ``HttpCommand``. Routes are
relative to the Jira base address and prefixed with ``/rest/api/{api_version}``.
"""

import time
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote, urlencode

from ..models.jira import (
    AssigneeRequest,
    CommentBody,
    IdRef,
    IssueLinkRequest,
    KeyRef,
    NameRef,
    TransitionRequest,
    WorklogRequest,
    adf_text,
    comment_update,
)
from .base import HttpCommand, HttpMethod

DEFAULT_API_VERSION = "latest"
SEARCH_PAGE_SIZE = 100
SESSION_TOKEN_ROUTE = "/rest/gira/1/?operation=issueViewInteractiveQuery"


def _api(api_version: str, path: str) -> str:
    return f"/rest/api/{api_version}{path}"


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def add_comment(
    id_or_key: str, comment: str, *, api_version: str = DEFAULT_API_VERSION
) -> HttpCommand:
    return HttpCommand(
        route=_api(api_version, f"/issue/{_segment(id_or_key)}"),
        method=HttpMethod.PUT,
        data={"update": comment_update(comment)},
    )


def find_issues(
    jql: str,
    fields: Iterable[str] = ("*all",),
    *,
    next_page_token: str | None = None,
    max_results: int = SEARCH_PAGE_SIZE,
    api_version: str = DEFAULT_API_VERSION,
) -> HttpCommand:
    data: dict[str, Any] = {
        "jql": jql,
        "fields": list(fields) or ["*all"],
        "maxResults": max_results,
    }
    if next_page_token:
        data["nextPageToken"] = next_page_token
    return HttpCommand(
        route=_api(api_version, "/search/jql"), method=HttpMethod.POST, data=data
    )


def get_assignable_users(key: str, *, api_version: str = DEFAULT_API_VERSION) -> HttpCommand:
    query = urlencode({"issueKey": key})
    return HttpCommand(route=_api(api_version, f"/user/assignable/search?{query}"))


def get_create_meta(project: str, *, api_version: str = DEFAULT_API_VERSION) -> HttpCommand:
    query = urlencode(
        {"projectKeys": project, "expand": "projects.issuetypes.fields"}
    )
    return HttpCommand(route=_api(api_version, f"/issue/createmeta?{query}"))


def get_issue(
    id_or_key: str, fields: Iterable[str] = (), *, api_version: str = DEFAULT_API_VERSION
) -> HttpCommand:
    route = _api(api_version, f"/issue/{_segment(id_or_key)}")
    fields = [f for f in fields if f]
    if fields:
        route += f"?fields={','.join(fields)}"
    return HttpCommand(route=route)


def get_project(project: str, *, api_version: str = DEFAULT_API_VERSION) -> HttpCommand:
    return HttpCommand(route=_api(api_version, f"/project/{_segment(project)}"))


def get_session_token(query: str) -> HttpCommand:
    """Post the issue-view interactive query whose answer embeds the Xray session token."""
    return HttpCommand(route=SESSION_TOKEN_ROUTE, method=HttpMethod.POST, data=query)


def get_transitions(id_or_key: str, *, api_version: str = DEFAULT_API_VERSION) -> HttpCommand:
    return HttpCommand(route=_api(api_version, f"/issue/{_segment(id_or_key)}/transitions"))


def new_issue(data: Any, *, api_version: str = DEFAULT_API_VERSION) -> HttpCommand:
    return HttpCommand(route=_api(api_version, "/issue"), method=HttpMethod.POST, data=data)


def new_issue_link(
    link_type: str,
    inward: str,
    outward: str,
    comment: str | None = None,
    *,
    api_version: str = DEFAULT_API_VERSION,
) -> HttpCommand:
    payload = IssueLinkRequest(
        type=NameRef(name=link_type),
        inwardIssue=KeyRef(key=inward),
        outwardIssue=KeyRef(key=outward),
        comment=CommentBody(body=comment) if comment else None,
    )
    return HttpCommand(route=_api(api_version, "/issueLink"), method=HttpMethod.POST, data=payload)


def new_transition(
    id_or_key: str,
    transition_id: str,
    resolution: str | None = None,
    comment: str | None = None,
    *,
    api_version: str = DEFAULT_API_VERSION,
) -> HttpCommand:
    payload = TransitionRequest(
        transition=IdRef(id=str(transition_id)),
        fields={"resolution": {"name": resolution}} if resolution else None,
        update=comment_update(comment) if comment else None,
    )
    return HttpCommand(
        route=_api(api_version, f"/issue/{_segment(id_or_key)}/transitions"),
        method=HttpMethod.POST,
        data=payload,
    )


def new_worklog(
    issue_id: str,
    time_spent_seconds: int,
    comment: str,
    *,
    started: datetime | None = None,
    api_version: str = DEFAULT_API_VERSION,
) -> HttpCommand:
    started = started or datetime.now(timezone.utc)
    payload = WorklogRequest(
        timeSpentSeconds=time_spent_seconds,
        # Jira expects "2024-01-31T10:00:00.000+0000"
        started=started.strftime("%Y-%m-%dT%H:%M:%S.000%z"),
        comment=adf_text(comment),
    )
    cache_buster = int(time.time() * 1000)
    return HttpCommand(
        route=_api(api_version, f"/issue/{_segment(issue_id)}/worklog?_r={cache_buster}"),
        method=HttpMethod.POST,
        data=payload,
    )


def remove_attachment(attachment_id: str, *, api_version: str = DEFAULT_API_VERSION) -> HttpCommand:
    return HttpCommand(
        route=_api(api_version, f"/attachment/{_segment(attachment_id)}"),
        method=HttpMethod.DELETE,
    )


def set_assignee(
    key: str, account_id: str, *, api_version: str = DEFAULT_API_VERSION
) -> HttpCommand:
    return HttpCommand(
        route=_api(api_version, f"/issue/{_segment(key)}/assignee"),
        method=HttpMethod.PUT,
        data=AssigneeRequest(accountId=account_id),
    )


def update_issue(
    id_or_key: str, data: Any, *, api_version: str = DEFAULT_API_VERSION
) -> HttpCommand:
    return HttpCommand(
        route=_api(api_version, f"/issue/{_segment(id_or_key)}"),
        method=HttpMethod.PUT,
        data=data,
    )

"""Request schemas for the Jira REST API."""

from typing import Any

from pydantic import ConfigDict, Field

from .base import ApiModel


class NameRef(ApiModel):
    name: str


class KeyRef(ApiModel):
    key: str


class IdRef(ApiModel):
    id: str


def comment_update(comment: str) -> dict[str, Any]:
    """Return the ``update`` block that adds one comment to an issue."""
    return {"comment": [{"add": {"body": comment}}]}


def adf_text(text: str) -> dict[str, Any]:
    """Wrap plain text lines into an Atlassian Document Format document."""
    content = [
        {"type": "paragraph", "content": [{"type": "text", "text": line}]}
        for line in text.splitlines()
        if line
    ]
    return {"type": "doc", "version": 1, "content": content}


class IssueFields(ApiModel):
    """The ``fields`` block of a create-issue request.

    Resolved custom fields (``customfield_10010`` and so on) are kept as
    extra attributes.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    summary: str = Field(min_length=1)
    description: str | None = None
    issue_type: NameRef = Field(alias="issuetype")
    project: KeyRef


class NewIssueRequest(ApiModel):
    fields: IssueFields

    @classmethod
    def build(
        cls, project: str, issue_type: str, summary: str, description: str | None
    ) -> "NewIssueRequest":
        return cls(
            fields=IssueFields(
                summary=summary,
                description=description,
                issuetype=NameRef(name=issue_type),
                project=KeyRef(key=project),
            )
        )

    def set_field(self, field_id: str, value: Any) -> None:
        setattr(self.fields, field_id, value)


class CommentBody(ApiModel):
    body: str


class IssueLinkRequest(ApiModel):
    link_type: NameRef = Field(alias="type")
    inward_issue: KeyRef = Field(alias="inwardIssue")
    outward_issue: KeyRef = Field(alias="outwardIssue")
    comment: CommentBody | None = None


class TransitionRequest(ApiModel):
    transition: IdRef
    fields: dict[str, Any] | None = None
    update: dict[str, Any] | None = None


class WorklogRequest(ApiModel):
    time_spent_seconds: int = Field(alias="timeSpentSeconds", ge=60)
    started: str
    comment: dict[str, Any]


class AssigneeRequest(ApiModel):
    account_id: str = Field(alias="accountId", min_length=1)

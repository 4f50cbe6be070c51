"""Data models for Xray test definitions, request payloads and results."""

from typing import Any

from pydantic import Field, field_validator

from .base import ApiModel


class CustomField(ApiModel):
    """A custom field addressed by its schema name (e.g. ``com.example:severity``)."""

    name: str = Field(description="Custom field schema to resolve against project metadata")
    value: Any = Field(default=None, description="Value stored in the resolved field")


class TestStep(ApiModel):
    """One step of a manual test."""

    __test__ = False

    action: str = Field(description="What the tester does")
    expected_results: list[str] = Field(
        default_factory=list,
        alias="expectedResults",
        description="Expected outcomes, stored joined by new lines",
    )

    @field_validator("expected_results", mode="before")
    @classmethod
    def _wrap_single_result(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @property
    def result(self) -> str:
        return "\n".join(self.expected_results)


class NewIssue(ApiModel):
    """Fields shared by every issue created through the repository."""

    summary: str = Field(default="", description="Issue summary")
    description: str = Field(default="", description="Issue description")
    custom_fields: list[CustomField] = Field(
        default_factory=list, alias="customFields", description="Custom fields to set"
    )
    context: dict[str, Any] = Field(
        default_factory=dict, description="Extra creation options, e.g. IssueType"
    )

    def context_value(self, name: str, default: Any = None) -> Any:
        """Look up a context entry by case-insensitive name."""
        for key, value in self.context.items():
            if key.lower() == name.lower():
                return value
        return default


class TestCase(NewIssue):
    """An Xray test with ordered manual steps."""

    __test__ = False

    steps: list[TestStep] = Field(default_factory=list, description="Ordered test steps")


class TestPlan(NewIssue):
    """An Xray test plan, optionally filled with the tests matching ``jql``."""

    __test__ = False

    jql: str | None = Field(default=None, description="JQL selecting tests to add")


class TestStepRequest(ApiModel):
    __test__ = False

    action: str
    result: str = ""
    index: int = Field(ge=0)


class NewFolderRequest(ApiModel):
    project_id: str = Field(alias="projectId", min_length=1)
    name: str = Field(min_length=1)
    parent_folder_id: str | None = Field(default=None, alias="parentFolderId")

    @field_validator("name")
    @classmethod
    def _reject_separator(cls, value: str) -> str:
        if "/" in value:
            raise ValueError("Folder name must not contain '/'")
        return value


class MoveTestsRequest(ApiModel):
    project_id: str = Field(alias="projectId", min_length=1)
    folder_id: str = Field(alias="folderId", min_length=1)
    test_ids: list[str] = Field(alias="testIds")


class _StatusRequest(ApiModel):
    status: str = Field(min_length=1)

    @field_validator("status")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()


class TestRunStatusRequest(_StatusRequest):
    __test__ = False

    project_id: str = Field(alias="projectId")


class StepStatusRequest(_StatusRequest):
    pass


class StepActualRequest(ApiModel):
    actual_result: str = Field(alias="actualResult")


class RunCommentRequest(ApiModel):
    comment: str


class IssueReference(ApiModel):
    """Normalized success result of a composite operation."""

    id: str
    key: str
    link: str


class PartialFailure(ApiModel):
    """Result of a composite operation whose downstream step failed."""

    data: Any = None
    error: str
    message: str


class FolderReference(ApiModel):
    id: str
    path: str


class FolderAssignment(ApiModel):
    added: int
    folder_id: str = Field(alias="folderId")
    link: str = ""
    path: str
    skipped: int = 0
    data: Any = None

    def to_api_dict(self) -> dict[str, Any]:
        # data may legitimately be null
        return self.model_dump(by_alias=True)

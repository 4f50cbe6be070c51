"""
Pydantic models for Jira and Xray payloads.

Request schemas validate payloads at construction; result models give the
composite operations their documented shapes.
"""

from .base import ApiModel
from .jira import IssueLinkRequest, NewIssueRequest, TransitionRequest, WorklogRequest
from .xray import (
    CustomField,
    FolderAssignment,
    FolderReference,
    IssueReference,
    NewIssue,
    PartialFailure,
    TestCase,
    TestPlan,
    TestStep,
)

__all__ = [
    "ApiModel",
    "CustomField",
    "FolderAssignment",
    "FolderReference",
    "IssueLinkRequest",
    "IssueReference",
    "NewIssue",
    "NewIssueRequest",
    "PartialFailure",
    "TestCase",
    "TestPlan",
    "TestStep",
    "TransitionRequest",
    "WorklogRequest",
]

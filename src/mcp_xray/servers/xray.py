"""Xray FastMCP server instance and tool definitions."""

import json
import logging
from typing import Annotated, Any

from fastmcp import Context, FastMCP
from pydantic import Field
from requests.exceptions import HTTPError

from mcp_xray.exceptions import MCPXrayAuthenticationError
from mcp_xray.models import TestCase, TestPlan
from mcp_xray.servers.dependencies import get_xray_repository
from mcp_xray.utils.decorators import check_write_access

logger = logging.getLogger(__name__)

xray_mcp = FastMCP(
    name="Xray MCP Service",
    instructions=(
        "Provides tools for managing Xray Cloud tests, test plans and test "
        "repository folders on top of Jira."
    ),
)


def _error_response(
    tool_name: str, e: Exception, action: str, **identifiers: Any
) -> dict[str, Any]:
    """Log a failed tool call and build its error object."""
    log_level = logging.ERROR
    if "not found" in str(e).lower():
        log_level = logging.WARNING
        error_message = str(e)
    elif isinstance(e, MCPXrayAuthenticationError):
        error_message = f"Authentication/Permission Error: {str(e)}"
    elif isinstance(e, OSError | HTTPError):
        error_message = f"Network or API Error: {str(e)}"
    else:
        error_message = f"An unexpected error occurred while {action}."
        logger.exception(f"Unexpected error in {tool_name}:")
    logger.log(log_level, f"{tool_name} failed for {identifiers}: {error_message}")
    return {"success": False, "error": str(e), **identifiers}


def _created(result: Any) -> bool:
    """True for an {id, key, link} result, False for an error or a raw response."""
    return isinstance(result, dict) and bool(result.get("key")) and "error" not in result


def _issue_fields(
    summary: str,
    description: str | None,
    custom_fields: list[dict[str, Any]] | None,
    context: dict[str, Any] | None,
) -> dict[str, Any]:
    return {
        "summary": summary,
        "description": description or "",
        "customFields": custom_fields or [],
        "context": context or {},
    }


@xray_mcp.tool(
    tags={"xray", "read"},
    annotations={"title": "Get Test", "readOnlyHint": True},
)
async def xray_get_test(
    ctx: Context,
    id_or_key: Annotated[str, Field(description="Test issue id or key (e.g., 'PROJ-42')")],
) -> str:
    """
    Get an Xray test with its manual steps.

    Args:
        ctx: The FastMCP context.
        id_or_key: Test issue id or key.

    Returns:
        JSON string representing the test issue merged with its steps.

    Raises:
        ValueError: If the Xray repository is not configured or available.
    """
    repository = await get_xray_repository(ctx)
    try:
        test = repository.get_test(id_or_key)
        if not test:
            raise ValueError(f"Xray test {id_or_key} was not found.")
        response_data = {"success": True, "test": test}
    except Exception as e:
        response_data = _error_response(
            "xray_get_test", e, "fetching the test", id_or_key=id_or_key
        )
    return json.dumps(response_data, indent=2, ensure_ascii=False)


@xray_mcp.tool(
    tags={"xray", "read"},
    annotations={"title": "Resolve Folder Path", "readOnlyHint": True},
)
async def xray_resolve_folder_path(
    ctx: Context,
    id_or_key: Annotated[
        str, Field(description="Project id or key, or the key of an issue in the project")
    ],
    path: Annotated[
        str | None,
        Field(description="Folder path, e.g. 'Regression/Login'. Empty for the root folder"),
    ] = None,
) -> str:
    """Resolve a test repository folder path to its folder id."""
    repository = await get_xray_repository(ctx)
    try:
        folder_id = repository.resolve_folder_path(id_or_key, path)
        if not folder_id:
            raise ValueError(f"Xray test repository folder not found at path {path}.")
        response_data = {"success": True, "folderId": folder_id, "path": path or "/"}
    except Exception as e:
        response_data = _error_response(
            "xray_resolve_folder_path",
            e,
            "resolving the folder path",
            id_or_key=id_or_key,
            path=path,
        )
    return json.dumps(response_data, indent=2, ensure_ascii=False)


@xray_mcp.tool(
    tags={"xray", "write"},
    annotations={"title": "Create Test", "readOnlyHint": False},
)
@check_write_access
async def xray_new_test(
    ctx: Context,
    project: Annotated[str, Field(description="Project key (e.g., 'PROJ')")],
    summary: Annotated[str, Field(description="Test summary")],
    description: Annotated[str | None, Field(description="Test description")] = None,
    steps: Annotated[
        list[dict[str, Any]] | None,
        Field(
            description=(
                "Ordered manual steps, each {'action': str, 'expectedResults': [str]}"
            )
        ),
    ] = None,
    custom_fields: Annotated[
        list[dict[str, Any]] | None,
        Field(
            description=(
                "Custom fields, each {'name': <field schema>, 'value': <value>}"
            )
        ),
    ] = None,
    context: Annotated[
        dict[str, Any] | None,
        Field(description="Extra creation options, e.g. {'IssueType': 'Test'}"),
    ] = None,
) -> str:
    """
    Create an Xray test and its manual steps.

    Args:
        ctx: The FastMCP context.
        project: Project key.
        summary: Test summary.
        description: Test description.
        steps: Ordered manual steps.
        custom_fields: Custom fields resolved against the project metadata.
        context: Extra creation options.

    Returns:
        JSON string with {id, key, link}, or {data, error, message} when the
        test was created but its steps were not.
    """
    repository = await get_xray_repository(ctx)
    try:
        test_case = TestCase.model_validate(
            {**_issue_fields(summary, description, custom_fields, context), "steps": steps or []}
        )
        result = repository.new_test(project, test_case)
        response_data = {"success": _created(result), "result": result}
    except Exception as e:
        response_data = _error_response(
            "xray_new_test", e, "creating the test", project=project
        )
    return json.dumps(response_data, indent=2, ensure_ascii=False)


@xray_mcp.tool(
    tags={"xray", "write"},
    annotations={"title": "Update Test Steps", "readOnlyHint": False},
)
@check_write_access
async def xray_update_test(
    ctx: Context,
    key: Annotated[str, Field(description="Test issue key (e.g., 'PROJ-42')")],
    steps: Annotated[
        list[dict[str, Any]],
        Field(
            description=(
                "Steps replacing the existing ones, each "
                "{'action': str, 'expectedResults': [str]}"
            )
        ),
    ],
) -> str:
    """
    Replace every manual step of an existing Xray test.

    Existing steps are removed before the new ones are created; the update
    is not transactional.
    """
    repository = await get_xray_repository(ctx)
    try:
        test_case = TestCase.model_validate({"steps": steps})
        result = repository.update_test(key, test_case)
        response_data = {"success": _created(result), "result": result}
    except Exception as e:
        response_data = _error_response("xray_update_test", e, "updating the test", key=key)
    return json.dumps(response_data, indent=2, ensure_ascii=False)


@xray_mcp.tool(
    tags={"xray", "write"},
    annotations={"title": "Create Test Plan", "readOnlyHint": False},
)
@check_write_access
async def xray_new_test_plan(
    ctx: Context,
    project: Annotated[str, Field(description="Project key (e.g., 'PROJ')")],
    summary: Annotated[str, Field(description="Test plan summary")],
    description: Annotated[str | None, Field(description="Test plan description")] = None,
    jql: Annotated[
        str | None,
        Field(description="Optional JQL selecting the tests to add to the plan"),
    ] = None,
    custom_fields: Annotated[
        list[dict[str, Any]] | None,
        Field(description="Custom fields, each {'name': <field schema>, 'value': <value>}"),
    ] = None,
    context: Annotated[
        dict[str, Any] | None,
        Field(description="Extra creation options, e.g. {'IssueType': 'Test Plan'}"),
    ] = None,
) -> str:
    """Create an Xray test plan and fill it with the tests matching the JQL."""
    repository = await get_xray_repository(ctx)
    try:
        test_plan = TestPlan.model_validate(
            {**_issue_fields(summary, description, custom_fields, context), "jql": jql}
        )
        result = repository.new_test_plan(project, test_plan)
        response_data = {"success": _created(result), "result": result}
    except Exception as e:
        response_data = _error_response(
            "xray_new_test_plan", e, "creating the test plan", project=project
        )
    return json.dumps(response_data, indent=2, ensure_ascii=False)


@xray_mcp.tool(
    tags={"xray", "write"},
    annotations={"title": "Add Tests to Test Plan", "readOnlyHint": False},
)
@check_write_access
async def xray_add_tests_to_plan(
    ctx: Context,
    id_or_key: Annotated[str, Field(description="Test plan issue id or key")],
    jql: Annotated[str, Field(description="JQL selecting the tests to add")],
) -> str:
    """Add the tests matching a JQL query to an Xray test plan."""
    repository = await get_xray_repository(ctx)
    try:
        result = repository.add_tests_to_plan(id_or_key, jql)
        failed = isinstance(result, dict) and "error" in result
        response_data = {"success": not failed, "result": result}
    except Exception as e:
        response_data = _error_response(
            "xray_add_tests_to_plan",
            e,
            "adding tests to the test plan",
            id_or_key=id_or_key,
        )
    return json.dumps(response_data, indent=2, ensure_ascii=False)


@xray_mcp.tool(
    tags={"xray", "write"},
    annotations={"title": "Add Tests to Folder", "readOnlyHint": False},
)
@check_write_access
async def xray_add_tests_to_folder(
    ctx: Context,
    id_or_key: Annotated[
        str, Field(description="Project id or key, or the key of an issue in the project")
    ],
    path: Annotated[str, Field(description="Folder path, e.g. 'Regression/Login'")],
    jql: Annotated[str, Field(description="JQL selecting the tests to move")],
) -> str:
    """Move the tests matching a JQL query into a test repository folder."""
    repository = await get_xray_repository(ctx)
    try:
        result = repository.add_tests_to_folder(id_or_key, path, jql)
        failed = isinstance(result, dict) and "error" in result
        response_data = {"success": not failed, "result": result}
    except Exception as e:
        response_data = _error_response(
            "xray_add_tests_to_folder",
            e,
            "moving tests to the folder",
            id_or_key=id_or_key,
            path=path,
        )
    return json.dumps(response_data, indent=2, ensure_ascii=False)


@xray_mcp.tool(
    tags={"xray", "write"},
    annotations={"title": "Create Test Repository Folder", "readOnlyHint": False},
)
@check_write_access
async def xray_new_test_repository_folder(
    ctx: Context,
    id_or_key: Annotated[
        str, Field(description="Project id or key, or the key of an issue in the project")
    ],
    name: Annotated[str, Field(description="Name of the new folder")],
    path: Annotated[
        str | None,
        Field(description="Parent folder path. Empty for the repository root"),
    ] = None,
) -> str:
    """Create a folder in a project's Xray test repository."""
    repository = await get_xray_repository(ctx)
    try:
        result = repository.new_test_repository_folder(id_or_key, name, path)
        response_data = {"success": True, "folder": result}
    except Exception as e:
        response_data = _error_response(
            "xray_new_test_repository_folder",
            e,
            "creating the folder",
            id_or_key=id_or_key,
            name=name,
            path=path,
        )
    return json.dumps(response_data, indent=2, ensure_ascii=False)

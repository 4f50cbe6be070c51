import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from fastmcp import Context

from mcp_xray.servers.context import app_context

logger = logging.getLogger("mcp-xray.utils.decorators")

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

TOOL_PREFIX = "xray_"


def check_write_access(func: F) -> F:
    """
    Reject a write tool when the server runs in read-only mode.

    The tool must be async and take `ctx: Context` as its first argument.
    The error names the action, e.g. "Cannot new test plan in read-only mode."
    """
    action = func.__name__.removeprefix(TOOL_PREFIX).replace("_", " ")

    @wraps(func)
    async def wrapper(ctx: Context, *args: Any, **kwargs: Any) -> Any:
        context = app_context(ctx)
        if context is not None and context.read_only:
            logger.warning(f"Rejected write tool '{func.__name__}' in read-only mode.")
            raise ValueError(f"Cannot {action} in read-only mode.")
        return await func(ctx, *args, **kwargs)

    return wrapper  # type: ignore

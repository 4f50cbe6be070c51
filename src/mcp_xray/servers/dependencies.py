"""Dependency provider for the Xray repository.

Provides get_xray_repository for use in tool functions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastmcp import Context

from mcp_xray.servers.context import app_context

if TYPE_CHECKING:
    from mcp_xray.repositories.protocols import XrayRepository

logger = logging.getLogger("mcp-xray.servers.dependencies")


async def get_xray_repository(ctx: Context) -> XrayRepository:
    """Returns the XrayRepository built by the server lifespan.

    Raises:
        ValueError: If Jira or Xray is not configured.
    """
    context = app_context(ctx)
    if context is not None and context.repository is not None:
        return context.repository
    logger.error("Xray repository could not be resolved.")
    raise ValueError(
        "Xray repository not available. Ensure JIRA_URL, JIRA_USERNAME and "
        "JIRA_API_TOKEN are configured."
    )

"""Main FastMCP server setup for the Xray integration."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Literal

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from mcp_xray.repositories import XrayCloudRepository
from mcp_xray.utils.io import is_read_only_mode

from .context import MainAppContext
from .xray import xray_mcp

logger = logging.getLogger("mcp-xray.server.main")

Transport = Literal["stdio", "sse", "streamable-http"]


async def health_check(request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok"})


@asynccontextmanager
async def main_lifespan(app: FastMCP[MainAppContext]) -> AsyncIterator[dict]:
    logger.info("Main Xray MCP server lifespan starting...")
    read_only = is_read_only_mode()

    repository: XrayCloudRepository | None = None
    try:
        repository = XrayCloudRepository.from_env()
        logger.info(f"Xray repository configured for {repository.jira.config.url}")
    except ValueError as e:
        logger.error(f"Failed to load Jira/Xray configuration: {e}")

    app_context = MainAppContext(repository=repository, read_only=read_only)
    logger.info(f"Read-only mode: {'ENABLED' if read_only else 'DISABLED'}")

    try:
        yield {"app_lifespan_context": app_context}
    except Exception as e:
        logger.error(f"Error during lifespan: {e}", exc_info=True)
        raise
    finally:
        logger.info("Main Xray MCP server lifespan shutting down...")
        if repository is not None:
            logger.debug("Closing the shared HTTP session...")
            repository.jira.invoker.session.close()
        logger.info("Main Xray MCP server lifespan shutdown complete.")


main_mcp = FastMCP(name="Xray MCP", lifespan=main_lifespan)
main_mcp.mount(xray_mcp)


@main_mcp.custom_route("/healthz", methods=["GET"], include_in_schema=False)
async def _health_check_route(request: Request) -> JSONResponse:
    return await health_check(request)


async def run_server(
    transport: Transport = "stdio", port: int = 8000, host: str = "0.0.0.0"  # noqa: S104
) -> None:
    """Run the Xray MCP server with the specified transport."""
    if transport == "stdio":
        await main_mcp.run_async(transport="stdio")
    else:
        logger.info(f"Listening on {host}:{port} ({transport})")
        await main_mcp.run_async(transport=transport, host=host, port=port)

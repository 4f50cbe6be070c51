import asyncio
import logging
import os

import click
from dotenv import load_dotenv

__version__ = "0.1.0"

from .logging_config import ContextualLogger, log_operation, setup_logger

# Loggers created by the submodules below carry operation context
logging.setLoggerClass(ContextualLogger)

logger = setup_logger()


@click.command()
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (can be used multiple times)",
)
@click.option(
    "--env-file", type=click.Path(exists=True, dir_okay=False), help="Path to .env file"
)
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default=lambda: os.getenv("TRANSPORT", "stdio"),
    help="Transport type (stdio, sse or streamable-http)",
)
@click.option(
    "--port",
    type=int,
    default=lambda: int(os.getenv("PORT", "8000")),
    help="Port to listen on for SSE or Streamable HTTP transport",
)
@click.option(
    "--host",
    default=lambda: os.getenv("HOST", "0.0.0.0"),  # noqa: S104
    help="Host to bind to for SSE or Streamable HTTP transport",
)
@click.option(
    "--log-dir",
    help="Directory to store log files",
)
@click.option(
    "--log-to-file/--no-log-to-file",
    default=False,
    help="Enable/disable file logging",
)
@click.option(
    "--read-only",
    is_flag=True,
    help="Run in read-only mode (disables all write operations)",
)
@click.option(
    "--jira-url",
    help="Jira URL (e.g., https://your-domain.atlassian.net)",
)
@click.option("--jira-username", help="Jira username/email")
@click.option("--jira-token", help="Jira API token")
@click.option("--jira-project", help="Default Jira project key used for Xray sessions")
@click.option(
    "--jira-ssl-verify/--no-jira-ssl-verify",
    default=True,
    help="Verify SSL certificates for Jira (default: verify)",
)
@click.option(
    "--xray-url",
    help="Xray Cloud base URL (default: https://xray.cloud.getxray.app)",
)
def main(
    verbose: int,
    env_file: str | None,
    transport: str,
    port: int,
    host: str,
    log_dir: str | None,
    log_to_file: bool,
    read_only: bool,
    jira_url: str | None,
    jira_username: str | None,
    jira_token: str | None,
    jira_project: str | None,
    jira_ssl_verify: bool,
    xray_url: str | None,
) -> None:
    """MCP Xray Server - Xray Cloud test management over Jira for MCP

    Creates tests with their steps, test plans and test repository folders.
    """
    logging_level = os.getenv("LOG_LEVEL", "INFO")
    if verbose == 1:
        logging_level = "INFO"
    elif verbose >= 2:
        logging_level = "DEBUG"

    setup_logger(
        name="mcp-xray",
        level=logging_level,
        log_to_file=log_to_file,
        log_dir=log_dir,
    )

    with log_operation(logger, "application_startup", app_version=__version__):
        if env_file:
            logger.info(f"Loading environment from file: {env_file}")
            load_dotenv(env_file, override=True)
        else:
            logger.debug("Attempting to load environment from default .env file")
            load_dotenv()

        if jira_url:
            os.environ["JIRA_URL"] = jira_url
        if jira_username:
            os.environ["JIRA_USERNAME"] = jira_username
        if jira_token:
            os.environ["JIRA_API_TOKEN"] = jira_token
        if jira_project:
            os.environ["JIRA_PROJECT"] = jira_project
        if xray_url:
            os.environ["XRAY_CLOUD_BASE_URL"] = xray_url
        if read_only:
            os.environ["READ_ONLY_MODE"] = "true"
        if log_dir:
            os.environ["LOG_DIR"] = log_dir

        os.environ["JIRA_SSL_VERIFY"] = str(jira_ssl_verify).lower()

        from .servers import run_server

        logger.info(f"Starting MCP Xray v{__version__} with {transport} transport")

    asyncio.run(run_server(transport=transport, port=port, host=host))  # type: ignore[arg-type]


__all__ = ["main", "__version__", "setup_logger", "log_operation"]

if __name__ == "__main__":
    main()

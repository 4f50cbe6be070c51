"""Entry point for running the MCP Xray server with ``python -m mcp_xray``."""

from mcp_xray import main

if __name__ == "__main__":
    main()

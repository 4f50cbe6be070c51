"""FastMCP servers exposing the Xray tools."""

from .main import main_mcp, run_server
from .xray import xray_mcp

__all__ = ["main_mcp", "run_server", "xray_mcp"]

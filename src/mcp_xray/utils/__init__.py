"""
Utility functions for the MCP Xray integration.
"""

from .documents import find_first, iter_objects, iter_values, parse_json, status_code_of
from .env import getenv_first, getenv_int, is_env_extended_truthy, is_env_truthy
from .io import is_read_only_mode
from .logging import mask_sensitive

__all__ = [
    "find_first",
    "getenv_first",
    "getenv_int",
    "is_env_extended_truthy",
    "is_env_truthy",
    "is_read_only_mode",
    "iter_objects",
    "iter_values",
    "mask_sensitive",
    "parse_json",
    "status_code_of",
]

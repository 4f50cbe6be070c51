"""Environment variable utility functions for MCP Xray."""

import os


def is_env_truthy(env_var_name: str, default: str = "") -> bool:
    """Check if environment variable is set to a standard truthy value.

    Considers 'true', '1', 'yes' as truthy values (case-insensitive).

    Args:
        env_var_name: Name of the environment variable to check
        default: Default value if environment variable is not set

    Returns:
        True if the environment variable is set to a truthy value, False otherwise
    """
    return os.getenv(env_var_name, default).lower() in ("true", "1", "yes")


def is_env_extended_truthy(env_var_name: str, default: str = "") -> bool:
    """Check if environment variable is set to an extended truthy value.

    Considers 'true', '1', 'yes', 'y', 'on' as truthy values (case-insensitive).
    Used for READ_ONLY_MODE.

    Args:
        env_var_name: Name of the environment variable to check
        default: Default value if environment variable is not set

    Returns:
        True if the environment variable is set to a truthy value, False otherwise
    """
    return os.getenv(env_var_name, default).lower() in ("true", "1", "yes", "y", "on")


def is_env_ssl_verify(env_var_name: str, default: str = "true") -> bool:
    """Check SSL verification setting with secure defaults.

    Defaults to true unless explicitly set to false values.
    """
    return os.getenv(env_var_name, default).lower() not in ("false", "0", "no")


def getenv_first(*env_var_names: str, default: str | None = None) -> str | None:
    """Return the first non-blank value among several environment variables.

    Args:
        *env_var_names: Variable names in order of precedence.
        default: Value returned when none of the variables is set.

    Returns:
        The first non-blank value found, otherwise ``default``.
    """
    for name in env_var_names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return default


def getenv_int(env_var_name: str, default: int) -> int:
    """Read an integer environment variable.

    Args:
        env_var_name: Name of the environment variable.
        default: Value used when the variable is unset or blank.

    Returns:
        The parsed integer value.

    Raises:
        ValueError: If the variable is set but is not an integer.
    """
    raw = os.getenv(env_var_name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ValueError(
            f"{env_var_name} must be an integer, got '{raw}'"
        ) from e

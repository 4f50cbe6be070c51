"""Configuration module for the Xray Cloud internal API."""

import os
from dataclasses import dataclass

from ..commands.base import DEFAULT_XRAY_BASE_URL
from ..commands.retry import RetryPolicy
from ..utils.env import getenv_int, is_env_truthy


@dataclass(frozen=True)
class XrayConfig:
    """Xray Cloud configuration: secondary base address, retry policy and field resolution."""

    base_url: str = DEFAULT_XRAY_BASE_URL
    max_attempts: int = 3
    retry_delay_ms: int = 1000
    resolve_custom_fields: bool = True
    token_refresh_margin: int = 60  # Seconds subtracted from the session token expiry

    @property
    def retry_delay(self) -> float:
        """Inter-attempt delay in seconds."""
        return self.retry_delay_ms / 1000

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.max_attempts, delay=self.retry_delay)

    @classmethod
    def from_env(cls) -> "XrayConfig":
        """Create configuration from environment variables.

        Returns:
            XrayConfig: Configuration object with values from environment variables

        Raises:
            ValueError: If a numeric variable is invalid
        """
        base_url = os.getenv("XRAY_CLOUD_BASE_URL") or DEFAULT_XRAY_BASE_URL
        max_attempts = getenv_int("XRAY_RETRY_MAX_ATTEMPTS", 3)
        retry_delay_ms = getenv_int("XRAY_RETRY_DELAY_MS", 1000)

        if max_attempts < 1:
            raise ValueError("XRAY_RETRY_MAX_ATTEMPTS must be at least 1")
        if retry_delay_ms < 0:
            raise ValueError("XRAY_RETRY_DELAY_MS must not be negative")

        return cls(
            base_url=base_url.rstrip("/"),
            max_attempts=max_attempts,
            retry_delay_ms=retry_delay_ms,
            resolve_custom_fields=is_env_truthy("XRAY_RESOLVE_CUSTOM_FIELDS", "true"),
            token_refresh_margin=getenv_int("XRAY_TOKEN_REFRESH_MARGIN", 60),
        )

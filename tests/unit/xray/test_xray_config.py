"""Unit tests for the XrayConfig class."""

import os
from unittest.mock import patch

import pytest

from mcp_xray.commands.retry import RetryPolicy
from mcp_xray.xray.config import XrayConfig


def test_defaults(clean_environment):
    config = XrayConfig.from_env()

    assert config.base_url == "https://xray.cloud.getxray.app"
    assert config.max_attempts == 3
    assert config.retry_delay_ms == 1000
    assert config.retry_delay == 1.0
    assert config.resolve_custom_fields is True
    assert config.token_refresh_margin == 60


def test_from_env(clean_environment):
    with patch.dict(
        os.environ,
        {
            "XRAY_CLOUD_BASE_URL": "https://eu.xray.cloud.getxray.app/",
            "XRAY_RETRY_MAX_ATTEMPTS": "5",
            "XRAY_RETRY_DELAY_MS": "250",
            "XRAY_RESOLVE_CUSTOM_FIELDS": "false",
            "XRAY_TOKEN_REFRESH_MARGIN": "30",
        },
    ):
        config = XrayConfig.from_env()

    assert config.base_url == "https://eu.xray.cloud.getxray.app"
    assert config.max_attempts == 5
    assert config.retry_delay == 0.25
    assert config.resolve_custom_fields is False
    assert config.token_refresh_margin == 30


@pytest.mark.parametrize(
    "variable, value, message",
    [
        ("XRAY_RETRY_MAX_ATTEMPTS", "0", "at least 1"),
        ("XRAY_RETRY_DELAY_MS", "-5", "must not be negative"),
        ("XRAY_RETRY_DELAY_MS", "soon", "integer"),
    ],
)
def test_invalid_values(clean_environment, variable, value, message):
    with patch.dict(os.environ, {variable: value}):
        with pytest.raises(ValueError, match=message):
            XrayConfig.from_env()


def test_retry_policy():
    policy = XrayConfig(max_attempts=4, retry_delay_ms=250).retry_policy

    assert policy == RetryPolicy(max_attempts=4, delay=0.25)

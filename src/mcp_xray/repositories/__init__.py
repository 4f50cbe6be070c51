"""Composite test-management operations built on the Jira and Xray facades."""

from .cloud import XrayCloudRepository
from .protocols import XrayRepository

__all__ = ["XrayCloudRepository", "XrayRepository"]

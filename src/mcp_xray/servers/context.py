from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp_xray.repositories.protocols import XrayRepository


@dataclass(frozen=True)
class MainAppContext:
    """Context holding the shared repository and server settings."""

    repository: XrayRepository | None = None
    read_only: bool = False


def app_context(ctx: Any) -> MainAppContext | None:
    """Return the MainAppContext stored by the server lifespan, if any."""
    lifespan_context = ctx.request_context.lifespan_context
    if not isinstance(lifespan_context, dict):
        return None
    return lifespan_context.get("app_lifespan_context")

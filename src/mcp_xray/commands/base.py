"""Declarative description of one outbound HTTP request."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, NamedTuple

# Reserved header carrying the issue (or project) context key of a request
# addressed to the Xray internal API. The invoker swaps it for a session token.
XRAY_CONTEXT_HEADER = "X-acpt"

JSON_CONTENT_TYPE = "application/json"

DEFAULT_XRAY_BASE_URL = "https://xray.cloud.getxray.app"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(frozen=True)
class HttpCommand:
    """An immutable outbound request: relative route, verb, body and headers.

    The route is resolved against a base address at send time, so it must
    never be absolute.
    """

    route: str
    method: HttpMethod | str = HttpMethod.GET
    data: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)
    content_type: str = JSON_CONTENT_TYPE

    def __post_init__(self) -> None:
        if not self.route.startswith("/"):
            raise ValueError(f"Command route must be relative and start with '/': {self.route}")
        # Freeze the headers so a command cannot change after construction.
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers or {})))

    @property
    def context_key(self) -> str:
        """Issue context of a secondary-API command, or ``""`` for primary commands."""
        return (self.headers.get(XRAY_CONTEXT_HEADER) or "").strip()

    def __repr__(self) -> str:
        method = self.method.value if isinstance(self.method, HttpMethod) else self.method
        return f"HttpCommand({method} {self.route})"


class IssueRef(NamedTuple):
    """Id and key of one issue; the id addresses Xray routes, the key scopes the session."""

    id: str
    key: str

"""Turns HttpCommands into HTTP exchanges against Jira or Xray.

Every call returns a parseable JSON string: the raw body on success, or a
synthesized envelope ``{"code", "reason", "body", "id": "-1"}`` when the
body is empty or the status is a failure. Network errors propagate.
"""

import json
import logging
import mimetypes
from collections.abc import Callable, Iterable
from contextlib import ExitStack
from pathlib import Path
from typing import TYPE_CHECKING, Any

import requests
from pydantic import BaseModel

from ..utils.documents import parse_json
from .base import (
    DEFAULT_XRAY_BASE_URL,
    JSON_CONTENT_TYPE,
    XRAY_CONTEXT_HEADER,
    HttpCommand,
    HttpMethod,
)
from .batching import for_each_parallel
from .session import XraySessionResolver

if TYPE_CHECKING:
    from ..jira.config import JiraConfig

logger = logging.getLogger("mcp-xray.commands.invoker")

GENERIC_RESPONSE_ID = "-1"
ATTACHMENT_TOKEN_HEADER = {"X-Atlassian-Token": "no-check"}


def new_generic_response(code: int, reason: str = "", body: str = "") -> str:
    """Synthesize the response envelope used for empty or failed exchanges."""
    return json.dumps(
        {"code": code, "reason": reason or "", "body": body or "", "id": GENERIC_RESPONSE_ID}
    )


def normalize_response(response: requests.Response) -> str:
    """Return the body of a successful response, or an envelope otherwise."""
    text = response.text or ""
    if response.ok and text.strip():
        return text
    if not response.ok:
        logger.debug(
            f"{response.request.method if response.request else ''} {response.url} "
            f"returned {response.status_code} {response.reason}"
        )
    return new_generic_response(response.status_code, response.reason or "", text)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_body(data: Any) -> str | bytes:
    """Serialize a command body; raw strings and bytes are sent as they are."""
    if isinstance(data, (str, bytes)):
        return data
    return json.dumps(data, default=_json_default)


class CommandInvoker:
    """Sends commands with Basic authentication and Xray session enrichment.

    A command whose ``X-acpt`` header holds an issue context key is sent to
    the Xray base address with the header value replaced by a session token
    for that issue. Other commands go to Jira with Basic credentials.
    """

    def __init__(
        self,
        config: "JiraConfig",
        xray_base_url: str = DEFAULT_XRAY_BASE_URL,
        session: requests.Session | None = None,
        session_resolver: XraySessionResolver | None = None,
    ) -> None:
        self.config = config
        self.xray_base_url = xray_base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.verify = config.ssl_verify
        self.session_resolver = session_resolver or XraySessionResolver(
            config, session=self.session
        )

    @property
    def max_workers(self) -> int:
        return self.config.max_workers

    def send(self, command: HttpCommand) -> str:
        """Send one command and return the normalized response text."""
        handler = _resolve_handler(command.method)
        if handler is None:
            logger.warning(f"Unsupported HTTP method '{command.method}' for {command.route}")
            return new_generic_response(404)
        return handler(self, command)

    def send_json(self, command: HttpCommand, default: Any = None) -> Any:
        """Send one command and parse the response; invalid JSON yields ``{}``."""
        return parse_json(self.send(command), default)

    def send_many(self, commands: Iterable[HttpCommand]) -> list[Any]:
        """Send commands concurrently; parsed results come back unordered."""
        return for_each_parallel(commands, self.send_json, self.max_workers)

    def add_attachments(self, id_or_key: str, files: Iterable[str | Path]) -> Any:
        """Upload files to an issue as multipart form data.

        Returns:
            The parsed Jira response (a list of attachments on success).

        Raises:
            OSError: If a file cannot be read.
        """
        url = f"{self.config.url}{self.config.api_route}/issue/{id_or_key}/attachments"
        with ExitStack() as stack:
            parts = []
            for file_path in files:
                path = Path(file_path)
                content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
                handle = stack.enter_context(path.open("rb"))
                parts.append(("file", (path.name, handle, content_type)))

            response = self.session.post(
                url,
                files=parts,
                headers=dict(ATTACHMENT_TOKEN_HEADER),
                auth=self._auth(),
                timeout=self.config.timeout,
            )
        return parse_json(normalize_response(response))

    def _auth(self) -> tuple[str, str]:
        return (self.config.username, self.config.api_token)

    def _exchange(self, method: HttpMethod, command: HttpCommand, with_body: bool) -> str:
        url = f"{self.config.url}{command.route}"
        headers = {"Accept": JSON_CONTENT_TYPE, **command.headers}
        auth: tuple[str, str] | None = self._auth()

        context_key = command.context_key
        if context_key:
            token = self.session_resolver.resolve(context_key)
            if not token:
                logger.warning(
                    f"Xray session token unavailable for '{context_key}'; "
                    f"{method.value} {command.route} was not sent"
                )
                return new_generic_response(401, "Xray session token unavailable")
            headers[XRAY_CONTEXT_HEADER] = token
            url = f"{self.xray_base_url}{command.route}"
            # Jira credentials stay with Jira
            auth = None

        body = None
        if with_body and command.data is not None:
            body = serialize_body(command.data)
            headers.setdefault("Content-Type", command.content_type)

        logger.debug(f"{method.value} {url}")
        response = self.session.request(
            method.value,
            url,
            data=body.encode("utf-8") if isinstance(body, str) else body,
            headers=headers,
            auth=auth,
            timeout=self.config.timeout,
        )
        return normalize_response(response)

    def _send_get(self, command: HttpCommand) -> str:
        return self._exchange(HttpMethod.GET, command, with_body=False)

    def _send_post(self, command: HttpCommand) -> str:
        return self._exchange(HttpMethod.POST, command, with_body=True)

    def _send_put(self, command: HttpCommand) -> str:
        return self._exchange(HttpMethod.PUT, command, with_body=True)

    def _send_delete(self, command: HttpCommand) -> str:
        return self._exchange(HttpMethod.DELETE, command, with_body=False)


_HANDLERS: dict[HttpMethod, Callable[[CommandInvoker, HttpCommand], str]] = {
    HttpMethod.GET: CommandInvoker._send_get,
    HttpMethod.POST: CommandInvoker._send_post,
    HttpMethod.PUT: CommandInvoker._send_put,
    HttpMethod.DELETE: CommandInvoker._send_delete,
}


def _resolve_handler(
    method: HttpMethod | str,
) -> Callable[[CommandInvoker, HttpCommand], str] | None:
    try:
        verb = HttpMethod(str(getattr(method, "value", method)).upper())
    except ValueError:
        return None
    return _HANDLERS.get(verb)

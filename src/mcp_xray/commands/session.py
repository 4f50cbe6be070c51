"""Xray session tokens obtained through Jira's issue-view query.

The Xray internal API authorizes every call with a short-lived JWT scoped to
one issue. Jira hands that token out inside the issue view: the interactive
query returns the Xray panel's ``options`` (a JSON string) whose
``contextJwt`` field is the token.
"""

import json
import logging
import re
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import jwt
import requests
from cachetools import TLRUCache

from ..utils.documents import iter_values, parse_json
from ..utils.logging import mask_sensitive
from . import jira as jira_commands
from .base import JSON_CONTENT_TYPE

if TYPE_CHECKING:
    from ..jira.config import JiraConfig

logger = logging.getLogger("mcp-xray.commands.session")

TOKEN_FIELD = "contextJwt"
DEFAULT_TOKEN_TTL = 120  # seconds, for tokens without a readable exp claim
DEFAULT_CACHE_SIZE = 1024

PROJECT_KEY_PLACEHOLDER = "[project-key]"
ISSUE_KEY_PLACEHOLDER = "[issue-key]"

ISSUE_KEY_PATTERN = re.compile(r"[A-Z][A-Z0-9_]*-\d+")

SESSION_QUERY_TEMPLATE = json.dumps(
    {
        "operationName": "issueViewInteractiveQuery",
        "query": (
            "query issueViewInteractiveQuery($issueKey: String!, $projectKey: String!) {"
            " viewIssue(issueKey: $issueKey, projectKey: $projectKey) {"
            " issue { id key }"
            " ecosystem { panels { addonKey moduleKey options } }"
            " } }"
        ),
        "variables": {
            "issueKey": ISSUE_KEY_PLACEHOLDER,
            "projectKey": PROJECT_KEY_PLACEHOLDER,
        },
    }
)


def render_session_query(project_key: str, issue_key: str) -> str:
    """Substitute the project and issue keys into the query template."""

    def _escape(value: str) -> str:
        return json.dumps(value)[1:-1]

    return SESSION_QUERY_TEMPLATE.replace(
        PROJECT_KEY_PLACEHOLDER, _escape(project_key)
    ).replace(ISSUE_KEY_PLACEHOLDER, _escape(issue_key))


def is_issue_key(value: str | None) -> bool:
    """True for keys such as ``DEMO-12``; Jira only issues session tokens for issues."""
    return bool(ISSUE_KEY_PATTERN.fullmatch((value or "").strip().upper()))


def extract_session_token(response_text: str) -> str:
    """Find the session token in an issue-view response.

    The ``options`` fragment can sit at any depth and is itself serialized
    JSON. The first fragment carrying a token wins.

    Returns:
        The token, or ``""`` when none is present.
    """
    document = parse_json(response_text)
    for options in iter_values(document, "options"):
        if isinstance(options, str):
            options = parse_json(options)
        if isinstance(options, dict):
            token = options.get(TOKEN_FIELD)
            if isinstance(token, str) and token:
                return token
    return ""


def token_expiry(token: str) -> float | None:
    """Return the ``exp`` claim of a JWT as a POSIX timestamp, if readable.

    The signature is not verified: the token is only inspected for its
    lifetime and is forwarded to Xray unchanged.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    exp = claims.get("exp")
    if isinstance(exp, (int, float)) and not isinstance(exp, bool):
        return float(exp)
    return None


class XraySessionResolver:
    """Resolves and caches Xray session tokens per issue context key.

    Entries expire ``refresh_margin`` seconds before the token's own ``exp``
    claim. The cache is shared by every thread of the owning invoker.
    """

    def __init__(
        self,
        config: "JiraConfig",
        session: requests.Session | None = None,
        refresh_margin: int = 60,
        maxsize: int = DEFAULT_CACHE_SIZE,
        timer: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.session = session or requests.Session()
        self.refresh_margin = refresh_margin
        self._lock = threading.Lock()
        self._cache = TLRUCache(
            maxsize=maxsize, ttu=self._expires_at, timer=timer
        )

    def _expires_at(self, key: str, token: str, now: float) -> float:
        expiry = token_expiry(token)
        if expiry is None:
            return now + DEFAULT_TOKEN_TTL
        return expiry - self.refresh_margin

    def _project_for(self, context_key: str) -> str:
        if self.config.project:
            return self.config.project
        return context_key.split("-", 1)[0]

    def resolve(self, context_key: str) -> str:
        """Return a valid token for the context key, fetching it when stale or absent.

        Returns:
            The token, or ``""`` when it could not be obtained.
        """
        cache_key = (context_key or "").strip().upper()
        if not cache_key:
            return ""
        if not is_issue_key(cache_key):
            logger.warning(
                f"Xray session context '{context_key}' is not an issue key, no token requested"
            )
            return ""

        with self._lock:
            token = self._cache.get(cache_key)
        if token:
            return token

        token = self.fetch_token(cache_key)
        if token:
            with self._lock:
                self._cache[cache_key] = token
        return token

    def fetch_token(self, context_key: str) -> str:
        """Request a fresh token from Jira without consulting the cache.

        Any failure (network, status, parsing) is logged and yields ``""``.
        """
        query = render_session_query(self._project_for(context_key), context_key)
        command = jira_commands.get_session_token(query)
        try:
            response = self.session.post(
                f"{self.config.url}{command.route}",
                data=query.encode("utf-8"),
                headers={"Content-Type": JSON_CONTENT_TYPE, "Accept": JSON_CONTENT_TYPE},
                auth=(self.config.username, self.config.api_token),
                timeout=self.config.timeout,
            )
            if not response.ok:
                logger.warning(
                    f"Session query for '{context_key}' failed with status {response.status_code}"
                )
                return ""
            token = extract_session_token(response.text)
        except Exception as e:  # noqa: BLE001 - an empty token is the failure signal
            logger.warning(f"Could not resolve Xray session token for '{context_key}': {e}")
            return ""

        if not token:
            logger.warning(f"No Xray session token found for '{context_key}'")
        else:
            logger.debug(
                f"Resolved Xray session token for '{context_key}': {mask_sensitive(token)}"
            )
        return token

    def invalidate(self, context_key: str | None = None) -> None:
        """Drop the cached token of one context key, or every token."""
        with self._lock:
            if context_key is None:
                self._cache.clear()
            else:
                self._cache.pop(context_key.strip().upper(), None)

    def cached_keys(self) -> list[Any]:
        with self._lock:
            # expire() drops stale entries before listing
            self._cache.expire()
            return list(self._cache.keys())

"""JSON helpers shared by the command layer and the facades."""

import json
from collections.abc import Iterator
from typing import Any


def parse_json(text: str | bytes | None, default: Any = None) -> Any:
    """Parse a JSON document, falling back to an empty object.

    Args:
        text: Raw response text.
        default: Value returned for empty or invalid input (``{}`` when None).

    Returns:
        The parsed JSON value, or the default.
    """
    fallback = {} if default is None else default
    if text is None:
        return fallback
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    if not text.strip():
        return fallback
    try:
        return json.loads(text)
    except ValueError:
        return fallback


def iter_values(document: Any, key: str) -> Iterator[Any]:
    """Yield every value stored under ``key`` at any depth, depth-first."""
    if isinstance(document, dict):
        for name, value in document.items():
            if name == key:
                yield value
            yield from iter_values(value, key)
    elif isinstance(document, list):
        for item in document:
            yield from iter_values(item, key)


def find_first(document: Any, key: str, default: Any = None) -> Any:
    """Return the first value stored under ``key`` at any depth."""
    return next(iter_values(document, key), default)


def status_code_of(document: Any) -> int | None:
    """Return the numeric ``code`` field of a response envelope, if any."""
    if not isinstance(document, dict):
        return None
    code = document.get("code")
    if isinstance(code, bool):
        return None
    if isinstance(code, int):
        return code
    if isinstance(code, str) and code.strip().isdigit():
        return int(code.strip())
    return None


def iter_objects(document: Any) -> Iterator[dict[str, Any]]:
    """Yield every JSON object of a document, depth-first, the root first."""
    if isinstance(document, dict):
        yield document
        for value in document.values():
            yield from iter_objects(value)
    elif isinstance(document, list):
        for item in document:
            yield from iter_objects(item)

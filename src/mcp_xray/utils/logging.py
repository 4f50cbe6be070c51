"""Helpers for keeping secrets out of log records."""


def mask_sensitive(value: str | None, keep_chars: int = 4) -> str:
    """Mask a secret, keeping only a short prefix.

    Args:
        value: The token or key to mask.
        keep_chars: Number of leading characters left visible.

    Returns:
        The masked string, or ``"Not Provided"`` when empty.
    """
    if not value:
        return "Not Provided"
    if len(value) <= keep_chars * 2:
        return "*" * len(value)
    return value[:keep_chars] + "*" * (len(value) - keep_chars)

"""Fixed-delay retry for side-effecting remote calls.

A result is accepted when it carries no numeric ``code`` field or a code
below 400; failure envelopes and raised exceptions are retried. Exhaustion
never raises: the caller inspects the returned ``RetryOutcome``.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..utils.documents import status_code_of

logger = logging.getLogger("mcp-xray.commands.retry")

T = TypeVar("T")

FAILURE_THRESHOLD = 400


def is_accepted(result: Any) -> bool:
    code = status_code_of(result)
    return code is None or code < FAILURE_THRESHOLD


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """Result of a retried unit of work.

    ``value`` is the last obtained result (possibly a failure envelope, or
    None when every attempt raised); ``error`` is the exception of the last
    attempt when it raised.
    """

    value: T | None
    attempts: int
    succeeded: bool
    error: BaseException | None = None

    @property
    def status_code(self) -> int | None:
        return status_code_of(self.value)

    def describe_failure(self) -> str:
        if self.error is not None:
            return str(self.error)
        if self.status_code is not None:
            return f"remote call failed with status {self.status_code}"
        return "remote call was not accepted"


def invoke_repeatable(
    func: Callable[[], T],
    max_attempts: int = 3,
    delay: float = 1.0,
    *,
    accept: Callable[[Any], bool] = is_accepted,
    sleep: Callable[[float], None] | None = None,
) -> RetryOutcome[T]:
    """Run ``func`` until its result is accepted or attempts are exhausted.

    Args:
        func: The unit of work.
        max_attempts: Maximum number of calls (at least 1).
        delay: Seconds slept between attempts; no sleep follows the last one.
        accept: Predicate deciding whether a result is a success.
        sleep: Blocking sleep used between attempts (time.sleep by default).

    Returns:
        A RetryOutcome describing the last attempt.

    Raises:
        ValueError: If max_attempts is lower than 1.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    value: T | None = None
    error: BaseException | None = None

    for attempt in range(1, max_attempts + 1):
        try:
            value = func()
            error = None
        except Exception as e:  # noqa: BLE001 - retried, then reported in the outcome
            error = e
            logger.debug(f"Attempt {attempt}/{max_attempts} raised: {e}")
        else:
            if accept(value):
                return RetryOutcome(value=value, attempts=attempt, succeeded=True)
            logger.debug(
                f"Attempt {attempt}/{max_attempts} returned status {status_code_of(value)}"
            )

        if attempt < max_attempts:
            (sleep or time.sleep)(delay)

    return RetryOutcome(value=value, attempts=max_attempts, succeeded=False, error=error)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    delay: float = 1.0

    def invoke(self, func: Callable[[], T]) -> RetryOutcome[T]:
        return invoke_repeatable(func, self.max_attempts, self.delay)

"""Retry with backoff for external provider calls.

Every call to the text-generation and speech-synthesis providers is wrapped by
``retry_with_backoff``. Failures are classified into fatal (never repeated),
retryable (repeated after a delay) and unclassified (raised immediately).
"""

import asyncio
import math
import re
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from app.core.exceptions import ErrorKind, ExternalAPIError, ShadowCastError
from app.core.logging import get_logger
from app.core.types import SleepFunc

logger = get_logger(__name__)

T = TypeVar("T")

# Fallback wait for throttled calls without a provider hint
THROTTLE_FLOOR_SECONDS = 35.0
# Added on top of a provider hint
THROTTLE_HINT_PADDING_SECONDS = 2.0

_RETRY_HINT_RE = re.compile(r"retry\s+in\s+([\d.]+)\s*s(?:ec(?:ond)?s?)?\b", re.IGNORECASE)

_FATAL_MARKERS = ("400", "401", "403", "404", "API key")
_THROTTLE_MARKERS = ("429", "RESOURCE_EXHAUSTED", "Quota exceeded")
_RETRYABLE_MARKERS = (
    "503",
    "Service Unavailable",
    "overloaded",
    "ECONNRESET",
    "ETIMEDOUT",
)


def classify_error(error: BaseException) -> ErrorKind | None:
    """Determine the error kind of a failed call.

    Resolution order: an explicit ``kind`` set by the calling client, the
    exception type of the HTTP layer, an HTTP ``status_code`` attribute, and
    finally the message text for foreign exceptions that carry none of these.

    Args:
        error: Exception raised by the operation

    Returns:
        ErrorKind, or None when the failure is unclassified
    """
    kind = getattr(error, "kind", None)
    if isinstance(kind, ErrorKind) and kind is not ErrorKind.UNKNOWN:
        return kind

    if isinstance(error, httpx.HTTPStatusError):
        return _known(ErrorKind.from_status(error.response.status_code))
    if isinstance(error, (httpx.TransportError, TimeoutError)):
        return ErrorKind.NETWORK

    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int):
        by_status = _known(ErrorKind.from_status(status_code))
        if by_status is not None:
            return by_status

    return _classify_message(str(error))


def _known(kind: ErrorKind) -> ErrorKind | None:
    return None if kind is ErrorKind.UNKNOWN else kind


def _classify_message(message: str) -> ErrorKind | None:
    if any(marker in message for marker in _FATAL_MARKERS):
        return ErrorKind.AUTHORIZATION
    if any(marker in message for marker in _THROTTLE_MARKERS):
        return ErrorKind.RATE_LIMITED
    if any(marker in message for marker in _RETRYABLE_MARKERS):
        return ErrorKind.UNAVAILABLE
    return None


def retry_hint_seconds(error: BaseException) -> float | None:
    """Extract the provider-suggested wait from an error.

    Args:
        error: Exception raised by the operation

    Returns:
        Seconds to wait, or None if the provider gave no hint
    """
    retry_after = getattr(error, "retry_after", None)
    if isinstance(retry_after, (int, float)) and retry_after > 0:
        return float(retry_after)

    match = _RETRY_HINT_RE.search(str(error))
    if match:
        try:
            return float(match.group(1))
        except ValueError:
            return None
    return None


def compute_delay(
    attempt: int,
    base_delay: float,
    kind: ErrorKind,
    error: BaseException,
) -> float:
    """Compute the wait before the next attempt.

    Args:
        attempt: 1-based number of the attempt that just failed
        base_delay: Base delay in seconds
        kind: Classification of the failure
        error: The failure itself (inspected for a retry hint)

    Returns:
        Delay in seconds
    """
    delay = base_delay if attempt == 1 else base_delay * 3

    if kind.is_throttle:
        hint = retry_hint_seconds(error)
        if hint is not None:
            # Whole milliseconds, rounded up
            padded = math.ceil(hint * 1000) / 1000 + THROTTLE_HINT_PADDING_SECONDS
            delay = max(delay, padded)
        else:
            delay = max(delay, THROTTLE_FLOOR_SECONDS)

    return delay


def _tag(error: BaseException, operation_name: str, kind: ErrorKind | None) -> BaseException:
    """Attach the operation name to an error before it propagates."""
    if isinstance(error, ShadowCastError):
        return error.with_context(operation=operation_name)
    if kind is None:
        return error
    wrapped = ExternalAPIError(
        service=operation_name,
        message=str(error),
        kind=kind,
        status_code=getattr(error, "status_code", None),
        retry_after=retry_hint_seconds(error),
    )
    wrapped.with_context(operation=operation_name)
    return wrapped


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    operation_name: str,
    max_retries: int = 2,
    base_delay: float = 5.0,
    *,
    sleep: SleepFunc = asyncio.sleep,
) -> T:
    """Run an async operation, retrying transient failures.

    Total attempts are ``max_retries + 1``. The first retry waits
    ``base_delay`` and later retries wait ``3 * base_delay``; throttled calls
    wait at least the provider hint plus two seconds, or 35 seconds without a
    hint.

    Args:
        operation: Zero-argument coroutine factory
        operation_name: Human-readable name for logs and error context
        max_retries: Maximum number of retries
        base_delay: Base delay in seconds
        sleep: Awaitable sleep function (injectable for tests)

    Returns:
        Result of the first successful attempt

    Raises:
        ShadowCastError: The last failure, tagged with ``operation``
        Exception: Unclassified foreign failures are re-raised unchanged
    """
    total_attempts = max_retries + 1

    for attempt in range(1, total_attempts + 1):
        try:
            logger.debug(
                "Attempt started",
                operation=operation_name,
                attempt=attempt,
                total=total_attempts,
            )
            result = await operation()
            if attempt > 1:
                logger.info(
                    "Succeeded after retry",
                    operation=operation_name,
                    attempt=attempt,
                    total=total_attempts,
                )
            return result
        except Exception as e:
            kind = classify_error(e)

            if kind is not None and kind.is_fatal:
                logger.error(
                    "Client error, not retrying",
                    operation=operation_name,
                    kind=kind.value,
                    error=str(e),
                )
                tagged = _tag(e, operation_name, kind)
                if tagged is e:
                    raise
                raise tagged from e

            if kind is None or attempt >= total_attempts:
                logger.error(
                    "Operation failed",
                    operation=operation_name,
                    attempts=attempt,
                    kind=kind.value if kind else None,
                    error=str(e),
                )
                tagged = _tag(e, operation_name, kind)
                if tagged is e:
                    raise
                raise tagged from e

            delay = compute_delay(attempt, base_delay, kind, e)
            logger.warning(
                "Attempt failed, retrying",
                operation=operation_name,
                attempt=attempt,
                total=total_attempts,
                kind=kind.value,
                delay_seconds=delay,
                error=str(e),
            )
            await sleep(delay)

    raise RuntimeError(f"{operation_name}: retry loop exited without result")


__all__ = [
    "classify_error",
    "compute_delay",
    "retry_hint_seconds",
    "retry_with_backoff",
]

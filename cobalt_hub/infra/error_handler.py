"""Error types, classification, and retry logic."""

import asyncio
import logging
import random
from typing import Optional, Type, Tuple, Callable, Any, Awaitable, Dict
from enum import Enum

import httpx

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    """Categories of errors for better handling."""
    NETWORK = "network"  # Connection issues, timeouts
    API_ERROR = "api_error"  # Connector returned error response
    VALIDATION = "validation"  # Input validation errors
    CONTENT = "content"  # Malformed or unknown content blocks
    UNKNOWN = "unknown"  # Unknown errors


class CobaltError(Exception):
    """Base exception for errors raised by the hub."""
    def __init__(self, message: str, category: ErrorCategory, retryable: bool = False, retry_after: Optional[float] = None):
        self.message = message
        self.category = category
        self.retryable = retryable
        self.retry_after = retry_after
        super().__init__(message)


class MissingSessionIdError(CobaltError):
    """No session id could be resolved for an input item."""
    def __init__(self, message: str = "Session ID is missing."):
        super().__init__(message, ErrorCategory.VALIDATION, retryable=False)


class InvalidSessionIdError(CobaltError):
    """A resolved session id is too long or contains control characters."""
    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.VALIDATION, retryable=False)


class MalformedOptionalInputError(CobaltError):
    """An optional sub-field is missing or unparsable."""
    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message, ErrorCategory.CONTENT, retryable=False)


class UnknownContentKindError(CobaltError):
    """A content record carries a discriminant no variant matches."""
    def __init__(self, kind: Any):
        self.kind = kind
        super().__init__(f"Unknown content kind: {kind!r}", ErrorCategory.CONTENT, retryable=False)


class InvalidButtonActionError(CobaltError):
    """A button selected a custom action but did not supply one."""
    def __init__(self, message: str):
        super().__init__(message, ErrorCategory.CONTENT, retryable=False)


class DeliveryFailure(CobaltError):
    """The connector call failed. The attempted body is kept for diagnostics."""
    def __init__(
        self,
        message: str,
        payload: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
        retryable: bool = False,
        retry_after: Optional[float] = None,
    ):
        self.payload = payload
        self.status_code = status_code
        category = ErrorCategory.API_ERROR if status_code is not None else ErrorCategory.NETWORK
        super().__init__(message, category, retryable=retryable, retry_after=retry_after)


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("retry-after")
    if value and value.strip().isdigit():
        return float(value.strip())
    return None


def classify_error(error: Exception) -> Tuple[ErrorCategory, bool, Optional[float]]:
    """
    Classify an error into a category and determine if it's retryable.

    Connector responses are retryable on 429 and 5xx, honoring Retry-After;
    timeouts and connection failures are always retryable.

    Returns:
        Tuple of (category, retryable, retry_after_seconds)
    """
    if isinstance(error, CobaltError):
        return error.category, error.retryable, error.retry_after

    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code
        retryable = status_code == 429 or status_code >= 500
        return ErrorCategory.API_ERROR, retryable, _retry_after(error.response) if retryable else None

    if isinstance(error, (httpx.TransportError, ConnectionError, TimeoutError, asyncio.TimeoutError)):
        return ErrorCategory.NETWORK, True, None

    if isinstance(error, (ValueError, TypeError)):
        return ErrorCategory.VALIDATION, False, None

    return ErrorCategory.UNKNOWN, False, None


async def retry_with_backoff(
    func: Callable[[], Awaitable[Any]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    retryable_exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable[[Exception, int], None]] = None,
) -> Any:
    """
    Await func, retrying retryable failures with exponential backoff and jitter.

    max_retries counts retries after the first attempt, so 0 means a single
    attempt. A Retry-After hint replaces the computed delay, capped at
    max_delay. The last error is re-raised.
    """
    attempt = 0
    while True:
        try:
            return await func()
        except retryable_exceptions as e:
            _, retryable, retry_after = classify_error(e)
            if not retryable or attempt >= max_retries:
                raise

            delay = min(retry_after or initial_delay * (exponential_base ** attempt), max_delay)
            delay += random.uniform(0, delay * 0.1)
            attempt += 1

            logger.warning(
                "Retrying after error",
                extra={"attempt": attempt, "max_retries": max_retries, "delay": round(delay, 2), "error": str(e)},
            )
            if on_retry:
                result = on_retry(e, attempt)
                if asyncio.iscoroutine(result):
                    await result

            await asyncio.sleep(delay)

"""Exception types shared across the service.

Only validation errors, rate limiting and genuine internal faults ever reach
the HTTP caller. Upstream errors are raised by provider and generation
clients and absorbed by their callers into a local fallback.

safe_execute_sync implements the log-and-return-default pattern for optional
steps that should degrade gracefully.
"""

from typing import Any, Callable, Optional, TypeVar

from src.utils.logger import logger

T = TypeVar("T")


class DenylistError(ValueError):
    """Free-text input contained a denylisted term."""

    def __init__(self, field: str) -> None:
        super().__init__(f"{field} contains a disallowed term")
        self.field = field


class RateLimitExceeded(Exception):
    """Caller exceeded its request allowance."""

    def __init__(self, hint: str) -> None:
        super().__init__("Too many requests")
        self.hint = hint


class UpstreamError(Exception):
    """Failure of an external recipe provider or the generation service."""

    def __init__(self, message: str, status: Optional[int] = None, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.source = source


class UpstreamTransientError(UpstreamError):
    """Timeout, 429, 5xx, connection reset or malformed payload. Worth another attempt."""


class UpstreamPermanentError(UpstreamError):
    """Any other upstream failure. Retrying will not help."""


def is_retryable_status(status: Optional[int]) -> bool:
    """429 and every 5xx are transient; other statuses are not."""
    if status is None:
        return False
    return status == 429 or 500 <= status <= 599


def _log_error(operation_name: str, exception: Exception, log_level: str = "warning") -> None:
    msg = f"{operation_name}: {exception}"
    if log_level == "debug":
        logger.debug(msg)
    elif log_level == "error":
        logger.error(msg)
    else:
        logger.warning(msg)


def safe_execute_sync(
    func: Callable[[], T],
    operation_name: str,
    log_level: str = "warning",
    default_return: Any = None,
    reraise: bool = False,
) -> Any:
    """Call an optional step, logging and returning a default on failure.

    Args:
        func: Zero-argument callable to execute.
        operation_name: Description for logging (e.g., "Direct JSON parse").
        log_level: "debug", "warning" or "error". Default: "warning".
        default_return: Value returned on exception.
        reraise: Re-raise after logging instead of returning the default.

    Returns:
        Result of func, or default_return on exception.
    """
    try:
        return func()
    except Exception as e:
        _log_error(operation_name, e, log_level)
        if reraise:
            raise
        return default_return

"""
Bounded retries for a single unit of scraping work (a search page, a detail page).
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, TypeVar

import httpx
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 5


class TaskState(str, Enum):
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    ABANDONED = "abandoned"


@dataclass
class TaskOutcome(Generic[T]):
    label: str
    state: TaskState = TaskState.PENDING
    attempts: int = 0
    result: Optional[T] = None
    last_error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.state is TaskState.SUCCEEDED


def is_retryable(exc: BaseException) -> bool:
    """Timeouts, dropped connections and rate limiting are worth another try."""
    if isinstance(exc, (PlaywrightTimeoutError, asyncio.TimeoutError, httpx.TransportError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    if isinstance(exc, PlaywrightError):
        return "net::ERR_" in (exc.message or "")
    return False


async def run_with_retries(
    operation: Callable[[], Awaitable[T]],
    label: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
    delay: float = 0.0,
) -> TaskOutcome[T]:
    """
    Run `operation` until it succeeds or has been retried `max_retries` times.

    Each attempt re-runs the whole unit from scratch. Retryable failures past
    the ceiling leave the outcome ABANDONED with no result; any other
    exception propagates to the caller untouched.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        label: Human-readable name for logs (usually the URL)
        max_retries: Retries allowed after the first attempt
        delay: Seconds to sleep between attempts

    Returns:
        TaskOutcome holding the final state, attempt count and result
    """
    outcome: TaskOutcome[T] = TaskOutcome(label=label)

    while True:
        outcome.state = TaskState.IN_FLIGHT
        outcome.attempts += 1
        try:
            outcome.result = await operation()
        except Exception as e:
            if not is_retryable(e):
                raise
            outcome.last_error = e
            retries_used = outcome.attempts - 1
            if retries_used >= max_retries:
                outcome.state = TaskState.ABANDONED
                logger.warning(f"Retries on {label} exceeding {max_retries}, aborting...")
                return outcome
            outcome.state = TaskState.RETRYING
            logger.info(f"{type(e).__name__} on {label}, retrying ({retries_used + 1}/{max_retries})...")
            if delay:
                await asyncio.sleep(delay)
            continue

        outcome.state = TaskState.SUCCEEDED
        return outcome

"""Backoff for JSON-RPC calls that fail for reasons worth waiting out."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

import httpx
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from swaproute.core.errors import TransientRPCError
from swaproute.utils.logging import get_logger

logger = get_logger(__name__)

P = ParamSpec("P")
R = TypeVar("R")

# Connection drops, timeouts, and node-side throttling or 5xx.
RETRYABLE_RPC_ERRORS: tuple[type[Exception], ...] = (
    httpx.TransportError,
    asyncio.TimeoutError,
    TransientRPCError,
)


def describe_call(retry_state: RetryCallState) -> str:
    """``Owner.func(method)`` where the first string argument names the RPC method."""
    name = retry_state.fn.__qualname__ if retry_state.fn else "call"
    method = retry_state.kwargs.get("method")
    if method is None:
        method = next((a for a in retry_state.args if isinstance(a, str)), None)
    return f"{name}({method})" if method else name


def _log_before_sleep(max_attempts: int) -> Callable[[RetryCallState], None]:
    def log(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.warning(
            f"{describe_call(retry_state)} attempt {retry_state.attempt_number}/{max_attempts} "
            f"failed ({type(exc).__name__}: {exc}); retrying in {wait:.1f}s"
        )

    return log


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 5.0,
    retry_exceptions: tuple[type[Exception], ...] = RETRYABLE_RPC_ERRORS,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Retry an async call on ``retry_exceptions`` with exponential backoff.

    The last exception is re-raised once ``max_attempts`` is reached, so
    callers decide how an exhausted call is reported.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_exceptions),
        before_sleep=_log_before_sleep(max_attempts),
        reraise=True,
    )

"""Retry policies with exponential backoff for outbound HTTP calls."""

from typing import Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from gameprice.core.exceptions import DeliveryError


logger = structlog.get_logger(__name__)


# FlareSolverr can be restarting; only connection-level failures are retried
PROXY_RETRYABLE = (httpx.ConnectError, httpx.ConnectTimeout)

DELIVERY_RETRYABLE = (httpx.HTTPError, DeliveryError)


def _log_retry(retry_state) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "retrying_request",
        attempt=retry_state.attempt_number,
        error=str(exc) if exc else None,
    )


def proxy_retrying(max_attempts: int, wait: Optional[wait_base] = None) -> AsyncRetrying:
    """Retry policy for the FlareSolverr request.get call."""
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait or wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type(PROXY_RETRYABLE),
        before_sleep=_log_retry,
        reraise=True,
    )


def delivery_retrying(max_attempts: int = 2, wait: Optional[wait_base] = None) -> AsyncRetrying:
    """Retry policy for webhook delivery: one retry by default."""
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait or wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_exception_type(DELIVERY_RETRYABLE),
        before_sleep=_log_retry,
        reraise=True,
    )

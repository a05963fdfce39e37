"""Retry utilities using tenacity.

Operations passed to ``run_with_retry`` return a tagged ``AttemptOutcome``;
the retry controller dispatches on the tag instead of on exceptions.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from crawlapi.domain.config import RetryConfig
from crawlapi.domain.errors import BailError, CrawlApiError, TransientTransportError
from crawlapi.domain.models.outcome import AttemptOutcome, Retryable, Success, Terminal

logger = logging.getLogger(__name__)

Operation = Callable[[], Awaitable[AttemptOutcome]]

# 2 ** 62 * any sane base delay is far past any cap
_MAX_EXPONENT = 62


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


def compute_backoff_millis(retry_number: int, retry_config: RetryConfig, rand: Callable[[], float] = random.random) -> float:
    """Delay before retry ``retry_number`` (1-indexed), in milliseconds.

    ``base * 2^(n-1)`` capped at ``max_delay_millis``; with jitter the value is
    scaled by a uniform factor in [0.5, 1.5] and capped again.
    """
    exponent = min(max(retry_number - 1, 0), _MAX_EXPONENT)
    delay = min(retry_config.base_delay_millis * (2 ** exponent), retry_config.max_delay_millis)
    if retry_config.jitter:
        delay = delay * (0.5 + rand())
    return float(min(delay, retry_config.max_delay_millis))


class wait_backoff_with_jitter(wait_base):
    """Tenacity wait strategy backed by ``compute_backoff_millis``."""

    def __init__(self, retry_config: RetryConfig):
        self.retry_config = retry_config

    def __call__(self, retry_state: RetryCallState) -> float:
        return compute_backoff_millis(retry_state.attempt_number, self.retry_config) / 1000.0


def _is_retryable(outcome: Any) -> bool:
    return isinstance(outcome, Retryable)


def _outcome_error(retry_state: RetryCallState) -> BaseException | None:
    if retry_state.outcome is None:
        return None
    if retry_state.outcome.failed:
        return retry_state.outcome.exception()
    result = retry_state.outcome.result()
    return getattr(result, "error", None)


def _with_attempts(error: BaseException, attempts: int) -> BaseException:
    if isinstance(error, CrawlApiError):
        error.attempts = attempts
    return error


async def run_with_retry(operation: Operation, retry_config: RetryConfig, description: str = "API call") -> Any:
    """Run ``operation`` until it succeeds, fails terminally or retries run out.

    Args:
        operation: Zero-argument coroutine function returning an AttemptOutcome.
            Raising ``TransientTransportError`` counts as a retryable outcome,
            any other exception propagates immediately.
        retry_config: Retry policy for this call
        description: Used in log messages

    Returns:
        Value of the ``Success`` outcome

    Raises:
        The error of a ``Terminal`` outcome immediately (wrapped in BailError
        when it is not a CrawlApiError), or the last error once ``max_retries``
        retries have been used up.
    """
    max_attempts = retry_config.max_retries + 1
    attempts = 0

    async def _attempt() -> AttemptOutcome:
        nonlocal attempts
        attempts += 1
        return await operation()

    def _before_sleep_log(retry_state: RetryCallState) -> None:
        error = _outcome_error(retry_state)
        attempt = retry_state.attempt_number
        logger.warning(
            f"{description} failed (attempt {attempt}/{max_attempts}): {error}. "
            f"Retrying in {retry_state.next_action.sleep:.3f}s..."
        )

    def _on_exhausted(retry_state: RetryCallState) -> AttemptOutcome:
        if retry_state.outcome.failed:
            error = retry_state.outcome.exception()
            logger.error(f"{description} failed after {attempts} attempts: {error}")
            raise _with_attempts(error, attempts)
        return retry_state.outcome.result()

    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_backoff_with_jitter(retry_config),
        retry=retry_if_result(_is_retryable) | retry_if_exception_type(TransientTransportError),
        reraise=True,
        sleep=_sleep,
        before_sleep=_before_sleep_log,
        retry_error_callback=_on_exhausted,
    )

    outcome = await retrying(_attempt)

    if isinstance(outcome, Success):
        return outcome.value
    if isinstance(outcome, Terminal):
        logger.debug(f"{description} failed terminally on attempt {attempts}: {outcome.error}")
        if isinstance(outcome.error, CrawlApiError):
            raise _with_attempts(outcome.error, attempts)
        raise BailError(outcome.error, attempts=attempts)
    if isinstance(outcome, Retryable):
        logger.error(f"{description} failed after {attempts} attempts: {outcome.error}")
        raise _with_attempts(outcome.error, attempts)
    raise TypeError(f"Operation returned {type(outcome).__name__}, expected an AttemptOutcome")

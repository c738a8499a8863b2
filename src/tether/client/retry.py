"""Retry with linear or exponential backoff.

Attempts are sequential: wait, then try again. With ``attempts=3`` a
function that always fails with a retryable error is called exactly
three times and the third error is raised.
"""

import logging
from collections.abc import Awaitable, Callable

import anyio

from tether.client.errors import ClientError
from tether.config import RetryConfig

logger = logging.getLogger("tether.client")

type Sleep = Callable[[float], Awaitable[None]]


def calculate_retry_delay(attempt: int, config: RetryConfig) -> float:
    """Seconds to wait after failed *attempt* (1-based).

    Linear: ``delay``. Exponential: ``delay * 2 ** (attempt - 1)``.
    """
    if config.backoff == "linear":
        return config.delay
    return config.delay * 2 ** (attempt - 1)


def should_retry(error: ClientError, attempt: int, config: RetryConfig) -> bool:
    """Whether to try again after *error* on *attempt*.

    False once ``attempts`` is reached. Otherwise the custom
    ``retry_on`` predicate decides, falling back to
    ``ClientError.should_retry()``.
    """
    if attempt >= config.attempts:
        return False
    if config.retry_on is not None:
        return bool(config.retry_on(error, attempt))
    return error.should_retry()


async def with_retry[T](
    fn: Callable[[int], Awaitable[T]],
    config: RetryConfig | None,
    *,
    sleep: Sleep = anyio.sleep,
) -> T:
    """Call ``fn(attempt)`` until it succeeds or retrying stops.

    Only ``ClientError`` is retried; anything else propagates at once.
    Without a config, ``fn`` is called once.
    """
    if config is None:
        return await fn(1)

    attempt = 1
    while True:
        try:
            return await fn(attempt)
        except ClientError as exc:
            if not should_retry(exc, attempt, config):
                raise
            delay = calculate_retry_delay(attempt, config)
            logger.warning(
                "Retrying after %s (attempt %d/%d, waiting %.3fs)",
                exc.code or exc.status,
                attempt,
                config.attempts,
                delay,
            )
        await sleep(delay)
        attempt += 1

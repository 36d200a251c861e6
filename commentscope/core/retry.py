"""Bounded async retry with exponential backoff and jitter."""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Tuple, Type

logger = logging.getLogger(__name__)


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float = 30.0,
    factor: float = 2.0,
    jitter: bool = True,
) -> float:
    delay = min(base_delay * (factor ** attempt), max_delay)
    if jitter:
        delay = delay * (0.5 + random.random() * 0.5)
    return delay


async def retry_async(
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    retry_exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    **kwargs: Any,
) -> Any:
    """
    Await func(*args, **kwargs), retrying on retry_exceptions.

    Anything outside retry_exceptions propagates immediately. After
    max_attempts the last exception is re-raised.
    """
    name = getattr(func, "__name__", repr(func))
    for attempt in range(max_attempts):
        try:
            return await func(*args, **kwargs)
        except retry_exceptions as e:
            if attempt == max_attempts - 1:
                logger.error(f"{name} failed after {max_attempts} attempts: {e}")
                raise
            delay = backoff_delay(attempt, base_delay, max_delay)
            logger.warning(
                f"{name} failed on attempt {attempt + 1}, retrying in {delay:.2f}s: {e}"
            )
            await asyncio.sleep(delay)
    raise RuntimeError(f"{name} called with max_attempts={max_attempts}")

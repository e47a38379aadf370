"""
Decorators Module
Retry and timing decorators for coroutine functions
"""

import asyncio
import functools
import time
from typing import Callable, Tuple, Type
from .logger import logger


def retry(
    max_attempts: int = 3,
    initial_delay: float = 0.1,
    backoff_multiplier: float = 2.0,
    max_delay: float = 5.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,)
):
    """
    Retry a coroutine with exponential backoff

    Args:
        max_attempts: Total attempts including the first call
        initial_delay: Seconds to wait before the second attempt
        backoff_multiplier: Factor applied to the delay after each failure
        max_delay: Upper bound for the delay
        exceptions: Exception types that trigger a retry; anything else propagates at once
    """
    def decorator(func: Callable):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            delay = initial_delay

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(f"{func.__qualname__} failed after {max_attempts} attempts: {e}")
                        raise
                    logger.warning(
                        f"{func.__qualname__} attempt {attempt}/{max_attempts} failed: {e}. "
                        f"Retrying in {delay:.2f}s"
                    )
                    await asyncio.sleep(delay)
                    delay = min(delay * backoff_multiplier, max_delay)

        return wrapper

    return decorator


def timed(func: Callable):
    """Log how long a coroutine took at debug level"""
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        started = time.perf_counter()
        try:
            return await func(*args, **kwargs)
        finally:
            logger.debug(f"{func.__qualname__} took {time.perf_counter() - started:.3f}s")

    return wrapper

"""Decorator utilities for cross-cutting concerns."""
import time
import logging
import functools
from typing import Any, Callable, TypeVar, cast

# Setup logging
logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def async_log_execution_time(func: F) -> F:
    """Decorator to log how long an async call took, and whether it raised.

    Args:
        func: The async function to decorate

    Returns:
        Decorated async function that logs execution time
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(f"{func.__qualname__} failed after {duration_ms:.1f}ms: {str(e)}")
            raise
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"{func.__qualname__} completed in {duration_ms:.1f}ms")
        return result
    return cast(F, wrapper)

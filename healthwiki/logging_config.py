"""Logging setup and latency tracking for outbound calls."""

import inspect
import logging
import time
from functools import wraps
from typing import Callable, Optional, Union

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO):
    """Configure the root logger; unknown level names fall back to INFO."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def _report(logger: logging.Logger, operation_name: str, started: float, error: Optional[Exception] = None):
    latency_ms = (time.perf_counter() - started) * 1000
    line = f"{operation_name} | latency_ms={latency_ms:.2f}"
    if error is None:
        logger.info(f"{line} | status=success")
    else:
        logger.error(f"{line} | status=error | error={error}")


def log_latency(operation_name: str):
    """
    Log the duration and outcome of each call to the decorated function.

    Works on plain and async functions. Exceptions are logged and re-raised
    unchanged.
    """
    def decorator(func: Callable):
        logger = logging.getLogger(func.__module__)

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def timed(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _report(logger, operation_name, started, e)
                    raise
                _report(logger, operation_name, started)
                return result
        else:
            @wraps(func)
            def timed(*args, **kwargs):
                started = time.perf_counter()
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _report(logger, operation_name, started, e)
                    raise
                _report(logger, operation_name, started)
                return result

        return timed

    return decorator

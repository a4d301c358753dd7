"""Timing helpers for pipeline runs."""

import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from loguru import logger

P = ParamSpec("P")
R = TypeVar("R")


def timed(func: Callable[P, R]) -> Callable[P, R]:
    """Log how long every call of `func` took, at INFO level.

    Usage:
        @timed
        def process(self, handle, options):
            ...
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            logger.info(f"[PROFILE] {func.__qualname__} took {time.perf_counter() - start:.3f}s")

    return wrapper

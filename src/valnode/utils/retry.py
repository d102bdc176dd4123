# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/valnode/utils/retry.py

from __future__ import annotations

import time
import functools
from typing import Callable

from valnode.errors import ValnodeError


class RetryError(ValnodeError):
    pass


def retry(
    *,
    retries: int,
    delay: float,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[int, Exception], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    deadline: float | None = None,
    clock: Callable[[], float] = time.monotonic,
):
    """
    Retry decorator for idempotent operations.

    retries: number of attempts
    delay: seconds between attempts
    retry_on: exception types to retry
    on_retry: callback(attempt, exception)
    deadline: `clock()` value after which no further attempt starts
    """

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            last_exc = None
            for attempt in range(1, retries + 1):
                try:
                    return fn(*args, **kwargs)
                except retry_on as exc:
                    last_exc = exc
                    if on_retry:
                        on_retry(attempt, exc)
                    if attempt == retries:
                        break
                    pause = delay
                    if deadline is not None:
                        remaining = deadline - clock()
                        if remaining <= 0:
                            break
                        pause = min(delay, remaining)
                    sleep(pause)
            raise RetryError(f"{fn.__name__} failed after {attempt} attempt(s): {last_exc}") from last_exc
        return wrapper
    return decorator


def attempts_for(timeout: float, delay: float) -> int:
    """Number of attempts that fit in `timeout` seconds when waiting `delay` between them."""
    if delay <= 0:
        return 1
    return max(1, int(timeout // delay) + 1)

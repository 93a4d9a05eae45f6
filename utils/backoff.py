from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

T = TypeVar("T")


def poll_until(
    check: Callable[[], Optional[T]],
    *,
    timeout: float,
    initial_delay: float = 0.5,
    max_delay: float = 4.0,
    factor: float = 1.5,
    logger: Optional[logging.Logger] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> Optional[T]:
    """
    Call ``check`` until it returns something other than ``None`` or ``timeout``
    seconds pass. Delays between calls grow by ``factor`` up to ``max_delay``
    and never overshoot the deadline. Exceptions from ``check`` propagate.
    Returns the first non-``None`` result, or ``None`` on timeout.
    """
    deadline = clock() + timeout
    delay = initial_delay
    attempt = 0
    while True:
        attempt += 1
        result = check()
        if result is not None:
            return result
        remaining = deadline - clock()
        if remaining <= 0:
            if logger:
                logger.debug("Giving up after %s polls (%.1fs).", attempt, timeout)
            return None
        sleep(min(delay, remaining))
        delay = min(max_delay, delay * factor)

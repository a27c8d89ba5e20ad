"""Timer race for blocking network calls.

The call runs on its own single-worker executor and the caller waits on the
future with a timeout. When the timer wins, the deadline is cancelled, the
executor is shut down without waiting, and whatever the worker eventually
returns is dropped with the future.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DeadlineExceeded(Exception):
    """The timer won the race."""


class Deadline:
    """Cancellation token handed to the network call."""

    def __init__(self, timeout_ms: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.expires_at = clock() + max(0.0, timeout_ms) / 1000.0
        self._cancelled = threading.Event()

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self._cancelled.is_set() or self.remaining() <= 0.0

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def check(self) -> None:
        """Raise if the race is already lost; call after each blocking step."""
        if self.expired:
            raise DeadlineExceeded()


def call_with_deadline(
    fn: Callable[[Deadline], T],
    timeout_ms: float,
    name: Optional[str] = None,
) -> T:
    """Run ``fn(deadline)`` and return its result, or raise DeadlineExceeded.

    Exceptions raised by ``fn`` propagate unchanged.
    """
    deadline = Deadline(timeout_ms)
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name or "deadline")
    future = executor.submit(fn, deadline)
    try:
        result = future.result(timeout=deadline.remaining())
    except FuturesTimeoutError as e:
        if future.done() and future.exception() is e:
            # fn itself raised TimeoutError (the builtin alias on 3.11+)
            executor.shutdown(wait=False)
            raise
        deadline.cancel()
        future.cancel()
        executor.shutdown(wait=False, cancel_futures=True)
        logger.debug("%s lost the race after %sms", name or "call", timeout_ms)
        raise DeadlineExceeded() from None
    except BaseException:
        executor.shutdown(wait=False)
        raise
    executor.shutdown(wait=False)
    return result

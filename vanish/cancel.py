"""Cancellation token passed through client calls and the poller."""

from __future__ import annotations

import threading
import time
from typing import Callable

from .errors import CancelledError

CANCELLED = "cancelled"
DEADLINE_EXCEEDED = "deadline exceeded"


class CancelToken:
    """Cooperative cancellation signal with an optional deadline.

    ``cancel()`` may be called from any thread (a signal handler, a UI
    callback, another worker). Blocking waits made through :meth:`wait`
    return as soon as the token is cancelled or the deadline passes, and
    callbacks registered with :meth:`add_callback` run on cancellation.
    """

    def __init__(
        self,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = threading.Event()
        # cancel() may run from a signal handler while add_callback() holds the lock.
        self._lock = threading.RLock()
        self._callbacks: list[Callable[[], None]] = []
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None

    def cancel(self) -> None:
        with self._lock:
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` on cancel(); returns a function that unregisters it.

        The callback runs immediately when the token is already cancelled.
        Deadline expiry does not fire callbacks; watch :meth:`remaining` for it.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._discard(callback)
        callback()
        return lambda: None

    def _discard(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    @property
    def reason(self) -> str | None:
        """Why the token is done, or None while it is still live."""
        if self._event.is_set():
            return CANCELLED
        if self._deadline is not None and self._clock() >= self._deadline:
            return DEADLINE_EXCEEDED
        return None

    @property
    def cancelled(self) -> bool:
        return self.reason is not None

    def remaining(self) -> float | None:
        """Seconds left before the deadline; None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._clock())

    def raise_if_cancelled(self) -> None:
        reason = self.reason
        if reason is not None:
            raise CancelledError(reason)

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; return True if the token is done."""
        remaining = self.remaining()
        if remaining is not None:
            seconds = min(seconds, remaining)
        self._event.wait(max(0.0, seconds))
        return self.cancelled

# ------------------------------------------------------------
# Module: inferlink/client/cancel.py
# Purpose: Cancellation token with an optional deadline timer.
# ------------------------------------------------------------

"""Cooperative cancellation for long-running network transfers.

A `CancelToken` is shared between the consumer of a transfer and the code
driving it. Either side may cancel; the transfer checks the token before and
after every blocking read. An optional deadline arms a `threading.Timer` that
cancels the token with reason `"timeout"`.

Notes
-----
- `clear()` must be called on every exit path; it cancels the timer thread so
  repeated calls do not leak timers.
- Callbacks registered with `on_cancel` run once, on the cancelling thread.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

CANCELLED = "cancelled"
TIMEOUT = "timeout"


class CancelToken:
    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._callbacks: list[Callable[[], None]] = []
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def cancel(self, reason: str = CANCELLED) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self.reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for cb in callbacks:
            try:
                cb()
            except Exception:
                # a failing abort hook must not mask the cancellation itself
                logger.debug("cancel.callback_failed", exc_info=True)

    def start_deadline(self, seconds: float) -> None:
        """Cancel with reason `timeout` after `seconds` unless cleared first."""
        with self._lock:
            if self._timer is not None or self._event.is_set():
                return
            timer = threading.Timer(seconds, self.cancel, args=(TIMEOUT,))
            timer.daemon = True
            self._timer = timer
        timer.start()

    def clear(self) -> None:
        """Stop the deadline timer and drop callbacks; safe to call repeatedly."""
        with self._lock:
            timer, self._timer = self._timer, None
            self._callbacks = []
        if timer is not None:
            timer.cancel()

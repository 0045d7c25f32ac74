# ------------------------------------------------------------
# Module: inferlink/client/retry.py
# Purpose: Exponential-backoff retry wrapper for non-idempotent network operations.
# ------------------------------------------------------------

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Seconds to wait after failed attempt number `attempt` (0-based)."""
    return (2**attempt) * base_delay


def retry(
    operation: Callable[[], T],
    max_retries: int,
    *,
    base_delay: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
    lad: logging.Logger | logging.LoggerAdapter | None = None,
) -> T:
    """Run `operation` up to `max_retries + 1` times.

    After failed attempt `n` (0-based) the caller's thread sleeps
    `2**n * base_delay` seconds. When the final attempt fails, the very
    exception it raised is re-raised. Exceptions outside `retry_on`
    propagate immediately.

    Note: operations are re-issued in full (a retried generation resends the
    whole prompt).
    """
    log = lad or logger
    attempt = 0
    while True:
        try:
            return operation()
        except retry_on as exc:
            if attempt >= max_retries:
                log.warning(
                    "llm.retry.exhausted",
                    extra={"attempts": attempt + 1, "error": str(exc)[:200]},
                )
                raise
            delay = backoff_delay(attempt, base_delay)
            log.info(
                "llm.retry",
                extra={"attempt": attempt + 1, "delay_s": delay, "error": str(exc)[:200]},
            )
            sleep(delay)
            attempt += 1

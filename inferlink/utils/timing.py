# ------------------------------------------------------------
# Module: inferlink/utils/timing.py
# Purpose: Provide timing utilities and context-based logging for performance tracking.
# ------------------------------------------------------------

"""Lightweight utilities for timing measurements and structured log timing.

Responsibilities
----------------
- Measure elapsed time in milliseconds for `dur_ms` log fields.
- Provide a context manager that logs start, success and failure with durations.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager


def ms_since(t0: float) -> int:
    """Whole milliseconds elapsed since a `time.perf_counter()` reading."""
    return int((time.perf_counter() - t0) * 1000)


@contextmanager
def log_timer(msg: str, logger: logging.Logger | logging.LoggerAdapter | None = None, **ctx):
    """
    Log a start/ok/failed message with elapsed time.

    Usage:
        with log_timer("analysis.summary", lad, chars=len(text)):
            ...
    """
    log = logger or logging.getLogger(__name__)
    t0 = time.perf_counter()
    log.info("%s start", msg, extra=ctx)
    try:
        yield
    except Exception:
        log.warning("%s failed after %dms", msg, ms_since(t0), extra=ctx)
        raise
    else:
        log.info("%s ok in %dms", msg, ms_since(t0), extra=ctx)

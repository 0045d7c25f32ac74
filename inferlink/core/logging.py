# ------------------------------------------------------------
# Module: inferlink/core/logging.py
# Purpose: Centralized configuration for unified logging across the client and API.
# ------------------------------------------------------------

"""Configure unified, stdout-based logging for inferlink.

Responsibilities
----------------
- Initialize a single consistent logging setup at startup.
- Respect toggles from `settings` (log level, mute, access logs).
- Align Uvicorn's loggers with the app-level configuration.
- Quiet `urllib3` connection-pool chatter below WARNING.

Notes
-----
- `basicConfig` is idempotent unless `force=True`.
- Library code only calls `logging.getLogger(__name__)`; it never configures handlers.
"""

import logging
import sys

from inferlink.core.config import Settings, settings as _settings


def configure_logging(settings: Settings = _settings) -> None:
    """Initialize global logging once at startup.

    Notes
    -----
    - Hard-mutes all logs if `MUTE_ALL_LOGS` is set.
    - Ensures stdout formatting for container log aggregation.
    """
    # Hard mute for CI/benchmarks: disables ALL logging below CRITICAL globally.
    if settings.MUTE_ALL_LOGS:
        logging.disable(logging.CRITICAL)
        return

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
    )

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(settings.LOG_LEVEL)

    # requests/urllib3 log every pooled connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    if not settings.ACCESS_LOG:
        logging.getLogger("uvicorn.access").disabled = True

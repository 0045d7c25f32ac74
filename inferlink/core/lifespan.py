# ------------------------------------------------------------
# Module: inferlink/core/lifespan.py
# Purpose: Manage FastAPI startup and shutdown of the shared inference client.
# ------------------------------------------------------------

"""FastAPI lifespan context for startup and shutdown events.

Responsibilities
----------------
- Connect the shared `OllamaService` held on `app.state.service` at startup.
- Load `settings.GEN_MODEL` when one is configured and the server answered.
- Disconnect (closing the pooled session) at shutdown.

Notes
-----
- An unreachable server does not abort startup; readiness reports it instead.
- A failed model load is logged; callers can load one through `/v1/models/load`.
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI

from inferlink.core.config import settings
from inferlink.core.errors import LLMServiceError

logger = logging.getLogger("inferlink.lifespan")


@asynccontextmanager
async def lifespan(app: FastAPI):
    t0 = time.perf_counter()
    service = app.state.service
    try:
        logger.info("startup begin")
        if service.connect() and settings.GEN_MODEL:
            try:
                service.load_model(settings.GEN_MODEL)
            except LLMServiceError:
                logger.exception("startup model load failed")
        logger.info("startup ok duration_ms=%.1f", (time.perf_counter() - t0) * 1000)
        yield
    finally:
        try:
            logger.info("shutdown begin")
            service.disconnect()
            logger.info("shutdown ok")
        except Exception:
            logger.exception("shutdown failed")

# ------------------------------------------------------------
# Module: inferlink/api/v1/health.py
# Purpose: Liveness and readiness endpoints backed by the Ollama probe.
# ------------------------------------------------------------

"""Health check endpoints.

Details:
    - `/v1/health/live` answers 200 whenever the process is serving requests.
    - `/v1/health/ready` probes the inference server (`/api/version`, `/api/tags`)
      and returns 200 `{"status": "ready", ...}` or 503 `{"status": "degraded"}`.
    - Probes never raise; a failed probe is a degraded status, not an error.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from inferlink.api.deps import get_service
from inferlink.client.ollama_client import OllamaService

router: APIRouter = APIRouter()
log = logging.getLogger("inferlink.api.health")


@router.get("/live")
def live() -> dict[str, str]:
    return {"status": "alive"}


@router.get("/ready")
def ready(res: Response, service: OllamaService = Depends(get_service)) -> dict:
    """Readiness probe.

    Example:
        GET /v1/health/ready -> {"status": "ready", "version": "0.1.32", "models": 3}
        (if unreachable) -> 503 {"status": "degraded"}
    """
    status = service.get_connection_status()
    if not status.connected:
        log.warning("ready check degraded", extra={"url": service.base_url})
        res.status_code = 503
        return {"status": "degraded"}
    log.info("ready check ok")
    return {
        "status": "ready",
        "version": status.version,
        "models": status.models,
        "current_model": service.get_current_model(),
    }

# ------------------------------------------------------------
# Module: inferlink/api/routes.py
# Purpose: Compose and expose all v1 FastAPI routers.
# ------------------------------------------------------------

"""Central composition root for versioned API routing.

Mounts domain sub-routers under /v1 with a stable inclusion order so OpenAPI
groups remain predictable across builds.
"""

from __future__ import annotations

from fastapi import APIRouter

from inferlink.api.v1.analysis import router as analysis_router
from inferlink.api.v1.generate import router as generate_router
from inferlink.api.v1.health import router as health_router
from inferlink.api.v1.models import router as models_router
from inferlink.api.v1.prompts import router as prompts_router

# inferlink.main mounts this under /v1
router: APIRouter = APIRouter()

# tags double as doc group names
router.include_router(health_router, prefix="/health", tags=["health"])
router.include_router(models_router, prefix="/models", tags=["models"])
router.include_router(prompts_router, prefix="/prompts", tags=["prompts"])
router.include_router(generate_router, prefix="/generate", tags=["generate"])
router.include_router(analysis_router, prefix="/analysis", tags=["analysis"])

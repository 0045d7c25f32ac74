# ------------------------------------------------------------
# Module: inferlink/main.py
# Purpose: FastAPI application factory for the inference gateway.
# ------------------------------------------------------------

"""Application entry point.

Run with:
    uvicorn inferlink.main:app --reload

`create_app()` accepts pre-built collaborators so tests can inject a client
backed by a fake HTTP session.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inferlink.api.errors import install_error_handlers
from inferlink.api.routes import router as v1_router
from inferlink.client.ollama_client import OllamaService
from inferlink.core.config import settings
from inferlink.core.lifespan import lifespan
from inferlink.core.logging import configure_logging
from inferlink.prompts.manager import PromptManager


def create_app(service: OllamaService | None = None, prompts: PromptManager | None = None) -> FastAPI:
    configure_logging()

    app = FastAPI(title="inferlink", version="0.3.0", lifespan=lifespan)
    app.state.service = service or OllamaService.from_settings(settings)
    app.state.prompts = prompts or PromptManager()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)
    app.include_router(v1_router, prefix="/v1")
    return app


app = create_app()

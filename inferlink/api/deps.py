# ------------------------------------------------------------
# Module: inferlink/api/deps.py
# Purpose: FastAPI dependencies resolving shared objects from app.state.
# ------------------------------------------------------------

from __future__ import annotations

import logging
import uuid

from fastapi import Request

from inferlink.client.ollama_client import OllamaService
from inferlink.prompts.manager import PromptManager
from inferlink.services.analysis import DocumentAnalysisService
from inferlink.utils.logging_extras import log_adapter


def get_service(request: Request) -> OllamaService:
    return request.app.state.service


def get_prompts(request: Request) -> PromptManager:
    return request.app.state.prompts


def correlation_id(request: Request) -> str:
    return request.headers.get("x-correlation-id") or str(uuid.uuid4())


def request_logger(request: Request, name: str) -> logging.LoggerAdapter:
    return log_adapter(logging.getLogger(name), correlation_id(request))


def get_analysis(request: Request) -> DocumentAnalysisService:
    return DocumentAnalysisService(
        get_service(request), get_prompts(request), lad=request_logger(request, "inferlink.api.analysis")
    )

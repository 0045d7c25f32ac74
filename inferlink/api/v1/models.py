# ------------------------------------------------------------
# Module: inferlink/api/v1/models.py
# Purpose: Model catalog endpoints: list, current, load.
# ------------------------------------------------------------

"""
Error Model (HTTP)
------------------
- 503 -> inference server unreachable
- 502 -> server answered with an error (e.g. unknown model on load)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from inferlink.api.deps import get_service, request_logger
from inferlink.api.v1.schemas import CurrentModel, LoadModelRequest
from inferlink.client.ollama_client import OllamaService
from inferlink.client.types import ModelDescriptor

router = APIRouter()


@router.get("", response_model=list[ModelDescriptor])
def list_models(service: OllamaService = Depends(get_service)) -> list[ModelDescriptor]:
    return service.get_available_models()


@router.get("/current", response_model=CurrentModel)
def current_model(service: OllamaService = Depends(get_service)) -> CurrentModel:
    return CurrentModel(model=service.get_current_model())


@router.post("/load", response_model=CurrentModel)
def load_model(
    body: LoadModelRequest, request: Request, service: OllamaService = Depends(get_service)
) -> CurrentModel:
    lad = request_logger(request, "inferlink.api.models")
    lad.info("models.load", extra={"model": body.name})
    service.load_model(body.name)
    return CurrentModel(model=service.get_current_model())

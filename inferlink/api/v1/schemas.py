# ------------------------------------------------------------
# Module: inferlink/api/v1/schemas.py
# Purpose: Request/response bodies for the v1 HTTP surface.
# ------------------------------------------------------------

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from inferlink.client.types import GenerationOptions
from inferlink.prompts.types import RenderContext


class LoadModelRequest(BaseModel):
    name: str = Field(..., min_length=1)


class CurrentModel(BaseModel):
    model: str | None = None


class RenderRequest(BaseModel):
    variables: dict[str, Any] = Field(default_factory=dict)
    context: RenderContext | None = None


class RenderResponse(BaseModel):
    template_id: str
    content: str
    token_count: int
    truncated: bool


class GenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    options: GenerationOptions | None = None


class GenerateResponse(BaseModel):
    model: str | None
    response: str


class AnalyzeRequest(BaseModel):
    content: str = Field(..., min_length=1)
    analysis_type: str = Field(..., min_length=1)
    options: GenerationOptions | None = None
    context: RenderContext | None = None


class RequirementsRequest(BaseModel):
    content: str = Field(..., min_length=1)
    options: GenerationOptions | None = None


class SummaryRequest(BaseModel):
    content: str = Field(..., min_length=1)
    length: str = "medium"
    audience: str | None = None
    include_key_points: bool | None = None
    options: GenerationOptions | None = None


class SummaryResponse(BaseModel):
    summary: str


class EstimateRequest(BaseModel):
    requirements: list[dict[str, Any]]
    hourly_rate: float | None = Field(None, gt=0)
    options: GenerationOptions | None = None

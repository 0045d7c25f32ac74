# ------------------------------------------------------------
# Module: inferlink/api/v1/analysis.py
# Purpose: Document analysis endpoints backed by DocumentAnalysisService.
# ------------------------------------------------------------

"""
Responsibilities
----------------
- Run an analysis type over a document and return the wrapped result.
- Extract requirements, summarize, and estimate effort.

Error Model (HTTP)
------------------
- 409 -> no model loaded
- 422 -> unknown analysis type or variables rejected by the template
- 502 -> the model call failed after retries
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from inferlink.api.deps import get_analysis
from inferlink.api.v1.schemas import (
    AnalyzeRequest,
    EstimateRequest,
    RequirementsRequest,
    SummaryRequest,
    SummaryResponse,
)
from inferlink.services.analysis import DocumentAnalysisService
from inferlink.services.types import AnalysisResult, Requirement

router = APIRouter()


@router.post("", response_model=AnalysisResult)
def analyze(body: AnalyzeRequest, analysis: DocumentAnalysisService = Depends(get_analysis)) -> AnalysisResult:
    return analysis.analyze_document(body.content, body.analysis_type, body.options, body.context)


@router.post("/requirements", response_model=list[Requirement])
def extract_requirements(
    body: RequirementsRequest, analysis: DocumentAnalysisService = Depends(get_analysis)
) -> list[Requirement]:
    return analysis.extract_requirements(body.content, body.options)


@router.post("/summary", response_model=SummaryResponse)
def summarize(body: SummaryRequest, analysis: DocumentAnalysisService = Depends(get_analysis)) -> SummaryResponse:
    summary = analysis.summarize_content(
        body.content,
        body.length,
        body.options,
        audience=body.audience,
        include_key_points=body.include_key_points,
    )
    return SummaryResponse(summary=summary)


@router.post("/estimate")
def estimate(body: EstimateRequest, analysis: DocumentAnalysisService = Depends(get_analysis)) -> dict[str, Any]:
    return analysis.generate_estimate(body.requirements, body.options, hourly_rate=body.hourly_rate)

# ------------------------------------------------------------
# Module: inferlink/services/types.py
# Purpose: Result contracts returned by the document analysis facade.
# ------------------------------------------------------------

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ANALYSIS_VERSION = "1.0.0"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class AnalysisMetadata(_CamelModel):
    model: str
    processing_time_ms: int
    tokens_used: int
    prompt_tokens: int = 0
    truncated: bool = False
    version: str = ANALYSIS_VERSION
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class AnalysisResult(_CamelModel):
    type: str
    summary: str
    key_points: list[str] = Field(default_factory=list)
    action_items: list[str] = Field(default_factory=list)
    confidence: float = 0.8
    # parsed JSON when the reply carried any, else the raw text
    data: Any = None
    metadata: AnalysisMetadata


class Requirement(_CamelModel):
    """One extracted requirement; model replies use camelCase keys."""

    # models often emit numeric ids
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", coerce_numbers_to_str=True
    )

    id: str = ""
    type: str = "functional"
    priority: str = "medium"
    description: str = ""
    acceptance_criteria: list[str] = Field(default_factory=list)
    category: str | None = None
    complexity: int | None = None
    estimated_hours: float | None = None

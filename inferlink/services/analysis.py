# ------------------------------------------------------------
# Module: inferlink/services/analysis.py
# Purpose: Document analysis facade: template selection, rendering, generation with retry, JSON parsing.
# ------------------------------------------------------------

"""Document analysis service.

Composes a `PromptManager` and an `OllamaService`. Each operation selects the
template registered for an analysis type, renders it under the token budget,
calls the model (retrying transient failures) and parses JSON-shaped answers.

Analysis types
--------------
| type         | template                | content variable |
|--------------|-------------------------|------------------|
| requirements | requirements-extraction | content          |
| summary      | document-summary        | content          |
| estimation   | project-estimation      | requirements     |
| codebase     | codebase-analysis       | structure        |
| structure    | document-structure      | content          |

Error policy
------------
- Precondition failures propagate unchanged: unknown template or analysis
  type, invalid variables, no model loaded.
- Every other failure is raised once as `AnalysisError("Failed to <op>: ...")`.
- Only `LLMConnectionError` and `UpstreamError` are retried.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from inferlink.client.ollama_client import OllamaService
from inferlink.client.stream import GenerationStream
from inferlink.client.types import GenerationOptions
from inferlink.core.errors import (
    AnalysisError,
    LLMConnectionError,
    NoModelLoaded,
    ResponseParseError,
    TemplateNotFound,
    TemplateValidationError,
    UnsupportedAnalysisType,
    UpstreamError,
    VariableValidationError,
)
from inferlink.prompts.manager import PromptManager
from inferlink.prompts.types import PromptTemplate, RenderContext, RenderedPrompt
from inferlink.services.json_extract import extract_json
from inferlink.services.types import AnalysisMetadata, AnalysisResult, Requirement
from inferlink.utils.timing import log_timer, ms_since

logger = logging.getLogger(__name__)

# analysis type -> (preferred template id, variable receiving the content)
ANALYSIS_BINDINGS: dict[str, tuple[str, str]] = {
    "requirements": ("requirements-extraction", "content"),
    "summary": ("document-summary", "content"),
    "estimation": ("project-estimation", "requirements"),
    "codebase": ("codebase-analysis", "structure"),
    "structure": ("document-structure", "content"),
}

# Extra variables a bare analyze_document call needs to satisfy the template schema.
ANALYSIS_DEFAULTS: dict[str, dict[str, Any]] = {
    "summary": {"length": "medium"},
}

PRECONDITION_ERRORS = (
    TemplateNotFound,
    TemplateValidationError,
    VariableValidationError,
    NoModelLoaded,
    UnsupportedAnalysisType,
)
TRANSIENT_ERRORS = (LLMConnectionError, UpstreamError)

DEFAULT_HOURLY_RATE = 100
HOURS_PER_REQUIREMENT = 8

Options = GenerationOptions | Mapping[str, Any] | None


def _string_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value if v is not None]
    return []


class DocumentAnalysisService:
    def __init__(
        self,
        client: OllamaService,
        prompts: PromptManager | None = None,
        lad: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.client = client
        self.prompts = prompts or PromptManager()
        self.lad = lad or logger

    # ---- plumbing ------------------------------------------------------

    def _template_for(self, analysis_type: str) -> PromptTemplate:
        if analysis_type not in ANALYSIS_BINDINGS:
            raise UnsupportedAnalysisType(analysis_type)
        template_id, _ = ANALYSIS_BINDINGS[analysis_type]
        template = self.prompts.get_template(template_id)
        if template is not None:
            return template
        # fall back to any template registered under the same analysis type
        candidates = self.prompts.list_templates(analysis_type)
        if not candidates:
            raise UnsupportedAnalysisType(analysis_type)
        return candidates[0]

    def _render(
        self,
        analysis_type: str,
        content: str,
        extra: Mapping[str, Any] | None = None,
        context: RenderContext | Mapping[str, Any] | None = None,
    ) -> RenderedPrompt:
        template = self._template_for(analysis_type)
        _, content_var = ANALYSIS_BINDINGS[analysis_type]
        variables = {**ANALYSIS_DEFAULTS.get(analysis_type, {}), **(extra or {}), content_var: content}
        # drop unset optionals so template defaults apply
        variables = {k: v for k, v in variables.items() if v is not None}
        return self.prompts.render_prompt(template.id, variables, context)

    def _generate(self, prompt: str, options: Options) -> str:
        return self.client.retry(
            lambda: self.client.generate_text(prompt, options),
            retry_on=TRANSIENT_ERRORS,
        )

    def _fail(self, operation: str, exc: Exception) -> AnalysisError:
        self.lad.warning("analysis.failed", extra={"operation": operation, "error": str(exc)[:200]})
        return AnalysisError(f"Failed to {operation}: {exc}", operation=operation)

    # ---- operations ----------------------------------------------------

    def analyze_document(
        self,
        content: str,
        analysis_type: str,
        options: Options = None,
        context: RenderContext | Mapping[str, Any] | None = None,
    ) -> AnalysisResult:
        """Run one analysis type over `content` and wrap the reply with metadata.

        `data` holds the parsed JSON when the reply contains any, else the raw
        text; `key_points` / `action_items` are lifted from a JSON object reply.
        """
        rendered = self._render(analysis_type, content, context=context)
        t0 = time.perf_counter()
        try:
            with log_timer("analysis.document", self.lad, analysis_type=analysis_type, chars=len(content)):
                response = self._generate(rendered.content, options)
        except PRECONDITION_ERRORS:
            raise
        except Exception as exc:
            raise self._fail("analyze document", exc) from exc

        try:
            data: Any = extract_json(response)
        except ResponseParseError:
            data = response

        summary = response
        key_points: list[str] = []
        action_items: list[str] = []
        if isinstance(data, dict):
            summary = str(data.get("summary") or response)
            key_points = _string_list(data.get("keyPoints", data.get("key_points")))
            action_items = _string_list(data.get("actionItems", data.get("action_items")))

        return AnalysisResult(
            type=analysis_type,
            summary=summary,
            key_points=key_points,
            action_items=action_items,
            data=data,
            metadata=AnalysisMetadata(
                model=self.client.get_current_model() or "unknown",
                processing_time_ms=ms_since(t0),
                tokens_used=self.prompts.estimate_tokens(response),
                prompt_tokens=rendered.token_count,
                truncated=rendered.truncated,
            ),
        )

    def extract_requirements(self, content: str, options: Options = None) -> list[Requirement]:
        """Extract requirements as a list; an unparseable reply becomes one requirement."""
        rendered = self._render("requirements", content)
        try:
            with log_timer("analysis.requirements", self.lad, chars=len(content)):
                response = self._generate(rendered.content, options)
        except PRECONDITION_ERRORS:
            raise
        except Exception as exc:
            raise self._fail("extract requirements", exc) from exc

        try:
            parsed = extract_json(response)
        except ResponseParseError:
            self.lad.info("analysis.requirements.unparsed", extra={"chars": len(response)})
            return [Requirement(id="REQ-001", description=response.strip(), complexity=1, estimated_hours=0)]

        items = parsed if isinstance(parsed, list) else [parsed]
        requirements: list[Requirement] = []
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                continue
            try:
                req = Requirement.model_validate(item)
            except ValidationError as exc:
                self.lad.debug("analysis.requirements.skipped", extra={"index": i, "error": str(exc)[:200]})
                continue
            if not req.id:
                req.id = f"REQ-{i + 1:03d}"
            requirements.append(req)
        return requirements

    def summarize_content(
        self,
        content: str,
        length: str = "medium",
        options: Options = None,
        audience: str | None = None,
        include_key_points: bool | None = None,
    ) -> str:
        rendered = self._render(
            "summary",
            content,
            {"length": length, "audience": audience, "include_key_points": include_key_points},
        )
        try:
            with log_timer("analysis.summary", self.lad, chars=len(content), length=length):
                return self._generate(rendered.content, options).strip()
        except PRECONDITION_ERRORS:
            raise
        except Exception as exc:
            raise self._fail("summarize content", exc) from exc

    def generate_estimate(
        self,
        requirements: Sequence[Requirement | Mapping[str, Any]] | str,
        options: Options = None,
        hourly_rate: float | None = None,
    ) -> dict[str, Any]:
        """Ask the model for a project estimate.

        A reply without a JSON object falls back to a count-based estimate
        (8 hours per requirement at the hourly rate) with confidence 0.5.
        """
        if isinstance(requirements, str):
            text = requirements
            count = 0
        else:
            items = [r.model_dump(by_alias=True, exclude_none=True) if isinstance(r, Requirement) else dict(r)
                     for r in requirements]
            text = json.dumps(items, indent=2, default=str)
            count = len(items)

        rendered = self._render("estimation", text, {"hourly_rate": hourly_rate})
        try:
            with log_timer("analysis.estimate", self.lad, requirements=count):
                response = self._generate(rendered.content, options)
        except PRECONDITION_ERRORS:
            raise
        except Exception as exc:
            raise self._fail("generate estimate", exc) from exc

        try:
            parsed = extract_json(response)
        except ResponseParseError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed

        self.lad.info("analysis.estimate.fallback", extra={"requirements": count})
        rate = hourly_rate if hourly_rate is not None else DEFAULT_HOURLY_RATE
        hours = count * HOURS_PER_REQUIREMENT
        return {
            "totalHours": hours,
            "totalCost": hours * rate,
            "breakdown": [],
            "risks": [],
            "assumptions": ["Estimate based on requirement count"],
            "confidence": 0.5,
        }

    def stream_analysis(self, content: str, analysis_type: str, options: Options = None) -> GenerationStream:
        """Render the analysis prompt and return a text stream (not retried)."""
        rendered = self._render(analysis_type, content)
        try:
            return self.client.generate_text_stream(rendered.content, options)
        except PRECONDITION_ERRORS:
            raise
        except Exception as exc:
            raise self._fail("stream analysis", exc) from exc

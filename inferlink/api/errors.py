# ------------------------------------------------------------
# Module: inferlink/api/errors.py
# Purpose: Map service exceptions onto HTTP status codes and JSON error bodies.
# ------------------------------------------------------------

"""HTTP error model.

| exception                                     | status |
|-----------------------------------------------|--------|
| TemplateNotFound                              | 404    |
| Template/Variable validation, analysis type   | 422    |
| NoModelLoaded                                 | 409    |
| LLMConnectionError                            | 503    |
| any other LLMServiceError                     | 502    |

Bodies are `{"detail": <message>, "code": <kind>}` plus `errors` for
validation failures.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from inferlink.core.errors import (
    LLMConnectionError,
    LLMServiceError,
    NoModelLoaded,
    TemplateNotFound,
    TemplateValidationError,
    UnsupportedAnalysisType,
    VariableValidationError,
)

log = logging.getLogger("inferlink.api.errors")

# first match wins; order from most to least specific
STATUS_BY_ERROR: tuple[tuple[type[LLMServiceError], int, str], ...] = (
    (TemplateNotFound, 404, "template_not_found"),
    (TemplateValidationError, 422, "invalid_template"),
    (VariableValidationError, 422, "invalid_variables"),
    (UnsupportedAnalysisType, 422, "unsupported_analysis_type"),
    (NoModelLoaded, 409, "no_model_loaded"),
    (LLMConnectionError, 503, "llm_unavailable"),
)


def status_for(exc: LLMServiceError) -> tuple[int, str]:
    for kind, status, code in STATUS_BY_ERROR:
        if isinstance(exc, kind):
            return status, code
    return 502, "llm_error"


def error_body(exc: LLMServiceError) -> dict:
    _, code = status_for(exc)
    body: dict = {"detail": str(exc), "code": code}
    errors = getattr(exc, "errors", None)
    if errors:
        body["errors"] = [e.model_dump() for e in errors]
    return body


async def service_error_handler(request: Request, exc: LLMServiceError) -> JSONResponse:
    status, code = status_for(exc)
    log.warning("request failed", extra={"path": request.url.path, "status": status, "code": code})
    return JSONResponse(status_code=status, content=error_body(exc))


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(LLMServiceError, service_error_handler)

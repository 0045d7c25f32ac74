# ------------------------------------------------------------
# Module: inferlink/core/errors.py
# Purpose: Typed exceptions for the LLM client, prompt registry and facade.
# ------------------------------------------------------------

"""Exception types for the inference client and prompt layer.

These provide specific, readable errors for common failure modes and keep the
call sites simple to reason about.

Responsibilities
----------------
- Provide a base `LLMServiceError` for catch-all handling.
- Separate transport failures (`LLMConnectionError`) from bad replies (`UpstreamError`).
- Aggregate template/variable violations into a single raised error.
- Offer `wrap_error` so callers prefix the operation name without losing the kind.

Notes
-----
- `StreamDecodeError` is recorded by the NDJSON decoder, never raised by a stream.
"""

from __future__ import annotations

from typing import Any


class LLMServiceError(Exception):
    """Base class for inference client and prompt failures."""

    def __init__(self, message: str, *, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class LLMConnectionError(LLMServiceError, ConnectionError):
    """Raised on network failure or timeout reaching the endpoint."""


class UpstreamError(LLMServiceError):
    """Raised on a non-2xx status or an unparseable reply body."""

    def __init__(
        self, message: str, *, operation: str | None = None, status: int | None = None
    ):
        super().__init__(message, operation=operation)
        self.status = status


class NoModelLoaded(LLMServiceError):
    """Raised when generation is attempted before a model is loaded."""

    def __init__(self, message: str = "No model loaded. Please load a model first."):
        super().__init__(message, operation="generate")


class TemplateNotFound(LLMServiceError, KeyError):
    """Raised when a template id is not registered."""

    def __init__(self, template_id: str):
        super().__init__(f"Template with id '{template_id}' not found")
        self.template_id = template_id

    # KeyError.__str__ would repr() the message
    def __str__(self) -> str:
        return self.args[0]


class TemplateValidationError(LLMServiceError, ValueError):
    """Raised when a template fails structural validation on register/update."""

    def __init__(self, errors: list[Any], warnings: list[Any] | None = None, *, prefix="Invalid template"):
        messages = ", ".join(e.message for e in errors)
        super().__init__(f"{prefix}: {messages}")
        self.errors = list(errors)
        self.warnings = list(warnings or [])


class VariableValidationError(LLMServiceError, ValueError):
    """Raised when render variables violate the template's declared schema."""

    def __init__(self, errors: list[Any]):
        messages = ", ".join(e.message for e in errors)
        super().__init__(f"Invalid variables: {messages}")
        self.errors = list(errors)


class UnsupportedAnalysisType(LLMServiceError, ValueError):
    """Raised when no template serves the requested analysis type."""

    def __init__(self, analysis_type: str):
        super().__init__(f"Unsupported analysis type: {analysis_type!r}")
        self.analysis_type = analysis_type


class StreamDecodeError(LLMServiceError):
    """A single NDJSON line that could not be decoded (skipped, not raised)."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"Skipped undecodable stream line: {reason}")
        self.line = line
        self.reason = reason


class ResponseParseError(LLMServiceError, ValueError):
    """Raised when no JSON object/array can be recovered from a model reply."""


class AnalysisError(LLMServiceError):
    """Single wrapped failure surfaced by a facade operation."""


def wrap_error(operation: str, exc: BaseException) -> LLMServiceError:
    """Return a new error of the same service kind, prefixed with the operation.

    Transport and upstream errors keep their class (and status); anything else
    becomes a plain `LLMServiceError`.
    """
    message = f"Failed to {operation}: {exc}"
    if isinstance(exc, UpstreamError):
        return UpstreamError(message, operation=operation, status=exc.status)
    if isinstance(exc, LLMConnectionError):
        return LLMConnectionError(message, operation=operation)
    return LLMServiceError(message, operation=operation)

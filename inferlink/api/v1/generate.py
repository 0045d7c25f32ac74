# ------------------------------------------------------------
# Module: inferlink/api/v1/generate.py
# Purpose: Blocking and SSE-streaming text generation endpoints.
# ------------------------------------------------------------

"""
This module exposes the client's generation engine over HTTP. The streaming
route is a thin SSE adapter around `OllamaService.generate_text_stream`.

Responsibilities
----------------
- `POST /generate`: blocking generation, returns the full text.
- `POST /generate/stream`: Server-Sent Events, one `data: {"delta": ...}` frame
  per chunk, then `event: done`.
- Pull the first chunk before the response starts, so that "no model",
  connection and upstream failures still map to HTTP status codes.
- Report mid-stream failures as an `event: error` frame and close the transfer.
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from inferlink.api.deps import get_service, request_logger
from inferlink.api.v1.schemas import GenerateRequest, GenerateResponse
from inferlink.client.ollama_client import OllamaService
from inferlink.core.errors import LLMServiceError

router = APIRouter()


def _frame(payload: dict, event: str | None = None) -> str:
    head = f"event: {event}\n" if event else ""
    return f"{head}data: {json.dumps(payload)}\n\n"


@router.post("", response_model=GenerateResponse)
def generate(
    body: GenerateRequest, request: Request, service: OllamaService = Depends(get_service)
) -> GenerateResponse:
    lad = request_logger(request, "inferlink.api.generate")
    lad.info("generate start", extra={"prompt_chars": len(body.prompt)})
    text = service.generate_text(body.prompt, body.options)
    return GenerateResponse(model=service.get_current_model(), response=text)


@router.post("/stream")
def generate_stream(body: GenerateRequest, request: Request, service: OllamaService = Depends(get_service)):
    lad = request_logger(request, "inferlink.api.generate")
    lad.info("generate.stream start", extra={"prompt_chars": len(body.prompt)})

    stream = service.generate_text_stream(body.prompt, body.options)
    try:
        first = next(stream, None)
    except LLMServiceError:
        stream.close()
        raise

    def sse():
        chunks = 0
        try:
            if first is not None:
                chunks += 1
                lad.info("generate.stream first_token")
                yield _frame({"delta": first})
            for chunk in stream:
                chunks += 1
                yield _frame({"delta": chunk})
        except LLMServiceError as exc:
            lad.warning("generate.stream failed", extra={"chunks": chunks, "error": str(exc)[:200]})
            yield _frame({"detail": str(exc)}, event="error")
            return
        finally:
            stream.close()
        lad.info("generate.stream done", extra={"chunks": chunks})
        yield _frame({}, event="done")

    return StreamingResponse(
        sse(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )

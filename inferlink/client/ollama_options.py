# ------------------------------------------------------------
# Module: inferlink/client/ollama_options.py
# Purpose: Map GenerationOptions onto Ollama wire options; enforce sane bounds.
# ------------------------------------------------------------

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from inferlink.client.types import GenerationOptions

logger = logging.getLogger(__name__)

# GenerationOptions field -> Ollama /api/generate option name
WIRE_NAMES = {
    "temperature": "temperature",
    "top_p": "top_p",
    "top_k": "top_k",
    "max_tokens": "num_predict",
    "stop": "stop",
}


def coerce_options(
    options: GenerationOptions | Mapping[str, Any] | None,
) -> GenerationOptions:
    """Accept a model, a ProcessingOptions-shaped mapping, or None."""
    if options is None:
        return GenerationOptions()
    if isinstance(options, GenerationOptions):
        return options
    try:
        return GenerationOptions.model_validate(dict(options))
    except ValidationError:
        # keep what parses; bad fields are dropped in to_wire_options
        return GenerationOptions.model_construct(**_known_fields(options))


def _known_fields(options: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for field, info in GenerationOptions.model_fields.items():
        for key in (field, info.alias):
            if key and key in options:
                out[field] = options[key]
    return out


def to_wire_options(
    options: GenerationOptions | Mapping[str, Any] | None,
    lad: logging.Logger | logging.LoggerAdapter | None = None,
) -> dict[str, Any]:
    """Build the `options` object for /api/generate.

    Absent fields are omitted. Numeric strings are coerced; values that cannot
    be coerced are dropped with a debug log rather than failing the request.
    """
    log = lad or logger
    opts = coerce_options(options)
    raw = {k: getattr(opts, k, None) for k in WIRE_NAMES}
    wire: dict[str, Any] = {}

    def _as_float(k: str, lo: float, hi: float):
        v = raw.get(k)
        if v is None:
            return
        try:
            v = float(v)
        except (TypeError, ValueError):
            log.debug("ollama.options.dropped", extra={"option": k})
            return
        wire[WIRE_NAMES[k]] = min(max(v, lo), hi)

    def _as_int(k: str, lo: int, hi: int | None = None):
        v = raw.get(k)
        if v is None:
            return
        try:
            v = int(v)
        except (TypeError, ValueError):
            log.debug("ollama.options.dropped", extra={"option": k})
            return
        if v < lo:
            v = lo
        if hi is not None and v > hi:
            v = hi
        wire[WIRE_NAMES[k]] = v

    _as_float("temperature", 0.0, 2.0)
    _as_float("top_p", 0.0, 1.0)
    _as_int("top_k", 0)
    _as_int("max_tokens", 1, 32768)

    stop = raw.get("stop")
    if isinstance(stop, str):
        stop = [stop]
    if stop:
        wire["stop"] = [str(s) for s in stop]

    return wire

# ------------------------------------------------------------
# Module: inferlink/services/json_extract.py
# Purpose: Recover a JSON object/array from free-form model output.
# ------------------------------------------------------------

"""Tolerant JSON extraction for model replies.

Models wrap JSON in prose or Markdown fences. Candidates are tried in order:

1. The body of the first ```json (or bare ```) fence.
2. Each `{` / `[` in the text, decoded with `JSONDecoder.raw_decode`, which
   stops at the end of the first complete value and honours string escapes.

A trailing-comma repair is attempted on each candidate before moving on.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from inferlink.core.errors import ResponseParseError

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"```(?:json|JSON)?\s*\n?(.*?)```", re.DOTALL)
TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")

_decoder = json.JSONDecoder()


def _decode_at(text: str, start: int) -> Any:
    value, _end = _decoder.raw_decode(text, start)
    return value


def _first_value(text: str) -> Any:
    for m in re.finditer(r"[\[{]", text):
        try:
            return _decode_at(text, m.start())
        except json.JSONDecodeError:
            continue
    raise ValueError("no JSON value found")


def _parse_candidate(text: str) -> Any:
    try:
        return _first_value(text)
    except ValueError:
        repaired = TRAILING_COMMA_RE.sub(r"\1", text)
        if repaired == text:
            raise
        value = _first_value(repaired)
        logger.debug("json.extract.repaired")
        return value


def extract_json(text: str) -> dict[str, Any] | list[Any]:
    """Return the first JSON object or array found in `text`.

    Raises
    ------
    ResponseParseError
        When no candidate decodes.
    """
    fence = FENCE_RE.search(text or "")
    candidates = [fence.group(1)] if fence else []
    candidates.append(text or "")

    for candidate in candidates:
        try:
            return _parse_candidate(candidate)
        except ValueError:
            continue

    snippet = (text or "")[:100]
    raise ResponseParseError(f"Model reply is not valid JSON: {snippet!r}")

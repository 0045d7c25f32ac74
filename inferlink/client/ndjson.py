# ------------------------------------------------------------
# Module: inferlink/client/ndjson.py
# Purpose: Incremental newline-delimited JSON decoder for streamed generations.
# ------------------------------------------------------------

"""Incremental NDJSON decoding.

Network reads split the byte stream at arbitrary points: in the middle of a
JSON object, or in the middle of a multi-byte UTF-8 character. The decoder
keeps the unfinished tail between `feed()` calls and only parses complete
lines.

Notes
-----
- A line that is not valid JSON (or not a JSON object) is recorded in
  `skipped` as a `StreamDecodeError` and ignored; it never aborts the stream.
- `flush()` decodes whatever is left once the body ends without a newline.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any

from inferlink.core.errors import StreamDecodeError

logger = logging.getLogger(__name__)


class NDJSONDecoder:
    def __init__(self) -> None:
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.skipped: list[StreamDecodeError] = []

    def feed(self, data: bytes | str) -> list[dict[str, Any]]:
        """Append a read and return the objects of every completed line."""
        text = self._utf8.decode(data) if isinstance(data, (bytes, bytearray)) else data
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        return [obj for obj in map(self._parse, lines) if obj is not None]

    def flush(self) -> list[dict[str, Any]]:
        tail = self._buffer + self._utf8.decode(b"", final=True)
        self._buffer = ""
        obj = self._parse(tail)
        return [obj] if obj is not None else []

    def _parse(self, line: str) -> dict[str, Any] | None:
        line = line.strip()
        if not line:
            return None
        try:
            obj = json.loads(line)
        except json.JSONDecodeError as exc:
            self._skip(line, exc.msg)
            return None
        if not isinstance(obj, dict):
            self._skip(line, f"expected object, got {type(obj).__name__}")
            return None
        return obj

    def _skip(self, line: str, reason: str) -> None:
        self.skipped.append(StreamDecodeError(line, reason))
        logger.debug("llm.stream.skip_line", extra={"reason": reason, "line_len": len(line)})

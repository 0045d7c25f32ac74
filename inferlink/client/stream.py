# ------------------------------------------------------------
# Module: inferlink/client/stream.py
# Purpose: Cancellable, pull-based iterator over a streamed /api/generate reply.
# ------------------------------------------------------------

"""Streaming generation as an explicit iterator.

Behavior
--------
- The HTTP transfer opens lazily on the first pull.
- Each pull reads the next block of bytes, feeds it to `NDJSONDecoder`, and
  queues every truthy `response` field; a truthy `done` ends the stream.
- The stream is single-pass: once exhausted, closed or failed it only raises
  `StopIteration`.

Cancellation
------------
- `cancel()` (any thread) ends the iteration quietly at the next pull.
- A deadline timer (`timeout_s`) cancels the token with reason `timeout`; the
  consumer then receives `LLMConnectionError`.
- The token is checked before every read and again when the read returns.
- Response and timer are released on every exit path (done, EOF, error,
  cancel, `close()`, leaving a `with` block).
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable, Iterator
from typing import Any

import requests

from inferlink.client.cancel import CANCELLED, TIMEOUT, CancelToken
from inferlink.client.ndjson import NDJSONDecoder
from inferlink.core.errors import LLMConnectionError, LLMServiceError, StreamDecodeError, wrap_error
from inferlink.utils.timing import ms_since

OPERATION = "generate text stream"

logger = logging.getLogger(__name__)


class GenerationStream(Iterator[str]):
    def __init__(
        self,
        opener: Callable[[], requests.Response],
        *,
        timeout_s: float,
        chunk_size: int | None = None,
        model: str = "",
        lad: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self._open = opener
        self._timeout_s = timeout_s
        self._chunk_size = chunk_size
        self._model = model
        self._lad = lad or logger
        self._token = CancelToken()
        self._decoder = NDJSONDecoder()
        self._pending: deque[str] = deque()
        self._response: requests.Response | None = None
        self._reader: Iterator[bytes] | None = None
        self._closed = False
        self._chunks = 0
        self._t0 = 0.0

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def skipped(self) -> list[StreamDecodeError]:
        """Malformed lines that were skipped so far."""
        return list(self._decoder.skipped)

    def __iter__(self) -> GenerationStream:
        return self

    def __next__(self) -> str:
        while not self._pending:
            if self._closed:
                raise StopIteration
            self._pull()
        chunk = self._pending.popleft()
        self._chunks += 1
        if self._chunks == 1:
            self._lad.info("llm.stream.first_token", extra={"model": self._model})
        return chunk

    def __enter__(self) -> GenerationStream:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def cancel(self) -> None:
        """Signal abort; the transfer is closed and iteration stops."""
        self._token.cancel(CANCELLED)
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._pending.clear()
        self._token.clear()
        self._abort_transfer()

    def text(self) -> str:
        """Drain the remaining chunks into one string."""
        return "".join(self)

    # ---- internals -------------------------------------------------

    def _abort_transfer(self) -> None:
        if self._response is not None:
            self._response.close()

    def _start(self) -> None:
        self._t0 = time.perf_counter()
        self._token.on_cancel(self._abort_transfer)
        self._token.start_deadline(self._timeout_s)
        try:
            response = self._open()
        except LLMServiceError as exc:
            if self._stop_if_cancelled():
                return
            self.close()
            self._lad.warning(
                "llm.stream.open",
                extra={"model": self._model, "ok": False, "error": str(exc)[:200]},
            )
            raise wrap_error(OPERATION, exc) from exc
        self._response = response
        # cancel() or close() may have run on another thread while the request was opening
        if self._closed:
            response.close()
            return
        if self._stop_if_cancelled():
            return
        self._lad.info(
            "llm.stream.open",
            extra={
                "model": self._model,
                "ok": True,
                "status": response.status_code,
                "dur_ms": ms_since(self._t0),
            },
        )
        try:
            self._reader = response.iter_content(chunk_size=self._chunk_size)
        except Exception as exc:
            self._fail(exc)

    def _pull(self) -> None:
        if self._stop_if_cancelled():
            return
        if self._reader is None:
            self._start()
            if self._closed or self._stop_if_cancelled():
                return
        try:
            data = next(self._reader, None)
        except Exception as exc:
            self._fail(exc)
            return
        if self._stop_if_cancelled():
            return
        if data is None:
            self._consume(self._decoder.flush())
            self._finish("eof")
            return
        self._consume(self._decoder.feed(data))

    def _fail(self, exc: Exception) -> None:
        # closing the response from the timer thread surfaces here
        if self._stop_if_cancelled():
            return
        self.close()
        raise LLMConnectionError(f"Failed to {OPERATION}: {exc}", operation=OPERATION) from exc

    def _consume(self, events: list[dict[str, Any]]) -> None:
        for obj in events:
            chunk = obj.get("response")
            if chunk:
                self._pending.append(str(chunk))
            if obj.get("done"):
                self._finish("done")
                return

    def _finish(self, reason: str) -> None:
        pending = list(self._pending)
        self.close()
        # chunks decoded before `done` are still delivered
        self._pending.extend(pending)
        self._lad.info(
            "llm.stream.done",
            extra={
                "model": self._model,
                "reason": reason,
                "chunks": self._chunks + len(pending),
                "skipped": len(self._decoder.skipped),
                "dur_ms": ms_since(self._t0),
            },
        )

    def _stop_if_cancelled(self) -> bool:
        if not self._token.cancelled:
            return False
        reason = self._token.reason
        self.close()
        if reason == TIMEOUT:
            self._lad.warning("llm.stream.timeout", extra={"model": self._model, "timeout_s": self._timeout_s})
            raise LLMConnectionError(
                f"Failed to {OPERATION}: timed out after {self._timeout_s:g}s", operation=OPERATION
            )
        self._lad.info("llm.stream.cancelled", extra={"model": self._model, "chunks": self._chunks})
        return True

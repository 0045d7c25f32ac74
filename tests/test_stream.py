import json
import threading
import time

import pytest
import requests

from conftest import FakeResponse, FakeSession, ndjson
from inferlink.client.ndjson import NDJSONDecoder
from inferlink.client.ollama_client import OllamaService
from inferlink.core.errors import LLMConnectionError, NoModelLoaded, UpstreamError


class BlockingResponse(FakeResponse):
    """A body that never arrives; reads unblock only when the response is closed."""

    def __init__(self):
        super().__init__()
        self._released = threading.Event()

    def iter_content(self, chunk_size=None):
        while not self._released.wait(5):
            yield b""
        raise requests.ConnectionError("connection closed")

    def close(self):
        self.closed = True
        self._released.set()


class ReaderFailsResponse(FakeResponse):
    def iter_content(self, chunk_size=None):
        raise requests.ConnectionError("socket already closed")


class SlowOpenSession(FakeSession):
    """Holds the streamed request open until `release()` is called."""

    def __init__(self, routes=None):
        super().__init__(routes)
        self.entered = threading.Event()
        self._gate = threading.Event()

    def request(self, method, url, **kwargs):
        if kwargs.get("stream"):
            self.entered.set()
            self._gate.wait(5)
        return super().request(method, url, **kwargs)

    def release(self):
        self._gate.set()


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        assert time.monotonic() < deadline
        time.sleep(0.01)


def _streaming(session, *chunks):
    response = FakeResponse(chunks=list(chunks))
    session.routes[("POST", "/api/generate")] = response
    return response


def test_decoder_joins_lines_split_across_reads():
    dec = NDJSONDecoder()
    assert dec.feed('{"response":"a"}\n{"resp') == [{"response": "a"}]
    assert dec.feed('onse":"b"}\n') == [{"response": "b"}]
    assert dec.flush() == []


def test_decoder_keeps_multibyte_characters_split_across_reads():
    dec = NDJSONDecoder()
    raw = json.dumps({"response": "é"}, ensure_ascii=False).encode("utf-8") + b"\n"
    cut = raw.index(b"\xc3") + 1
    assert dec.feed(raw[:cut]) == []
    assert dec.feed(raw[cut:]) == [{"response": "é"}]


def test_decoder_skips_malformed_lines_and_flushes_tail():
    dec = NDJSONDecoder()
    assert dec.feed('garbage\n[1]\n\n{"response":"ok"}') == []
    assert dec.flush() == [{"response": "ok"}]
    assert [e.line for e in dec.skipped] == ["garbage", "[1]"]


def test_stream_yields_chunks_in_order_and_closes_on_done(session):
    service = OllamaService(session=session)
    service.load_model("llama3:8b")
    response = _streaming(
        session,
        '{"response":"a"}\n{"resp',
        'onse":"b"}\n{"response":"","done":true}\n',
        '{"response":"after-done"}\n',
    )

    stream = service.generate_text_stream("hi", {"temperature": 0.5})
    # nothing is sent before the first pull
    assert len(session.calls_to("/api/generate")) == 1
    assert list(stream) == ["a", "b"]
    assert response.closed and stream.closed

    call = session.calls[-1]
    assert call["stream"] is True
    assert call["json"] == {"model": "llama3:8b", "prompt": "hi", "stream": True, "options": {"temperature": 0.5}}


def test_stream_flushes_trailing_line_at_eof(session, loaded):
    _streaming(session, '{"response":"x"}\n{"response":"y"}')
    assert loaded.generate_text_stream("p").text() == "xy"


def test_stream_skips_malformed_lines(session, loaded):
    _streaming(session, ndjson({"response": "a"}) + "{oops\n" + ndjson({"response": "b", "done": True}))
    stream = loaded.generate_text_stream("p")
    assert list(stream) == ["a", "b"]
    assert len(stream.skipped) == 1


def test_cancel_stops_iteration_quietly_and_releases_response(session, loaded):
    response = _streaming(session, ndjson({"response": "a"}), ndjson({"response": "b"}), ndjson({"done": True}))
    with loaded.generate_text_stream("p") as stream:
        assert next(stream) == "a"
        stream.cancel()
        assert list(stream) == []
        assert stream.cancelled
    assert response.closed


def test_abandoned_context_closes_response(session, loaded):
    response = _streaming(session, ndjson({"response": "a"}), ndjson({"response": "b"}))
    with loaded.generate_text_stream("p") as stream:
        next(stream)
    assert response.closed
    assert list(stream) == []


def test_deadline_raises_connection_error_and_closes(session):
    service = OllamaService({"timeout_ms": 100}, session=session)
    service.load_model("llama3:8b")
    blocking = BlockingResponse()
    session.routes[("POST", "/api/generate")] = blocking

    stream = service.generate_text_stream("p")
    with pytest.raises(LLMConnectionError, match="timed out"):
        next(stream)
    assert blocking.closed and stream.closed
    assert list(stream) == []


def _slow_open_service(timeout_ms=2000):
    session = SlowOpenSession({("POST", "/api/generate"): FakeResponse(json_data={"response": "", "done": True})})
    service = OllamaService({"timeout_ms": timeout_ms}, session=session)
    service.load_model("llama3:8b")
    response = FakeResponse(chunks=[ndjson({"response": "late"}, {"done": True})])
    session.routes[("POST", "/api/generate")] = response
    return service, session, response


def test_cancel_while_opening_closes_late_response():
    service, session, response = _slow_open_service()
    stream = service.generate_text_stream("p")
    pulled = []
    worker = threading.Thread(target=lambda: pulled.append(list(stream)))
    worker.start()
    assert session.entered.wait(5)
    stream.cancel()
    session.release()
    worker.join(5)
    assert pulled == [[]]
    assert stream.closed and response.closed


def test_deadline_while_opening_raises_and_closes_late_response():
    service, session, response = _slow_open_service(timeout_ms=50)
    stream = service.generate_text_stream("p")
    errors = []

    def consume():
        try:
            next(stream)
        except LLMConnectionError as exc:
            errors.append(exc)

    worker = threading.Thread(target=consume)
    worker.start()
    _wait_for(lambda: stream.cancelled)
    session.release()
    worker.join(5)
    assert len(errors) == 1 and "timed out" in str(errors[0])
    assert stream.closed and response.closed


def test_reader_failure_on_open_is_wrapped_and_closes(session, loaded):
    response = ReaderFailsResponse()
    session.routes[("POST", "/api/generate")] = response
    stream = loaded.generate_text_stream("p")
    with pytest.raises(LLMConnectionError, match="Failed to generate text stream: socket already closed"):
        next(stream)
    assert response.closed and stream.closed


def test_transport_error_mid_stream(session, loaded):
    response = _streaming(session, ndjson({"response": "a"}), requests.ConnectionError("reset by peer"))
    stream = loaded.generate_text_stream("p")
    assert next(stream) == "a"
    with pytest.raises(LLMConnectionError, match="Failed to generate text stream: reset by peer"):
        next(stream)
    assert response.closed


def test_http_error_on_open_is_wrapped(session, loaded):
    session.routes[("POST", "/api/generate")] = FakeResponse(500, reason="Internal Server Error")
    stream = loaded.generate_text_stream("p")
    with pytest.raises(UpstreamError, match="Failed to generate text stream: HTTP 500"):
        next(stream)
    assert stream.closed


def test_stream_requires_model(service):
    with pytest.raises(NoModelLoaded):
        service.generate_text_stream("p")

import json
from urllib.parse import urlparse

import pytest
from fastapi.testclient import TestClient

from inferlink.client.ollama_client import OllamaService
from inferlink.prompts.manager import PromptManager

TAGS = {
    "models": [
        {
            "name": "llama3:8b",
            "size": 4661224676,
            "digest": "sha256:abc",
            "modified_at": "2024-05-01T10:00:00.123456789Z",
        },
        {"name": "phi3:mini", "size": 2300000000, "digest": "sha256:def", "modified_at": None},
    ]
}


class FakeResponse:
    """Just enough of `requests.Response` for the client."""

    def __init__(self, status_code=200, json_data=None, chunks=None, reason="OK", body=None):
        self.status_code = status_code
        self.reason = reason
        self._json = json_data
        self._body = body
        self._chunks = list(chunks or [])
        self.closed = False

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is not None:
            return json.loads(self._body)
        return self._json

    def iter_content(self, chunk_size=None):
        for chunk in self._chunks:
            if isinstance(chunk, BaseException):
                raise chunk
            yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk

    def close(self):
        self.closed = True


class FakeSession:
    """Routes `(METHOD, path)` to a response, an exception, or a list of either."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.closed = False

    def request(self, method, url, json=None, headers=None, timeout=None, stream=False):
        path = urlparse(url).path
        self.calls.append({"method": method, "url": url, "path": path, "json": json, "timeout": timeout, "stream": stream})
        target = self.routes.get((method, path))
        if target is None:
            return FakeResponse(404, reason="Not Found")
        if isinstance(target, list):
            target = target.pop(0) if len(target) > 1 else target[0]
        if isinstance(target, BaseException):
            raise target
        return target

    def close(self):
        self.closed = True

    def calls_to(self, path):
        return [c for c in self.calls if c["path"] == path]


def ndjson(*objs):
    return "".join(json.dumps(o) + "\n" for o in objs)


@pytest.fixture
def session():
    return FakeSession(
        {
            ("GET", "/api/version"): FakeResponse(json_data={"version": "0.1.32"}),
            ("GET", "/api/tags"): FakeResponse(json_data=TAGS),
            ("POST", "/api/generate"): FakeResponse(json_data={"response": "", "done": True}),
        }
    )


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def service(session, sleeps):
    return OllamaService(
        {"host": "localhost", "port": 11434, "timeout_ms": 2000, "max_retries": 3, "retry_base_delay_ms": 1000},
        session=session,
        sleep=sleeps.append,
    )


@pytest.fixture
def loaded(service):
    service.load_model("llama3:8b")
    return service


@pytest.fixture
def prompts():
    return PromptManager()


@pytest.fixture
def client(service, prompts):
    from inferlink.main import create_app

    with TestClient(create_app(service=service, prompts=prompts)) as c:
        yield c

import requests

from conftest import FakeResponse, ndjson


def _load(client):
    r = client.post("/v1/models/load", json={"name": "llama3:8b"})
    assert r.status_code == 200
    assert r.json() == {"model": "llama3:8b"}


def test_health_live(client):
    r = client.get("/v1/health/live")
    assert r.status_code == 200
    assert r.json() == {"status": "alive"}


def test_health_ready_ok(client):
    r = client.get("/v1/health/ready")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ready"
    assert body["models"] == 2


def test_health_ready_degraded(client, session):
    session.routes[("GET", "/api/version")] = requests.ConnectionError("refused")
    r = client.get("/v1/health/ready")
    assert r.status_code == 503
    assert r.json() == {"status": "degraded"}


def test_models_list_and_current(client):
    r = client.get("/v1/models")
    assert r.status_code == 200
    assert [m["name"] for m in r.json()] == ["llama3:8b", "phi3:mini"]
    assert client.get("/v1/models/current").json() == {"model": None}
    _load(client)
    assert client.get("/v1/models/current").json() == {"model": "llama3:8b"}


def test_models_unreachable_maps_to_503(client, session):
    session.routes[("GET", "/api/tags")] = requests.ConnectionError("refused")
    r = client.get("/v1/models")
    assert r.status_code == 503
    assert r.json()["code"] == "llm_unavailable"


def test_prompts_list_get_and_404(client):
    r = client.get("/v1/prompts", params={"analysis_type": "estimation"})
    assert [t["id"] for t in r.json()] == ["project-estimation"]
    r = client.get("/v1/prompts/document-summary")
    assert r.json()["analysisType"] == "summary"
    r = client.get("/v1/prompts/ghost")
    assert r.status_code == 404
    assert r.json()["detail"] == "Template with id 'ghost' not found"


def test_prompt_render_and_validation_errors(client):
    r = client.post(
        "/v1/prompts/document-summary/render",
        json={"variables": {"content": "Body text", "length": "long"}, "context": {"maxTokens": 2000}},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["truncated"] is False
    assert "3-4 paragraphs with detailed analysis" in body["content"]

    r = client.post("/v1/prompts/document-summary/render", json={"variables": {"length": "epic"}})
    assert r.status_code == 422
    assert {e["code"] for e in r.json()["errors"]} == {"REQUIRED", "INVALID_VALUE"}


def test_generate_without_model_is_409(client):
    r = client.post("/v1/generate", json={"prompt": "hi"})
    assert r.status_code == 409
    assert r.json()["code"] == "no_model_loaded"


def test_generate_returns_text(client, session):
    _load(client)
    session.routes[("POST", "/api/generate")] = FakeResponse(json_data={"response": "Hello", "done": True})
    r = client.post("/v1/generate", json={"prompt": "hi", "options": {"maxTokens": 8}})
    assert r.status_code == 200
    assert r.json() == {"model": "llama3:8b", "response": "Hello"}
    assert session.calls[-1]["json"]["options"] == {"num_predict": 8}


def test_generate_upstream_error_is_502(client, session):
    _load(client)
    session.routes[("POST", "/api/generate")] = FakeResponse(500, reason="Internal Server Error")
    r = client.post("/v1/generate", json={"prompt": "hi"})
    assert r.status_code == 502


def test_generate_stream_sse_frames(client, session):
    _load(client)
    session.routes[("POST", "/api/generate")] = FakeResponse(
        chunks=[ndjson({"response": "Hel"}), ndjson({"response": "lo"}, {"done": True})]
    )
    r = client.post("/v1/generate/stream", json={"prompt": "hi"})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/event-stream")
    assert r.text == (
        'data: {"delta": "Hel"}\n\n'
        'data: {"delta": "lo"}\n\n'
        "event: done\ndata: {}\n\n"
    )


def test_generate_stream_open_failure_keeps_status(client, session):
    _load(client)
    session.routes[("POST", "/api/generate")] = requests.ConnectionError("refused")
    r = client.post("/v1/generate/stream", json={"prompt": "hi"})
    assert r.status_code == 503


def test_analysis_requires_loaded_model(client):
    r = client.post("/v1/analysis", json={"content": "Some document", "analysis_type": "structure"})
    assert r.status_code == 409


def test_analysis_unknown_type_is_422(client):
    _load(client)
    r = client.post("/v1/analysis", json={"content": "Some document", "analysis_type": "poetry"})
    assert r.status_code == 422
    assert r.json()["code"] == "unsupported_analysis_type"


def test_analysis_document_result(client, session):
    _load(client)
    session.routes[("POST", "/api/generate")] = FakeResponse(
        json_data={"response": '{"summary": "Login flow", "keyPoints": ["sso"]}', "done": True}
    )
    r = client.post("/v1/analysis", json={"content": "Users sign in with SSO.", "analysis_type": "structure"})
    assert r.status_code == 200
    body = r.json()
    assert body["summary"] == "Login flow"
    assert body["keyPoints"] == ["sso"]
    assert body["metadata"]["model"] == "llama3:8b"


def test_analysis_requirements_and_summary(client, session):
    _load(client)
    session.routes[("POST", "/api/generate")] = FakeResponse(
        json_data={"response": '[{"id": "R1", "description": "reset password"}]', "done": True}
    )
    r = client.post("/v1/analysis/requirements", json={"content": "The system shall reset passwords."})
    assert r.status_code == 200
    assert [req["id"] for req in r.json()] == ["R1"]

    session.routes[("POST", "/api/generate")] = FakeResponse(json_data={"response": " Short. ", "done": True})
    r = client.post("/v1/analysis/summary", json={"content": "A long report body.", "length": "short"})
    assert r.json() == {"summary": "Short."}


def test_analysis_estimate_fallback(client, session):
    _load(client)
    session.routes[("POST", "/api/generate")] = FakeResponse(json_data={"response": "No idea.", "done": True})
    r = client.post("/v1/analysis/estimate", json={"requirements": [{"id": "R1"}], "hourly_rate": 50})
    assert r.status_code == 200
    assert r.json()["totalCost"] == 400

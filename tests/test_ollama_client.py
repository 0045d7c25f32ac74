import pytest
import requests

from conftest import FakeResponse, FakeSession
from inferlink.client.ollama_client import OllamaService
from inferlink.core.errors import LLMConnectionError, NoModelLoaded, UpstreamError


def test_connect_probes_version_and_tags(service, session):
    assert service.connect() is True
    assert service.is_connected()
    assert [c["path"] for c in session.calls] == ["/api/version", "/api/tags"]
    assert session.calls[0]["url"] == "http://localhost:11434/api/version"


def test_connect_failure_returns_false_without_raising(sleeps):
    session = FakeSession({("GET", "/api/version"): requests.ConnectionError("refused")})
    service = OllamaService(session=session, sleep=sleeps.append)
    assert service.connect() is False
    assert not service.is_connected()
    status = service.get_connection_status()
    assert status.connected is False and status.version is None


def test_connect_applies_config_overrides(service, session):
    service.connect({"host": "gpu-box", "port": 9000})
    assert session.calls[0]["url"] == "http://gpu-box:9000/api/version"
    assert service.get_config().timeout_ms == 2000


def test_connect_with_invalid_overrides_returns_false(service, session):
    assert service.connect({"port": 0}) is False
    assert service.connect({"hostname": "gpu-box"}) is False
    assert not service.is_connected()
    assert service.get_config().port == 11434
    assert session.calls == []


def test_available_models_are_described(service):
    models = service.get_available_models()
    assert [m.name for m in models] == ["llama3:8b", "phi3:mini"]
    assert models[0].size == "4.34 GB"
    assert "code-analysis" in models[0].capabilities
    assert models[0].modified_at.year == 2024
    assert models[1].modified_at is None


def test_available_models_wraps_upstream_error():
    session = FakeSession({("GET", "/api/tags"): FakeResponse(500, reason="Internal Server Error")})
    with pytest.raises(UpstreamError) as info:
        OllamaService(session=session).get_available_models()
    assert str(info.value) == "Failed to get available models: HTTP 500: Internal Server Error"
    assert info.value.status == 500


def test_status_counts_models(service):
    status = service.get_connection_status()
    assert (status.connected, status.version, status.models) == (True, "0.1.32", 2)
    assert service.get_system_info().version == "0.1.32"
    assert service.health_check() is True


def test_load_model_sends_empty_prompt_probe(service, session):
    service.load_model("llama3:8b")
    assert service.get_current_model() == "llama3:8b"
    assert session.calls[-1]["json"] == {"model": "llama3:8b", "prompt": "", "stream": False}


def test_failed_load_keeps_current_model(loaded, session):
    session.routes[("POST", "/api/generate")] = FakeResponse(404, reason="Not Found")
    with pytest.raises(UpstreamError, match="Failed to load model missing"):
        loaded.switch_model("missing")
    assert loaded.get_current_model() == "llama3:8b"


def test_unload_only_clears_matching_model(loaded):
    loaded.unload_model("other")
    assert loaded.get_current_model() == "llama3:8b"
    loaded.unload_model("llama3:8b")
    assert loaded.get_current_model() is None


def test_disconnect_resets_state(loaded):
    loaded.connect()
    loaded.disconnect()
    assert not loaded.is_connected()
    assert loaded.get_current_model() is None


def test_model_info_reads_show(service, session):
    session.routes[("POST", "/api/show")] = FakeResponse(
        json_data={"details": {"family": "llama", "parameter_size": "8B"}, "modelfile": "FROM x", "template": "{{ .Prompt }}"}
    )
    info = service.get_model_info("llama3:8b")
    assert info.details.family == "llama"
    assert info.details.quantization_level == "unknown"
    assert info.modelfile == "FROM x"


def test_generate_requires_loaded_model(service, session):
    with pytest.raises(NoModelLoaded, match="No model loaded"):
        service.generate_text("hi")
    assert session.calls_to("/api/generate") == []


def test_generate_text_builds_request_and_returns_response(loaded, session):
    session.routes[("POST", "/api/generate")] = FakeResponse(json_data={"response": "Hello!", "done": True})
    text = loaded.generate_text("Say hi", {"temperature": 0.2, "maxTokens": 50})
    assert text == "Hello!"
    call = session.calls[-1]
    assert call["json"] == {
        "model": "llama3:8b",
        "prompt": "Say hi",
        "stream": False,
        "options": {"temperature": 0.2, "num_predict": 50},
    }
    assert call["timeout"] == 2.0


def test_default_options_sit_under_call_options(session):
    service = OllamaService(session=session, default_options={"temperature": 0.1, "top_k": 40})
    service.load_model("llama3:8b")
    service.generate_text("x", {"temperature": 0.7})
    assert session.calls[-1]["json"]["options"] == {"temperature": 0.7, "top_k": 40}


def test_generate_timeout_becomes_connection_error(loaded, session):
    session.routes[("POST", "/api/generate")] = requests.Timeout("read timed out")
    with pytest.raises(LLMConnectionError) as info:
        loaded.generate_text("x")
    assert str(info.value).startswith("Failed to generate text: ")


def test_generate_malformed_json_is_upstream_error(loaded, session):
    session.routes[("POST", "/api/generate")] = FakeResponse(body="not json")
    with pytest.raises(UpstreamError, match="Failed to generate text: malformed JSON"):
        loaded.generate_text("x")


def test_client_retry_uses_configured_backoff(service, sleeps):
    attempts = []

    def op():
        attempts.append(1)
        raise LLMConnectionError("down")

    with pytest.raises(LLMConnectionError):
        service.retry(op)
    assert len(attempts) == 4
    assert sleeps == [1.0, 2.0, 4.0]

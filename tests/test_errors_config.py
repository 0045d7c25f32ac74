import pytest
from pydantic import ValidationError

from inferlink.core.config import Settings
from inferlink.core.errors import (
    LLMConnectionError,
    LLMServiceError,
    TemplateNotFound,
    UpstreamError,
    wrap_error,
)


def test_wrap_error_keeps_kind_and_status():
    err = wrap_error("generate text", UpstreamError("HTTP 500: boom", status=500))
    assert isinstance(err, UpstreamError)
    assert err.status == 500
    assert str(err) == "Failed to generate text: HTTP 500: boom"
    assert err.operation == "generate text"


def test_wrap_error_connection_and_generic():
    conn = wrap_error("load model x", LLMConnectionError("refused"))
    assert isinstance(conn, LLMConnectionError)
    assert isinstance(conn, ConnectionError)

    other = wrap_error("get system info", RuntimeError("odd"))
    assert type(other) is LLMServiceError
    assert str(other) == "Failed to get system info: odd"


def test_template_not_found_message_is_not_repr():
    err = TemplateNotFound("nope")
    assert str(err) == "Template with id 'nope' not found"
    assert err.template_id == "nope"
    assert isinstance(err, KeyError)


def test_settings_connection_config_defaults():
    s = Settings()
    cfg = s.connection_config
    assert (cfg.host, cfg.port, cfg.timeout_ms, cfg.max_retries) == ("localhost", 11434, 30000, 3)
    assert cfg.retry_base_delay_ms == 1000
    assert s.generation_defaults == {}


def test_settings_from_env_reads_prefixed_vars():
    s = Settings.from_env(
        {
            "INFERLINK_OLLAMA_HOST": "gpu-box",
            "INFERLINK_OLLAMA_PORT": "8080",
            "INFERLINK_CORS_ORIGINS": "http://a, http://b",
            "INFERLINK_LLM_TEMP": "0.3",
            "OLLAMA_HOST": "ignored",
        }
    )
    assert s.OLLAMA_HOST == "gpu-box"
    assert s.OLLAMA_PORT == 8080
    assert s.CORS_ORIGINS == ["http://a", "http://b"]
    assert s.generation_defaults == {"temperature": 0.3}


def test_settings_reject_unknown_and_out_of_range():
    with pytest.raises(ValidationError):
        Settings(NOT_A_FIELD=1)
    with pytest.raises(ValidationError):
        Settings(OLLAMA_PORT=0)

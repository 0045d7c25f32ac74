import pytest
from pydantic import ValidationError

from inferlink.client.capabilities import format_bytes, infer_capabilities
from inferlink.client.ollama_options import to_wire_options
from inferlink.client.types import ConnectionConfig, GenerationOptions


def test_capabilities_for_code_family():
    assert infer_capabilities("CodeLlama:7b") == [
        "text-generation",
        "code-analysis",
        "document-analysis",
        "summarization",
    ]


def test_capabilities_plain_and_translation():
    assert infer_capabilities("phi3") == ["text-generation", "document-analysis", "summarization"]
    assert infer_capabilities("aya-multilingual")[-1] == "translation"


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 Bytes"), (512, "512 Bytes"), (1536, "1.5 KB"), (1024**2, "1 MB"), (3.56 * 1024**3, "3.56 GB")],
)
def test_format_bytes(size, expected):
    assert format_bytes(size) == expected


def test_wire_options_omit_absent_and_rename():
    assert to_wire_options(None) == {}
    assert to_wire_options({"maxTokens": 256, "topP": 0.9}) == {"top_p": 0.9, "num_predict": 256}


def test_wire_options_clamp_and_coerce():
    wire = to_wire_options({"temperature": 5, "top_p": "-1", "top_k": -3, "max_tokens": 100000, "stop": "###"})
    assert wire == {"temperature": 2.0, "top_p": 0.0, "top_k": 0, "num_predict": 32768, "stop": ["###"]}


def test_wire_options_drop_uncoercible():
    assert to_wire_options({"temperature": "warm", "top_k": 5}) == {"top_k": 5}


def test_generation_options_accept_both_key_styles():
    a = GenerationOptions.model_validate({"top_p": 0.5, "maxTokens": 10})
    assert (a.top_p, a.max_tokens) == (0.5, 10)


def test_connection_config_partial_override():
    base = ConnectionConfig()
    cfg = base.merged({"host": "example", "timeout_ms": 500})
    assert (cfg.host, cfg.port, cfg.timeout_s) == ("example", 11434, 0.5)
    assert base.host == "localhost"
    with pytest.raises(ValidationError):
        base.merged({"hots": "typo"})

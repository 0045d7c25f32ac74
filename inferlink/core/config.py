# ------------------------------------------------------------
# Module: inferlink/core/config.py
# Purpose: Central, typed application settings (code defaults, optional env overrides).
# ------------------------------------------------------------

"""Typed configuration hub for the inference client and prompt layer.

Responsibilities
----------------
- Provide strongly-typed endpoint, retry, logging and prompt-budget knobs.
- Derive the default `ConnectionConfig` and Ollama sampling options.
- Offer an opt-in `from_env()` constructor for deployments that need overrides.

Notes
-----
- Importing this module never reads the environment; `settings` uses code defaults.
- `from_env()` loads a `.env` file (if present) and reads `INFERLINK_*` variables.
"""

from __future__ import annotations

import os
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, computed_field, field_validator

from inferlink.client.types import ConnectionConfig

ENV_PREFIX = "INFERLINK_"


class Settings(BaseModel):
    """
    Application configuration with code-only defaults.

    Notes
    -----
    - Extras are forbidden to surface typos/unknown keys early.
    - Timeouts and delays are in milliseconds, matching `ConnectionConfig`.
    """

    model_config = dict(extra="forbid")

    # App toggles
    APP_ENV: Literal["dev", "prod"] = "dev"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    ACCESS_LOG: bool = True
    MUTE_ALL_LOGS: bool = False
    CORS_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:3000"]

    # Endpoint / connection
    OLLAMA_HOST: str = "localhost"
    OLLAMA_PORT: int = Field(11434, ge=1, le=65535)
    OLLAMA_TIMEOUT_MS: int = Field(30000, ge=1, description="Per-call deadline")
    OLLAMA_MAX_RETRIES: int = Field(3, ge=0, le=10)
    RETRY_BASE_DELAY_MS: int = Field(1000, ge=0, description="Backoff base delay")

    # Model selected at startup (empty: caller loads one explicitly)
    GEN_MODEL: str = ""

    # Prompt budgeting
    PROMPT_DEFAULT_MAX_TOKENS: int = Field(4096, ge=1)

    # ---- LLM sampling defaults (validated to avoid provider 400s) ----
    LLM_TEMP: float | None = Field(None, ge=0.0, le=2.0, description="Sampling temperature")
    LLM_TOP_P: float | None = Field(None, ge=0.0, le=1.0, description="Nucleus sampling")
    LLM_TOP_K: int | None = Field(None, ge=0, description="Top-K sampling")
    LLM_MAX_TOKENS: int | None = Field(None, ge=1, le=32768, description="num_predict")

    # Accept comma-separated string or list for CORS_ORIGINS; normalize to list[str].
    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _coerce_origins(cls, v: str | list[str]):
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @computed_field(return_type=ConnectionConfig)
    def connection_config(self) -> ConnectionConfig:
        """Default connection parameters for `OllamaService`."""
        return ConnectionConfig(
            host=self.OLLAMA_HOST,
            port=self.OLLAMA_PORT,
            timeout_ms=self.OLLAMA_TIMEOUT_MS,
            max_retries=self.OLLAMA_MAX_RETRIES,
            retry_base_delay_ms=self.RETRY_BASE_DELAY_MS,
        )

    @computed_field(return_type=dict)
    def generation_defaults(self) -> dict:
        """Sampling defaults as GenerationOptions fields (unset ones omitted)."""
        opts = {
            "temperature": self.LLM_TEMP,
            "top_p": self.LLM_TOP_P,
            "top_k": self.LLM_TOP_K,
            "max_tokens": self.LLM_MAX_TOKENS,
        }
        return {k: v for k, v in opts.items() if v is not None}

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: Any) -> Settings:
        """Create Settings from `INFERLINK_<FIELD>` variables plus explicit overrides.

        A `.env` file in the working directory is loaded first (existing
        variables win). Values are passed as strings; pydantic coerces them.
        """
        if environ is None:
            load_dotenv()
            environ = dict(os.environ)
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = environ.get(ENV_PREFIX + name)
            if raw is not None and raw != "":
                values[name] = raw
        values.update(overrides)
        return cls(**values)


# Eagerly instantiate once at import; code-only defaults.
# Import `settings` anywhere; do not re-create Settings() for defaults.
settings = Settings()

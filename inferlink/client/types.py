# ------------------------------------------------------------
# Module: inferlink/client/types.py
# Purpose: Pydantic contracts for connection config, model catalog and generation options.
# ------------------------------------------------------------

"""Typed contracts shared by the Ollama client and its callers.

Responsibilities
----------------
- `ConnectionConfig`: immutable endpoint/timeout/retry parameters.
- `ModelDescriptor`, `ModelInfo`: catalog entries from `/api/tags` and `/api/show`.
- `ConnectionStatus`, `SystemInfo`: probe results.
- `GenerationOptions`: caller-facing sampling knobs (snake_case or camelCase keys).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ConnectionConfig(BaseModel):
    """Endpoint parameters; replaced wholesale on connect/update_config."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = "localhost"
    port: int = Field(11434, ge=1, le=65535)
    timeout_ms: int = Field(30000, ge=1)
    max_retries: int = Field(3, ge=0)
    retry_base_delay_ms: int = Field(1000, ge=0)

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    def merged(self, overrides: ConnectionConfig | dict[str, Any] | None) -> ConnectionConfig:
        """Return a validated copy with `overrides` applied (partial override)."""
        if overrides is None:
            return self
        if isinstance(overrides, ConnectionConfig):
            overrides = overrides.model_dump(exclude_unset=True)
        return ConnectionConfig.model_validate({**self.model_dump(), **overrides})


class ModelDescriptor(BaseModel):
    name: str
    size: str
    digest: str = ""
    modified_at: datetime | None = None
    capabilities: list[str] = Field(default_factory=list)


class ModelDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    format: str = "unknown"
    family: str = "unknown"
    families: list[str] = Field(default_factory=list)
    parameter_size: str = "unknown"
    quantization_level: str = "unknown"


class ModelInfo(BaseModel):
    name: str
    details: ModelDetails = Field(default_factory=ModelDetails)
    modelfile: str = ""
    parameters: str = ""
    template: str = ""
    size: int = 0
    digest: str = ""
    modified_at: datetime | None = None


class ConnectionStatus(BaseModel):
    connected: bool
    version: str | None = None
    models: int | None = None


class SystemInfo(BaseModel):
    """Server information; Ollama only reports its version."""

    version: str
    uptime: int = 0
    memory: int = 0
    gpu: bool | None = None


class GenerationOptions(BaseModel):
    """Sampling options for a single generation call.

    Every field is optional; unset fields are omitted from the wire request.
    Keys may be given as `top_p` or `topP`, `max_tokens` or `maxTokens`.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    max_tokens: int | None = None
    stop: list[str] | None = None

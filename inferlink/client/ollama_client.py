# ------------------------------------------------------------
# Module: inferlink/client/ollama_client.py
# Purpose: Stateful Ollama client: connection lifecycle, model catalog, retry, generation.
# ------------------------------------------------------------

"""Interface to an Ollama inference server with retries and streaming.

Responsibilities
----------------
- Own the connection config, a pooled `requests.Session` and the current-model pointer.
- Probe the server (`/api/version`, `/api/tags`) and expose the model catalog.
- Load/switch/unload the model used by subsequent generation calls.
- Dispatch blocking (`generate_text`) and streaming (`generate_text_stream`) requests.
- Provide `retry()` with exponential backoff for callers that want it.

Notes
-----
- This client does not cache responses and provides no locking; the current
  model and config are single-writer state.
- Connection and generation errors are wrapped with the operation name
  (`Failed to <operation>: <upstream message>`) and keep their kind.
"""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, TypeVar

import requests
from pydantic import ValidationError

from inferlink.client.capabilities import format_bytes, infer_capabilities
from inferlink.client.ollama_http import base_url, open_request, request_json
from inferlink.client.ollama_options import coerce_options, to_wire_options
from inferlink.client.retry import retry as _retry
from inferlink.client.stream import GenerationStream
from inferlink.client.types import (
    ConnectionConfig,
    ConnectionStatus,
    GenerationOptions,
    ModelDescriptor,
    ModelDetails,
    ModelInfo,
    SystemInfo,
)
from inferlink.core.config import Settings, settings as _settings
from inferlink.core.errors import LLMServiceError, NoModelLoaded, wrap_error
from inferlink.utils.timing import ms_since

T = TypeVar("T")

logger = logging.getLogger(__name__)


def _parse_time(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        # Ollama emits RFC 3339 with nanoseconds; fromisoformat takes microseconds
        text = str(value).replace("Z", "+00:00")
        head, dot, rest = text.partition(".")
        if dot:
            digits = "".join(itertools.takewhile(str.isdigit, rest))
            tz = rest[len(digits):]
            text = f"{head}.{digits[:6]}{tz}"
        return datetime.fromisoformat(text)
    except ValueError:
        return None


class OllamaService:
    """Client for one Ollama endpoint.

    Parameters
    ----------
    config
        Connection parameters; defaults to `settings.connection_config`.
    session
        Optional pre-built session (tests pass a fake). Created lazily otherwise.
    sleep
        Sleep function used between retry attempts.
    default_options
        GenerationOptions fields applied under every call's own options.
    lad
        Optional logger/adapter for structured logs.
    """

    def __init__(
        self,
        config: ConnectionConfig | Mapping[str, Any] | None = None,
        *,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        default_options: Mapping[str, Any] | None = None,
        lad: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self._config = _settings.connection_config.merged(config)
        self._default_options = dict(default_options or {})
        self._session = session
        self._owns_session = session is None
        self._sleep = sleep
        self._connected = False
        self._current_model: str | None = None
        self.lad = lad or logger

    @classmethod
    def from_settings(cls, s: Settings = _settings, lad=None) -> OllamaService:
        return cls(s.connection_config, default_options=s.generation_defaults, lad=lad)

    # ---- configuration ------------------------------------------------

    @property
    def base_url(self) -> str:
        return base_url(self._config.host, self._config.port)

    def update_config(self, config: ConnectionConfig | Mapping[str, Any] | None = None, **overrides: Any) -> None:
        self._config = self._config.merged(config).merged(overrides or None)

    def get_config(self) -> ConnectionConfig:
        return self._config

    # ---- connection lifecycle -------------------------------------------

    def _http(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True
        return self._session

    def _get(self, path: str) -> dict[str, Any]:
        return request_json(self._http(), "GET", f"{self.base_url}{path}", timeout=self._config.timeout_s)

    def _post(self, path: str, payload: dict) -> dict[str, Any]:
        return request_json(
            self._http(), "POST", f"{self.base_url}{path}", payload=payload, timeout=self._config.timeout_s
        )

    def connect(self, config: ConnectionConfig | Mapping[str, Any] | None = None) -> bool:
        """Probe the server; True when it answered version and tags requests."""
        if config:
            try:
                self._config = self._config.merged(config)
            except ValidationError as exc:
                self.lad.warning("llm.connect.invalid_config", extra={"ok": False, "error": str(exc)[:200]})
                self._connected = False
                return False
        status = self.get_connection_status()
        self._connected = status.connected
        self.lad.info(
            "llm.connect",
            extra={"url": self.base_url, "ok": status.connected, "version": status.version},
        )
        return self._connected

    def disconnect(self) -> None:
        self._connected = False
        self._current_model = None
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
        self.lad.info("llm.disconnect", extra={"url": self.base_url})

    def is_connected(self) -> bool:
        return self._connected

    def get_connection_status(self) -> ConnectionStatus:
        try:
            version = self._get("/api/version").get("version")
            models = self.get_available_models()
        except Exception as exc:
            # status probes never raise; any failure means "not connected"
            self.lad.debug("llm.status.unreachable", extra={"error": str(exc)[:200]})
            return ConnectionStatus(connected=False)
        return ConnectionStatus(connected=True, version=version, models=len(models))

    def health_check(self) -> bool:
        return self.get_connection_status().connected

    def get_system_info(self) -> SystemInfo:
        try:
            data = self._get("/api/version")
        except LLMServiceError as exc:
            raise wrap_error("get system info", exc) from exc
        return SystemInfo(version=str(data.get("version", "")))

    # ---- model catalog -------------------------------------------------

    def get_available_models(self) -> list[ModelDescriptor]:
        try:
            data = self._get("/api/tags")
        except LLMServiceError as exc:
            raise wrap_error("get available models", exc) from exc
        return [
            ModelDescriptor(
                name=m["name"],
                size=format_bytes(m.get("size") or 0),
                digest=m.get("digest", ""),
                modified_at=_parse_time(m.get("modified_at")),
                capabilities=infer_capabilities(m["name"]),
            )
            for m in data.get("models") or []
            if m.get("name")
        ]

    def get_model_info(self, model_name: str) -> ModelInfo:
        try:
            data = self._post("/api/show", {"name": model_name})
        except LLMServiceError as exc:
            raise wrap_error(f"get model info for {model_name}", exc) from exc
        return ModelInfo(
            name=model_name,
            details=ModelDetails.model_validate(data.get("details") or {}),
            modelfile=data.get("modelfile", ""),
            parameters=data.get("parameters", ""),
            template=data.get("template", ""),
            modified_at=_parse_time(data.get("modified_at")),
        )

    def load_model(self, model_name: str) -> None:
        """Ask the server to load `model_name`, then make it current.

        Ollama loads a model on first use; an empty prompt forces that without
        generating. The current model only changes when the probe succeeds.
        """
        t0 = time.perf_counter()
        try:
            self._post("/api/generate", {"model": model_name, "prompt": "", "stream": False})
        except LLMServiceError as exc:
            raise wrap_error(f"load model {model_name}", exc) from exc
        self._current_model = model_name
        self.lad.info("llm.model.loaded", extra={"model": model_name, "dur_ms": ms_since(t0)})

    def unload_model(self, model_name: str) -> None:
        # the server evicts idle models itself; only the local pointer changes
        if self._current_model == model_name:
            self._current_model = None

    def get_current_model(self) -> str | None:
        return self._current_model

    def switch_model(self, model_name: str) -> None:
        self.load_model(model_name)

    # ---- generation ----------------------------------------------------

    def _merge_options(self, options) -> GenerationOptions | dict[str, Any] | None:
        if not self._default_options:
            return options
        return {**self._default_options, **coerce_options(options).model_dump(exclude_none=True)}

    def _payload(self, prompt: str, options, *, stream: bool) -> dict[str, Any]:
        if not self._current_model:
            raise NoModelLoaded()
        return {
            "model": self._current_model,
            "prompt": prompt,
            "stream": stream,
            "options": to_wire_options(self._merge_options(options), self.lad),
        }

    def generate_text(self, prompt: str, options: GenerationOptions | Mapping[str, Any] | None = None) -> str:
        """Make a blocking generation call and return the `response` text."""
        payload = self._payload(prompt, options, stream=False)
        model = payload["model"]
        t0 = time.perf_counter()
        self.lad.info("llm.call", extra={"model": model, "prompt_chars": len(prompt)})
        try:
            data = self._post("/api/generate", payload)
        except LLMServiceError as exc:
            self.lad.warning(
                "llm.call.failed", extra={"model": model, "error": str(exc)[:200], "dur_ms": ms_since(t0)}
            )
            raise wrap_error("generate text", exc) from exc
        self.lad.info("llm.call.done", extra={"model": model, "dur_ms": ms_since(t0)})
        return data.get("response") or ""

    def generate_text_stream(
        self,
        prompt: str,
        options: GenerationOptions | Mapping[str, Any] | None = None,
        *,
        chunk_size: int | None = None,
    ) -> GenerationStream:
        """Return a cancellable iterator of text chunks.

        The request is sent on the first pull; use the result as a context
        manager (or call `close()`) when abandoning it early.
        """
        payload = self._payload(prompt, options, stream=True)
        url = f"{self.base_url}/api/generate"
        timeout = self._config.timeout_s
        session = self._http()

        def _open() -> requests.Response:
            return open_request(session, "POST", url, payload=payload, timeout=(timeout, timeout), stream=True)

        return GenerationStream(
            _open, timeout_s=timeout, chunk_size=chunk_size, model=payload["model"], lad=self.lad
        )

    # ---- recovery ------------------------------------------------------

    def retry(
        self,
        operation: Callable[[], T],
        max_retries: int | None = None,
        *,
        retry_on: tuple[type[BaseException], ...] = (Exception,),
    ) -> T:
        """Run `operation` with exponential backoff (`2**attempt * base delay`)."""
        return _retry(
            operation,
            self._config.max_retries if max_retries is None else max_retries,
            base_delay=self._config.retry_base_delay_ms / 1000.0,
            retry_on=retry_on,
            sleep=self._sleep,
            lad=self.lad,
        )

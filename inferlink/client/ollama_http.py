# ------------------------------------------------------------
# Module: inferlink/client/ollama_http.py
# Purpose: Small HTTP/URL helpers for the Ollama client.
# ------------------------------------------------------------

from __future__ import annotations

from typing import Any

import requests

from inferlink.core.errors import LLMConnectionError, UpstreamError

JSON_HEADERS = {"Content-Type": "application/json"}


def base_url(host: str | None, port: int) -> str:
    """Return a fully-qualified base URL for `host`/`port`.

    Accepts bare hosts (`localhost`), `host:port`, and full http(s) URLs.
    """
    v = (host or "").strip().rstrip("/")
    if not v:
        v = "localhost"
    if v.startswith(("http://", "https://")):
        # scheme://host has one colon; scheme://host:port has two
        return v if v.count(":") >= 2 else f"{v}:{port}"
    if ":" in v:  # e.g., 127.0.0.1:11434
        return f"http://{v}"
    return f"http://{v}:{port}"


def open_request(
    session: requests.Session,
    method: str,
    url: str,
    *,
    payload: dict | None = None,
    timeout: float | tuple[float, float],
    stream: bool = False,
) -> requests.Response:
    """Issue a request and return the response once its status is 2xx.

    Raises `LLMConnectionError` for timeouts/transport failures and
    `UpstreamError` for non-2xx statuses. The response is closed on failure.
    """
    try:
        r = session.request(
            method,
            url,
            json=payload,
            headers=JSON_HEADERS,
            timeout=timeout,
            stream=stream,
        )
    except requests.Timeout as exc:
        raise LLMConnectionError(f"request to {url} timed out: {exc}") from exc
    except requests.RequestException as exc:
        raise LLMConnectionError(str(exc)) from exc
    if not r.ok:
        detail = f"HTTP {r.status_code}: {r.reason}"
        r.close()
        raise UpstreamError(detail, status=r.status_code)
    return r


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    *,
    payload: dict | None = None,
    timeout: float,
) -> dict[str, Any]:
    """Call a JSON endpoint once and return the decoded object."""
    r = open_request(session, method, url, payload=payload, timeout=timeout)
    try:
        data = r.json()
    except ValueError as exc:
        raise UpstreamError(f"malformed JSON from {url}: {exc}", status=r.status_code) from exc
    finally:
        r.close()
    if not isinstance(data, dict):
        raise UpstreamError(f"unexpected JSON from {url}: {type(data).__name__}", status=r.status_code)
    return data

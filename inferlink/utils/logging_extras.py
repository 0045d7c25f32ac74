# ------------------------------------------------------------
# Module: inferlink/utils/logging_extras.py
# Purpose: Provide a helper for contextual logging with correlation IDs.
# ------------------------------------------------------------

"""Utility for creating logger adapters that attach contextual identifiers.

Notes
-----
- Use this helper when logs need to be correlated per request or per stream.
- When `cid` is None, the adapter adds no extra metadata.
"""

import logging


def log_adapter(logger: logging.Logger, cid: str | None) -> logging.LoggerAdapter:
    """Return a `LoggerAdapter` that injects an optional correlation ID.

    Example
    -------
    >>> lad = log_adapter(logging.getLogger(__name__), cid="abc123")
    >>> lad.info("llm.call", extra={"model": "llama3"})
    """
    return MergingAdapter(logger, extra={"cid": cid} if cid else {})


class MergingAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges per-call `extra` with the adapter context.

    The stdlib adapter replaces a call's `extra` with its own; event logs in
    this package pass structured fields per call, so both are kept.
    """

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs

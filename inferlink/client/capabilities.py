# ------------------------------------------------------------
# Module: inferlink/client/capabilities.py
# Purpose: Pure helpers for model catalog entries (capability tags, byte sizes).
# ------------------------------------------------------------

from __future__ import annotations

# Name substrings (lower-case) that mark a code-capable model family.
CODE_MODEL_HINTS = ("code", "llama", "mistral")
# Name substrings suggesting multilingual / translation support.
TRANSLATION_HINTS = ("translate", "multilingual")

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def infer_capabilities(model_name: str) -> list[str]:
    """Heuristic capability tags for a model, derived from its name only."""
    name = (model_name or "").lower()
    caps = ["text-generation"]
    if any(hint in name for hint in CODE_MODEL_HINTS):
        caps.append("code-analysis")
    caps += ["document-analysis", "summarization"]
    if any(hint in name for hint in TRANSLATION_HINTS):
        caps.append("translation")
    return caps


def format_bytes(size: int | float | None) -> str:
    """Format a byte count with 1024-based units, e.g. `3.56 GB`."""
    if not size or size <= 0:
        return "0 Bytes"
    value, i = float(size), 0
    while value >= 1024 and i < len(_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    # 1.50 -> 1.5, 1.00 -> 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_SIZE_UNITS[i]}"

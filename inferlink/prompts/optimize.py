# ------------------------------------------------------------
# Module: inferlink/prompts/optimize.py
# Purpose: Compact a prompt by removing filler phrases and redundant whitespace.
# ------------------------------------------------------------

from __future__ import annotations

import math
import re

from inferlink.prompts.budget import CHARS_PER_TOKEN, truncate_content
from inferlink.prompts.types import PromptOptimization

FILLER_PHRASES = (
    "please note that",
    "it should be noted that",
    "it is important to mention",
    "as mentioned before",
    "in other words",
)

PRESERVED_KEYWORDS = (
    "requirement",
    "must",
    "shall",
    "should",
    "critical",
    "important",
    "error",
    "warning",
    "security",
    "performance",
    "user",
    "system",
)

_WS_RE = re.compile(r"\s+")


def optimize_prompt(content: str, target_length: int | None = None) -> PromptOptimization:
    """Collapse whitespace, strip filler phrases, and optionally smart-truncate.

    `removed_phrases` lists the filler phrases that were found; `preserved_keywords`
    lists the domain keywords still present after compaction.
    """
    original_length = len(content)
    optimized = _WS_RE.sub(" ", content).strip()

    removed: list[str] = []
    for phrase in FILLER_PHRASES:
        pattern = re.compile(re.escape(phrase), re.IGNORECASE)
        if pattern.search(optimized):
            removed.append(phrase)
            optimized = pattern.sub("", optimized)
    if removed:
        optimized = _WS_RE.sub(" ", optimized).strip()

    lower = optimized.lower()
    preserved = [kw for kw in PRESERVED_KEYWORDS if kw in lower]

    if target_length and len(optimized) > target_length:
        optimized = truncate_content(optimized, math.ceil(target_length / CHARS_PER_TOKEN), "smart")

    optimized_length = len(optimized)
    return PromptOptimization(
        original_length=original_length,
        optimized_length=optimized_length,
        compression_ratio=optimized_length / original_length if original_length else 1.0,
        preserved_keywords=preserved,
        removed_phrases=removed,
        content=optimized,
    )

# ------------------------------------------------------------
# Module: inferlink/prompts/budget.py
# Purpose: Token estimation and truncation strategies for over-budget prompts.
# ------------------------------------------------------------

"""Token budgeting.

Tokens are estimated as `ceil(chars / 4)`; a budget of N tokens is treated as
N * 4 characters. Content already within budget is returned unchanged.

Strategies
----------
- start  : drop the head, keep the tail behind an ellipsis.
- end    : keep the head, drop the tail.
- middle : keep head and tail halves around `" ... "`.
- smart  : keep the highest-scoring lines (keywords, bullets, key/value lines,
           long lines) in their original order; `"\\n..."` marks dropped lines.
"""

from __future__ import annotations

import math

CHARS_PER_TOKEN = 4
ELLIPSIS = "..."
STRATEGIES = ("start", "end", "middle", "smart")

# Lines mentioning these are kept first by the smart strategy.
IMPORTANT_KEYWORDS = ("requirement", "must", "shall", "should", "error", "critical", "important")


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def score_line(line: str, keywords: tuple[str, ...] = IMPORTANT_KEYWORDS) -> int:
    """Salience of one line: 2 per keyword present, +1 bullet, +1 colon, +1 if long."""
    lower = line.lower()
    score = sum(2 for kw in keywords if kw in lower)
    if line.strip().startswith(("-", "*")):
        score += 1
    if ":" in line:
        score += 1
    if len(line) > 100:
        score += 1
    return score


def smart_truncate(content: str, max_chars: int) -> str:
    if len(content) <= max_chars:
        return content
    lines = content.split("\n")
    # stable sort: equal scores keep their original order
    ranked = sorted(range(len(lines)), key=lambda i: score_line(lines[i]), reverse=True)

    limit = max_chars - len(ELLIPSIS)
    total = 0
    keep: set[int] = set()
    for i in ranked:
        cost = len(lines[i]) + 1  # +1 for the newline
        if total + cost <= limit:
            keep.add(i)
            total += cost

    result = "\n".join(lines[i] for i in range(len(lines)) if i in keep)
    if len(keep) < len(lines):
        result += "\n" + ELLIPSIS
    return result


def truncate_content(content: str, max_tokens: int, strategy: str = "smart") -> str:
    """Shrink `content` to roughly `max_tokens` tokens with the given strategy."""
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown truncation strategy {strategy!r}; expected one of {', '.join(STRATEGIES)}")
    max_chars = max_tokens * CHARS_PER_TOKEN
    if len(content) <= max_chars:
        return content

    if strategy == "start":
        keep = max(0, max_chars - len(ELLIPSIS))
        return ELLIPSIS + content[len(content) - keep:]
    if strategy == "end":
        keep = max(0, max_chars - len(ELLIPSIS))
        return content[:keep] + ELLIPSIS
    if strategy == "middle":
        half = max(0, (max_chars - 5) // 2)
        return content[:half] + " ... " + content[len(content) - half:]
    return smart_truncate(content, max_chars)

# ------------------------------------------------------------
# Module: inferlink/prompts/renderer.py
# Purpose: Mini template engine: literal substitution, then {{#if}} / {{#each}} blocks.
# ------------------------------------------------------------

"""Constrained two-pass template rendering.

Pass 1 replaces `{{name}}` for every supplied variable. Pass 2 resolves
`{{#if name}}...{{/if}}` and then `{{#each name}}...{{/each}}` blocks.
Blocks do not nest: the first closing marker ends the block.

Notes
-----
- Placeholders for names that were not supplied are left as-is.
- Substitution is single-pass, so a value containing `{{x}}` is not expanded.
- Loop items are joined with a newline when the block body spans lines and
  concatenated when it is inline: `{{#each a}}[{{this}}]{{/each}}` -> `[1][2]`.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from inferlink.prompts.types import PromptTemplate
from inferlink.prompts.validation import PLACEHOLDER_RE

IF_BLOCK_RE = re.compile(r"\{\{#if\s+(\w+)\}\}(.*?)\{\{/if\}\}", re.DOTALL)
EACH_BLOCK_RE = re.compile(r"\{\{#each\s+(\w+)\}\}(.*?)\{\{/each\}\}", re.DOTALL)
THIS_RE = re.compile(r"\{\{this\}\}")

# Phrases derived for the `length` variable when no description is supplied.
LENGTH_DESCRIPTIONS = {
    "short": "2-3 sentences",
    "medium": "1-2 paragraphs",
    "long": "3-4 paragraphs with detailed analysis",
}


def stringify(value: Any) -> str:
    """Text form of a variable value as it appears in a prompt."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(stringify(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def prepare_variables(template: PromptTemplate, variables: Mapping[str, Any]) -> dict[str, Any]:
    """Copy `variables`, filling declared defaults and the derived length phrase."""
    processed = dict(variables)
    for var in template.variables:
        if processed.get(var.name) is None and var.default_value is not None:
            processed[var.name] = var.default_value

    length = processed.get("length")
    if isinstance(length, str) and length in LENGTH_DESCRIPTIONS and not processed.get("length_description"):
        processed["length_description"] = LENGTH_DESCRIPTIONS[length]
    return processed


def substitute(body: str, variables: Mapping[str, Any]) -> str:
    def _replace(m: re.Match) -> str:
        key = m.group(1)
        return stringify(variables[key]) if key in variables else m.group(0)

    return PLACEHOLDER_RE.sub(_replace, body)


def process_conditionals(text: str, variables: Mapping[str, Any]) -> str:
    return IF_BLOCK_RE.sub(lambda m: m.group(2) if variables.get(m.group(1)) else "", text)


def process_loops(text: str, variables: Mapping[str, Any]) -> str:
    def _expand(m: re.Match) -> str:
        items = variables.get(m.group(1))
        if not isinstance(items, (list, tuple)):
            return ""
        inner = m.group(2)
        sep = "\n" if "\n" in inner else ""
        return sep.join(THIS_RE.sub(lambda _: stringify(item), inner) for item in items)

    return EACH_BLOCK_RE.sub(_expand, text)


def render_template(body: str, variables: Mapping[str, Any]) -> str:
    rendered = substitute(body, variables)
    rendered = process_conditionals(rendered, variables)
    rendered = process_loops(rendered, variables)
    return rendered.strip()

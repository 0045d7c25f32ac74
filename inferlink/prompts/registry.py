# ------------------------------------------------------------
# Module: inferlink/prompts/registry.py
# Purpose: Owned, validated keyed store of prompt templates.
# ------------------------------------------------------------

"""Prompt template registry.

Responsibilities
----------------
- Validate templates before they are stored (register and update).
- Keep ids unique; the registry exclusively owns its map.
- List templates, optionally filtered by analysis type.

Notes
-----
- No locking: concurrent writers must serialize externally.
- Registering an existing id replaces the stored template.
- Unused-variable warnings are logged, never raised.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic.alias_generators import to_snake

from inferlink.core.errors import TemplateNotFound, TemplateValidationError
from inferlink.prompts.types import PromptTemplate, ValidationResult
from inferlink.prompts.validation import validate_template

logger = logging.getLogger(__name__)


def as_template(template: PromptTemplate | Mapping[str, Any]) -> PromptTemplate:
    if isinstance(template, PromptTemplate):
        return template.model_copy(deep=True)
    return PromptTemplate.model_validate(dict(template))


def _patch_fields(patch: PromptTemplate | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(patch, PromptTemplate):
        return patch.model_dump(exclude_unset=True)
    fields = {}
    for key, value in patch.items():
        name = "body" if key == "template" else to_snake(key)
        fields[name] = value
    return fields


class TemplateRegistry:
    def __init__(self) -> None:
        self._templates: dict[str, PromptTemplate] = {}

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def _check(self, template: PromptTemplate, *, prefix: str) -> ValidationResult:
        result = validate_template(template)
        if not result.valid:
            raise TemplateValidationError(result.errors, result.warnings, prefix=prefix)
        for w in result.warnings:
            logger.debug("prompt.template.warning", extra={"template_id": template.id, "detail": w.message})
        return result

    def register_template(self, template: PromptTemplate | Mapping[str, Any]) -> ValidationResult:
        """Validate and store `template`; returns the (warning-only) validation result."""
        tpl = as_template(template)
        result = self._check(tpl, prefix="Invalid template")
        if tpl.id in self._templates:
            logger.info("prompt.template.replaced", extra={"template_id": tpl.id})
        self._templates[tpl.id] = tpl
        return result

    def get_template(self, template_id: str) -> PromptTemplate | None:
        return self._templates.get(template_id)

    def require(self, template_id: str) -> PromptTemplate:
        tpl = self._templates.get(template_id)
        if tpl is None:
            raise TemplateNotFound(template_id)
        return tpl

    def list_templates(self, analysis_type: str | None = None) -> list[PromptTemplate]:
        templates = list(self._templates.values())
        if analysis_type:
            return [t for t in templates if t.analysis_type == analysis_type]
        return templates

    def update_template(self, template_id: str, patch: PromptTemplate | Mapping[str, Any]) -> PromptTemplate:
        """Merge `patch` into the stored template, re-validate, then commit.

        The id never changes; on validation failure the stored template is kept.
        """
        existing = self.require(template_id)
        merged = {**existing.model_dump(), **_patch_fields(patch), "id": template_id}
        updated = PromptTemplate.model_validate(merged)
        self._check(updated, prefix="Invalid template update")
        self._templates[template_id] = updated
        return updated

    def remove_template(self, template_id: str) -> None:
        self.require(template_id)
        del self._templates[template_id]

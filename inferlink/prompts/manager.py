# ------------------------------------------------------------
# Module: inferlink/prompts/manager.py
# Purpose: Registry + renderer + budget behind one object used by the facade and API.
# ------------------------------------------------------------

"""Prompt manager.

Responsibilities
----------------
- Own a `TemplateRegistry` (seeded with the built-in templates by default).
- Render a template with variables into a `RenderedPrompt` that fits a token budget.
- Expose estimation, truncation, optimization and validation helpers.

Notes
-----
- Variables are validated before defaults are filled, so a required variable
  must be supplied even when it declares a default.
- Effective budget: `context.max_tokens` -> `template.max_tokens` -> default.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from inferlink.core.config import settings as _settings
from inferlink.core.errors import VariableValidationError
from inferlink.prompts import budget, optimize, validation
from inferlink.prompts.defaults import register_default_templates
from inferlink.prompts.registry import TemplateRegistry
from inferlink.prompts.renderer import prepare_variables, render_template
from inferlink.prompts.types import (
    PromptOptimization,
    PromptTemplate,
    RenderContext,
    RenderedPrompt,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class PromptManager:
    def __init__(
        self,
        registry: TemplateRegistry | None = None,
        *,
        load_defaults: bool = True,
        default_max_tokens: int | None = None,
        lad: logging.Logger | logging.LoggerAdapter | None = None,
    ):
        self.registry = registry if registry is not None else TemplateRegistry()
        self.default_max_tokens = default_max_tokens or _settings.PROMPT_DEFAULT_MAX_TOKENS
        self.lad = lad or logger
        if load_defaults:
            register_default_templates(self.registry)

    # ---- registry ------------------------------------------------------

    def register_template(self, template: PromptTemplate | Mapping[str, Any]) -> ValidationResult:
        return self.registry.register_template(template)

    def get_template(self, template_id: str) -> PromptTemplate | None:
        return self.registry.get_template(template_id)

    def list_templates(self, analysis_type: str | None = None) -> list[PromptTemplate]:
        return self.registry.list_templates(analysis_type)

    def update_template(self, template_id: str, patch: PromptTemplate | Mapping[str, Any]) -> PromptTemplate:
        return self.registry.update_template(template_id, patch)

    def remove_template(self, template_id: str) -> None:
        self.registry.remove_template(template_id)

    # ---- rendering -----------------------------------------------------

    def render_prompt(
        self,
        template_id: str,
        variables: Mapping[str, Any],
        context: RenderContext | Mapping[str, Any] | None = None,
    ) -> RenderedPrompt:
        """Render `template_id` with `variables`, truncating to the effective budget.

        Raises
        ------
        TemplateNotFound
            Unknown template id.
        VariableValidationError
            One or more variables violate the template's schema (all reported).
        """
        template = self.registry.require(template_id)
        ctx = context if isinstance(context, RenderContext) else RenderContext.model_validate(context or {})

        checked = validation.validate_variables(template, variables)
        if not checked.valid:
            raise VariableValidationError(checked.errors)

        processed = prepare_variables(template, variables)
        content = render_template(template.body, processed)

        token_count = budget.estimate_tokens(content)
        max_tokens = ctx.max_tokens or template.max_tokens or self.default_max_tokens
        truncated = token_count > max_tokens
        if truncated:
            content = budget.truncate_content(content, max_tokens, ctx.truncation_strategy)
            token_count = budget.estimate_tokens(content)

        self.lad.info(
            "prompt.render",
            extra={
                "template_id": template_id,
                "tokens": token_count,
                "max_tokens": max_tokens,
                "truncated": truncated,
            },
        )
        return RenderedPrompt(
            content=content,
            token_count=token_count,
            truncated=truncated,
            variables=processed,
            template=template,
        )

    # ---- helpers -------------------------------------------------------

    def estimate_tokens(self, text: str) -> int:
        return budget.estimate_tokens(text)

    def truncate_content(self, content: str, max_tokens: int, strategy: str = "smart") -> str:
        return budget.truncate_content(content, max_tokens, strategy)

    def optimize_prompt(self, content: str, target_length: int | None = None) -> PromptOptimization:
        return optimize.optimize_prompt(content, target_length)

    def validate_template(self, template: PromptTemplate | Mapping[str, Any]) -> ValidationResult:
        tpl = template if isinstance(template, PromptTemplate) else PromptTemplate.model_validate(dict(template))
        return validation.validate_template(tpl)

    def validate_variables(self, template_id: str, variables: Mapping[str, Any]) -> ValidationResult:
        return validation.validate_variables(self.registry.require(template_id), variables)

# ------------------------------------------------------------
# Module: inferlink/api/v1/prompts.py
# Purpose: Read and render registered prompt templates over HTTP.
# ------------------------------------------------------------

"""
Responsibilities
----------------
- List templates (optionally by analysis type) and fetch one by id.
- Render a template with variables under an optional token budget.

Error Model (HTTP)
------------------
- 404 -> unknown template id
- 422 -> variables violate the template schema (all violations listed)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from inferlink.api.deps import get_prompts
from inferlink.api.v1.schemas import RenderRequest, RenderResponse
from inferlink.prompts.manager import PromptManager
from inferlink.prompts.types import PromptTemplate

router = APIRouter()


@router.get("", response_model=list[PromptTemplate])
def list_prompts(
    analysis_type: str | None = None, prompts: PromptManager = Depends(get_prompts)
) -> list[PromptTemplate]:
    return prompts.list_templates(analysis_type)


@router.get("/{template_id}", response_model=PromptTemplate)
def get_prompt(template_id: str, prompts: PromptManager = Depends(get_prompts)) -> PromptTemplate:
    return prompts.registry.require(template_id)


@router.post("/{template_id}/render", response_model=RenderResponse)
def render_prompt(
    template_id: str, body: RenderRequest, prompts: PromptManager = Depends(get_prompts)
) -> RenderResponse:
    rendered = prompts.render_prompt(template_id, body.variables, body.context)
    return RenderResponse(
        template_id=template_id,
        content=rendered.content,
        token_count=rendered.token_count,
        truncated=rendered.truncated,
    )

# ------------------------------------------------------------
# Module: inferlink/prompts/types.py
# Purpose: Pydantic contracts for prompt templates, render context and results.
# ------------------------------------------------------------

"""Typed contracts for the prompt layer.

Notes
-----
- Models accept camelCase keys (`analysisType`, `defaultValue`, `maxTokens`) as
  well as snake_case, so template definitions can be loaded from JSON as-is.
- Required template fields default to empty values on purpose: structural
  checks live in `validation.validate_template`, which reports every problem at
  once as a `TemplateValidationError` instead of failing on the first field.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

VariableType = Literal["string", "number", "boolean", "array"]
TruncationStrategy = Literal["start", "end", "middle", "smart"]

VARIABLE_TYPES: tuple[str, ...] = ("string", "number", "boolean", "array")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VariableValidation(_CamelModel):
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None
    allowed_values: list[Any] | None = None


class TemplateVariable(_CamelModel):
    name: str = ""
    # kept as plain str so an unknown type is a validation issue, not a parse error
    type: str = ""
    required: bool = False
    description: str = ""
    default_value: Any = None
    validation: VariableValidation | None = None


class PromptExample(_CamelModel):
    input: dict[str, Any] = Field(default_factory=dict)
    expected_output: str = ""
    description: str = ""


class PromptTemplate(_CamelModel):
    id: str = ""
    name: str = ""
    description: str = ""
    analysis_type: str = ""
    body: str = Field("", validation_alias=AliasChoices("body", "template"))
    max_tokens: int | None = None
    variables: list[TemplateVariable] = Field(default_factory=list)
    examples: list[PromptExample] = Field(default_factory=list)

    def variable(self, name: str) -> TemplateVariable | None:
        return next((v for v in self.variables if v.name == name), None)


class RenderContext(_CamelModel):
    max_tokens: int | None = Field(None, ge=1)
    current_tokens: int = 0
    truncation_strategy: TruncationStrategy = "smart"


class RenderedPrompt(BaseModel):
    content: str
    token_count: int
    truncated: bool
    variables: dict[str, Any]
    template: PromptTemplate


class ValidationIssue(BaseModel):
    field: str
    message: str
    code: str


class ValidationWarning(BaseModel):
    field: str
    message: str
    suggestion: str | None = None


class ValidationResult(BaseModel):
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


class PromptOptimization(BaseModel):
    original_length: int
    optimized_length: int
    compression_ratio: float
    preserved_keywords: list[str]
    removed_phrases: list[str]
    content: str

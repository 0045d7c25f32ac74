# ------------------------------------------------------------
# Module: inferlink/prompts/validation.py
# Purpose: Structural checks for templates and schema checks for render variables.
# ------------------------------------------------------------

"""Template and variable validation.

Both validators collect every problem they find and return a
`ValidationResult`; callers decide whether to raise. Nothing here performs I/O.

Template rules
--------------
- `id`, `name`, `body`, `analysis_type` are required.
- Each variable needs a name and one of the known types; names are unique.
- Every `{{token}}` in the body is a declared variable or the loop variable `this`.
- A declared variable that never appears as `{{name}}` is only a warning.

Variable rules
--------------
- Required variables must be present and non-empty.
- Values must match the declared type.
- Strings are checked against min/max length and `pattern` (`re.search`).
- `allowed_values` applies to any type.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from inferlink.prompts.types import (
    VARIABLE_TYPES,
    PromptTemplate,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
)

# `{{name}}` placeholders; block markers (`{{#if x}}`, `{{/each}}`) never match.
PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")
LOOP_VARIABLE = "this"


def placeholders(body: str) -> list[str]:
    """Distinct placeholder names in order of first appearance."""
    return list(dict.fromkeys(PLACEHOLDER_RE.findall(body or "")))


def validate_template(template: PromptTemplate) -> ValidationResult:
    result = ValidationResult()
    errors, warnings = result.errors, result.warnings

    for field, label in (
        ("id", "Template ID"),
        ("name", "Template name"),
        ("body", "Template content"),
        ("analysis_type", "Analysis type"),
    ):
        if not getattr(template, field):
            errors.append(ValidationIssue(field=field, message=f"{label} is required", code="REQUIRED"))

    declared: set[str] = set()
    for i, variable in enumerate(template.variables):
        prefix = f"variables[{i}]"
        if not variable.name:
            errors.append(
                ValidationIssue(field=f"{prefix}.name", message="Variable name is required", code="REQUIRED")
            )
        elif variable.name in declared:
            errors.append(
                ValidationIssue(
                    field=f"{prefix}.name",
                    message=f"Variable '{variable.name}' is declared more than once",
                    code="DUPLICATE_VARIABLE",
                )
            )
        if not variable.type:
            errors.append(
                ValidationIssue(field=f"{prefix}.type", message="Variable type is required", code="REQUIRED")
            )
        elif variable.type not in VARIABLE_TYPES:
            errors.append(
                ValidationIssue(
                    field=f"{prefix}.type",
                    message=f"Variable type '{variable.type}' is not one of {', '.join(VARIABLE_TYPES)}",
                    code="INVALID_TYPE",
                )
            )
        if variable.name:
            declared.add(variable.name)
            if f"{{{{{variable.name}}}}}" not in template.body:
                warnings.append(
                    ValidationWarning(
                        field=f"{prefix}.name",
                        message=f"Variable '{variable.name}' is defined but not used in template",
                        suggestion=f"Remove unused variable or add {{{{{variable.name}}}}} to template",
                    )
                )

    for used in placeholders(template.body):
        if used not in declared and used != LOOP_VARIABLE:
            errors.append(
                ValidationIssue(
                    field="body",
                    message=f"Template uses undefined variable '{used}'",
                    code="UNDEFINED_VARIABLE",
                )
            )

    return result


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or (isinstance(value, (list, tuple)) and not value)


def check_type(value: Any, expected: str) -> bool:
    if expected == "string":
        return isinstance(value, str)
    if expected == "number":
        # bool is an int subclass but not a number here
        return isinstance(value, (int, float)) and not isinstance(value, bool) and not (
            isinstance(value, float) and math.isnan(value)
        )
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "array":
        return isinstance(value, (list, tuple))
    return True


def validate_variables(template: PromptTemplate, variables: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult()
    errors = result.errors

    for var in template.variables:
        value = variables.get(var.name)

        if var.required and _is_blank(value):
            errors.append(
                ValidationIssue(field=var.name, message=f"Required variable '{var.name}' is missing", code="REQUIRED")
            )
            continue
        if value is None:
            continue

        if not check_type(value, var.type):
            errors.append(
                ValidationIssue(
                    field=var.name,
                    message=f"Variable '{var.name}' must be of type {var.type}",
                    code="TYPE_MISMATCH",
                )
            )

        rules = var.validation
        if rules is None:
            continue
        if isinstance(value, str):
            if rules.min_length is not None and len(value) < rules.min_length:
                errors.append(
                    ValidationIssue(
                        field=var.name,
                        message=f"Variable '{var.name}' must be at least {rules.min_length} characters",
                        code="MIN_LENGTH",
                    )
                )
            if rules.max_length is not None and len(value) > rules.max_length:
                errors.append(
                    ValidationIssue(
                        field=var.name,
                        message=f"Variable '{var.name}' must be at most {rules.max_length} characters",
                        code="MAX_LENGTH",
                    )
                )
            if rules.pattern and not re.search(rules.pattern, value):
                errors.append(
                    ValidationIssue(
                        field=var.name,
                        message=f"Variable '{var.name}' does not match required pattern",
                        code="PATTERN_MISMATCH",
                    )
                )
        if rules.allowed_values is not None and value not in rules.allowed_values:
            errors.append(
                ValidationIssue(
                    field=var.name,
                    message=f"Variable '{var.name}' must be one of: {', '.join(map(str, rules.allowed_values))}",
                    code="INVALID_VALUE",
                )
            )

    return result

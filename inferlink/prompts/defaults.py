# ------------------------------------------------------------
# Module: inferlink/prompts/defaults.py
# Purpose: Built-in analysis templates registered when a PromptManager is created.
# ------------------------------------------------------------

"""Built-in prompt templates, one per analysis type.

| id                      | analysis_type | main variable  |
|-------------------------|---------------|----------------|
| requirements-extraction | requirements  | content        |
| document-summary        | summary       | content        |
| project-estimation      | estimation    | requirements   |
| codebase-analysis       | codebase      | structure      |
| document-structure      | structure     | content        |
"""

from __future__ import annotations

from inferlink.prompts.registry import TemplateRegistry
from inferlink.prompts.types import PromptTemplate

REQUIREMENTS_EXTRACTION = """You are an expert business analyst. Analyze the following document and extract all requirements.

Instructions:
- Identify both functional and non-functional requirements
- Categorize each requirement by type and priority
- Provide clear acceptance criteria for each requirement
- Format the output as a JSON array

Document Content:
{{content}}

Return a JSON array with this structure:
[
  {
    "id": "REQ-001",
    "type": "functional|non-functional",
    "priority": "high|medium|low",
    "description": "Clear requirement description",
    "acceptanceCriteria": ["Criterion 1", "Criterion 2"],
    "category": "authentication|ui|performance|security|etc",
    "complexity": 1-5,
    "estimatedHours": number
  }
]"""

DOCUMENT_SUMMARY = """Provide a {{length}} summary of the following document.

{{#if include_key_points}}
Include key points and action items.
{{/if}}

{{#if audience}}
Tailor the summary for: {{audience}}
{{/if}}

Document Content:
{{content}}

Summary Requirements:
- {{length}} length ({{length_description}})
- Professional tone
- Focus on main objectives and outcomes
{{#if include_key_points}}
- List key points and action items separately
{{/if}}"""

PROJECT_ESTIMATION = """You are an experienced project manager and software architect. Analyze the following requirements and provide a detailed project estimate.

Requirements:
{{requirements}}

{{#if historical_data}}
Historical Project Data:
{{historical_data}}
{{/if}}

{{#if constraints}}
Project Constraints:
{{constraints}}
{{/if}}

Provide a detailed estimate including:
1. Time estimation (hours/days)
2. Cost calculation (hourly rate: ${{hourly_rate}}/hour)
3. Risk assessment
4. Assumptions made
5. Breakdown by feature/component
6. Confidence level (0-1)

Return as JSON:
{
  "totalHours": number,
  "totalCost": number,
  "breakdown": [
    {"category": "string", "hours": number, "description": "string", "requirements": ["req-id-1"]}
  ],
  "risks": [
    {"id": "string", "name": "string", "probability": 0-1, "impact": "high|medium|low", "description": "string", "mitigation": "string"}
  ],
  "assumptions": ["assumption 1", "assumption 2"],
  "confidence": 0-1
}"""

CODEBASE_ANALYSIS = """You are a senior software architect. Analyze the following codebase information and provide comprehensive insights.

Codebase Structure:
{{structure}}

{{#if dependencies}}
Dependencies:
{{dependencies}}
{{/if}}

{{#if metrics}}
Code Metrics:
{{metrics}}
{{/if}}

Analysis Focus:
{{#each focus_areas}}
- {{this}}
{{/each}}

Provide analysis covering:
1. Architecture patterns and design quality
2. Code organization and structure
3. Dependency management
4. Potential issues and technical debt
5. Security considerations
6. Performance implications
7. Maintainability assessment
8. Improvement recommendations

Format as structured analysis with clear sections and actionable recommendations."""

DOCUMENT_STRUCTURE = """Analyze the structure and organization of the following document.

Document Content:
{{content}}

Describe:
- The main sections and their purpose
- How information flows between sections
- Missing or underdeveloped sections
- Suggestions to improve organization

Return as JSON:
{
  "sections": [{"title": "string", "purpose": "string"}],
  "gaps": ["string"],
  "suggestions": ["string"]
}"""


DEFAULT_TEMPLATES: tuple[PromptTemplate, ...] = (
    PromptTemplate(
        id="requirements-extraction",
        name="Requirements Extraction",
        description="Extract functional and non-functional requirements from documents",
        analysis_type="requirements",
        max_tokens=2048,
        body=REQUIREMENTS_EXTRACTION,
        variables=[
            {
                "name": "content",
                "type": "string",
                "required": True,
                "description": "The document content to analyze",
                "validation": {"min_length": 10},
            }
        ],
    ),
    PromptTemplate(
        id="document-summary",
        name="Document Summarization",
        description="Generate comprehensive summaries of documents",
        analysis_type="summary",
        max_tokens=1024,
        body=DOCUMENT_SUMMARY,
        variables=[
            {"name": "content", "type": "string", "required": True, "description": "The document content to summarize"},
            {
                "name": "length",
                "type": "string",
                "required": True,
                "description": "Summary length",
                "default_value": "medium",
                "validation": {"allowed_values": ["short", "medium", "long"]},
            },
            {"name": "length_description", "type": "string", "description": "Description of the length requirement"},
            {
                "name": "include_key_points",
                "type": "boolean",
                "description": "Whether to include key points and action items",
                "default_value": True,
            },
            {"name": "audience", "type": "string", "description": "Target audience for the summary"},
        ],
    ),
    PromptTemplate(
        id="project-estimation",
        name="Project Estimation",
        description="Generate project estimates based on requirements",
        analysis_type="estimation",
        max_tokens=2048,
        body=PROJECT_ESTIMATION,
        variables=[
            {"name": "requirements", "type": "string", "required": True, "description": "JSON string of requirements"},
            {
                "name": "hourly_rate",
                "type": "number",
                "description": "Hourly rate for cost calculation",
                "default_value": 100,
            },
            {"name": "historical_data", "type": "string", "description": "Historical project data for reference"},
            {"name": "constraints", "type": "string", "description": "Project constraints and limitations"},
        ],
    ),
    PromptTemplate(
        id="codebase-analysis",
        name="Codebase Analysis",
        description="Analyze codebase structure and provide insights",
        analysis_type="codebase",
        max_tokens=3072,
        body=CODEBASE_ANALYSIS,
        variables=[
            {"name": "structure", "type": "string", "required": True, "description": "Codebase structure information"},
            {"name": "dependencies", "type": "string", "description": "Dependency information"},
            {"name": "metrics", "type": "string", "description": "Code quality metrics"},
            {
                "name": "focus_areas",
                "type": "array",
                "description": "Specific areas to focus analysis on",
                "default_value": ["architecture", "security", "performance", "maintainability"],
            },
        ],
    ),
    PromptTemplate(
        id="document-structure",
        name="Document Structure",
        description="Describe how a document is organized and where it has gaps",
        analysis_type="structure",
        max_tokens=2048,
        body=DOCUMENT_STRUCTURE,
        variables=[
            {"name": "content", "type": "string", "required": True, "description": "The document content to analyze"}
        ],
    ),
)


def register_default_templates(registry: TemplateRegistry) -> None:
    for template in DEFAULT_TEMPLATES:
        registry.register_template(template)

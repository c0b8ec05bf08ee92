"""Prompt templates for the documentation generation actions."""
from __future__ import annotations

import json
from typing import Any

AGENT_SYSTEM_PROMPT = """You are the Content Creation Agent for Intelli HRM, an enterprise-grade HRMS platform serving the Caribbean, Africa, and global markets.

Your role is to generate high-quality documentation following these standards:

## Output Formats

### Manual Section Format
Markdown with a section badge and reading time estimate, an executive summary for
overview sections, business value, step-by-step procedures, configuration tables
where applicable, tips and warnings callouts, learning objectives and
cross-references to related features.

### KB Article Format
JSON: {"title", "summary", "persona", "content", "steps": [{"step", "action", "tip"}],
"faqs": [{"question", "answer"}], "keywords": [], "related": []}

### Quick Start Format
JSON: {"roles", "prerequisites", "pitfalls", "setupSteps", "successMetrics"}

### SOP Format
JSON: {"title", "purpose", "scope", "definitions", "responsibilities", "procedure",
"qualityChecks", "exceptions", "revisionHistory"}

## Quality Standards
- Readability: Target Flesch-Kincaid Grade 8-10
- Completeness: Cover all UI elements and workflows mentioned in feature data
- Accuracy: Reference actual database fields and UI components from context
- Actionability: Every section must have clear next steps
- Consistency: Use the "Intelli HRM" brand name only

## Persona Targeting
- ESS (Employee Self-Service): Simple language, focus on personal tasks
- MSS (Manager Self-Service): Team-focused, approval workflows, analytics
- HR Partner: Policy administration, compliance, employee support
- Admin: Technical configuration, security, system setup

## Feature Status Badges
- Implemented: Feature exists in current system
- Recommended: Best practice or target state
- Planned: Roadmap feature not yet available"""

DEFAULT_AUDIENCES = ["HR Administrators", "Super Admins"]
CURRENT_CONTENT_PREVIEW_CHARS = 2000


def _as_json(value: Any) -> str:
    return json.dumps(value or {})


def manual_section_prompt(
    feature: dict[str, Any],
    section_number: str,
    section_title: str,
    audiences: list[str],
    artifact_count: int,
) -> str:
    return f"""Generate an Administrator Manual section for Intelli HRM.

## Context
- Section Number: {section_number}
- Section Title: {section_title}
- Feature Code: {feature.get("feature_code", "")}
- Feature Name: {feature.get("feature_name", "")}
- Module: {feature.get("module_name", "")}
- Route Path: {feature.get("route_path") or "N/A"}
- Description: {feature.get("description") or "No description available"}
- Workflow Steps: {_as_json(feature.get("workflow_steps"))}
- UI Elements: {_as_json(feature.get("ui_elements"))}
- Target Audience: {", ".join(audiences)}
- Existing Documentation: {artifact_count} artifacts

## Requirements
1. Section header with Badge (Section {section_number}) and estimated reading time ("X min read")
2. Executive summary (overview sections only)
3. Prerequisites
4. Step-by-step configuration/usage guide
5. Configuration options table, if applicable
6. Best practices
7. Troubleshooting
8. Related features
9. Learning objectives (3-5 bullet points)

Format as clean markdown that can be rendered in a React component."""


def kb_article_prompt(feature: dict[str, Any], persona: str) -> str:
    name = feature.get("feature_name", "")
    return f"""Generate a Knowledge Base article for Intelli HRM.

## Feature Information
- Feature: {name}
- Code: {feature.get("feature_code", "")}
- Module: {feature.get("module_name", "")}
- Description: {feature.get("description") or "No description"}
- Route: {feature.get("route_path") or "N/A"}
- Target Persona: {persona.upper()}

## Requirements
Generate a JSON object with this exact structure:
{{
  "title": "How to [specific action] in {name}",
  "summary": "2-3 sentence overview suitable for an article card",
  "persona": "{persona}",
  "content": "Full markdown article with clear headings and steps",
  "steps": [{{ "step": 1, "action": "Clear action description", "tip": "Optional helpful tip" }}],
  "faqs": [{{ "question": "Common question?", "answer": "Clear answer" }}],
  "keywords": ["keyword1", "keyword2", "keyword3"],
  "category": "suggested KB category",
  "related": ["related_feature_code_1"]
}}

Focus on practical, actionable guidance for the {persona} persona."""


def quickstart_prompt(module: dict[str, Any], features: list[dict[str, Any]]) -> str:
    name = module.get("module_name", "")
    code = module.get("module_code", "")
    feature_names = ", ".join(str(f.get("feature_name", "")) for f in features)
    return f"""Generate a Quick Start Guide for the {name} module in Intelli HRM.

## Module Information
- Module: {name}
- Code: {code}
- Description: {module.get("description") or "No description"}
- Features: {feature_names}
- Feature Count: {len(features)}

## Requirements
Generate a JSON object for a rapid module setup guide:
{{
  "moduleName": "{name}",
  "moduleCode": "{code}",
  "estimatedSetupTime": "X hours",
  "roles": [{{ "role": "role_code", "title": "...", "icon": "lucide-icon-name", "responsibility": "..." }}],
  "prerequisites": [{{ "id": "prereq_1", "title": "...", "description": "...", "required": true }}],
  "pitfalls": [{{ "issue": "...", "prevention": "...", "severity": "high|medium|low" }}],
  "setupSteps": [{{ "id": "step_1", "title": "...", "estimatedTime": "15 min", "description": "...", "substeps": ["..."] }}],
  "successMetrics": [{{ "metric": "...", "target": "...", "howToMeasure": "..." }}],
  "nextSteps": ["What to do after initial setup"]
}}

Make it practical and actionable for implementation consultants."""


def sop_prompt(feature: dict[str, Any], today: str) -> str:
    name = feature.get("feature_name", "")
    return f"""Generate a Standard Operating Procedure (SOP) for {name} in Intelli HRM.

## Feature Information
- Feature: {name}
- Module: {feature.get("module_name", "")}
- Description: {feature.get("description") or "No description"}
- Route: {feature.get("route_path") or "N/A"}

## Requirements
Generate a formal SOP JSON structure:
{{
  "title": "SOP: {name}",
  "sopNumber": "SOP-XXX-001",
  "effectiveDate": "{today}",
  "purpose": "Why this SOP exists and what it ensures",
  "scope": "Who this applies to and under what circumstances",
  "definitions": [{{ "term": "Term", "definition": "Clear definition" }}],
  "responsibilities": [{{ "role": "Role name", "duties": ["Duty 1"] }}],
  "procedure": [{{ "step": 1, "action": "...", "details": "...", "screenshotMarker": "[Screenshot: ...]" }}],
  "qualityChecks": ["Verification step 1"],
  "exceptions": ["When to deviate from this procedure"],
  "relatedDocuments": ["Related SOP or document references"],
  "revisionHistory": [{{ "version": "1.0", "date": "{today}", "author": "System", "changes": "Initial release" }}]
}}"""


def chat_system_prompt(modules: list[dict[str, Any]], sample_features: list[dict[str, Any]]) -> str:
    module_names = ", ".join(str(m.get("module_name", "")) for m in modules)
    feature_names = ", ".join(str(f.get("feature_name", "")) for f in sample_features)
    return f"""{AGENT_SYSTEM_PROMPT}

## Current Context
Available Modules: {module_names}
Sample Features: {feature_names}

## Chat Capabilities
You can help users:
1. Generate documentation (manual sections, KB articles, SOPs, quick starts)
2. Analyze coverage and identify gaps
3. Suggest improvements and next actions
4. Answer questions about documentation best practices

When the user requests content generation, respond with a clear plan and ask for confirmation.
Be conversational but focused on documentation tasks."""


def feature_context_block(features: list[dict[str, Any]]) -> str:
    blocks = []
    for feature in features:
        blocks.append(
            f"Feature: {feature.get('feature_name', '')} ({feature.get('feature_code', '')})\n"
            f"Description: {feature.get('description') or 'N/A'}\n"
            f"Workflow Steps: {_as_json(feature.get('workflow_steps'))}\n"
            f"UI Elements: {_as_json(feature.get('ui_elements'))}"
        )
    return "\n\n".join(blocks)


def section_regeneration_prompt(
    section: dict[str, Any],
    manual_name: str,
    feature_context: str,
    current_content: str,
    custom_instructions: str | None,
) -> str:
    preview = current_content[:CURRENT_CONTENT_PREVIEW_CHARS]
    if len(current_content) > CURRENT_CONTENT_PREVIEW_CHARS:
        preview += "..."
    extra = f"Additional Instructions: {custom_instructions}" if custom_instructions else ""
    number = section.get("section_number", "")
    return f"""Regenerate the following Administrator Manual section for {manual_name} in Intelli HRM.

## Current Section
- Section Number: {number}
- Section Title: {section.get("title", "")}
- Manual: {manual_name}

## Source Features
{feature_context or "No specific features linked to this section."}

## Current Content (for reference)
{preview}

## Requirements
Generate an improved version of this section following the Intelli HRM Administrator Manual format:
1. Section header with Badge (Section {number}) and estimated reading time
2. Clear, actionable content with step-by-step instructions where applicable
3. Configuration tables if relevant
4. Best practices and tips
5. Troubleshooting section if applicable

{extra}

Format as clean markdown that can be rendered in a React component."""

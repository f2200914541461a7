"""
Templating Context

Responsibilities:
- Resolves resume data into placeholder values (every key spelling, sample literals)
- Substitutes placeholders in third-party HTML templates
- Removes markup that references absent optional fields
- Regenerates repeating sections (work experience, education, skills)
- Extracts template CSS with defensive overrides

Owns: Placeholder vocabulary, per-template policies, repeating-group fragments
Never: Writes templates or resume data back to storage
"""

from cvforge.contexts.templating.compositor import compose_html, compose_template
from cvforge.contexts.templating.exceptions import (
    FragmentRenderError,
    InvalidResumeDataError,
    TemplateCompositionError,
)
from cvforge.contexts.templating.field_resolver import REMOVE, ValueTable, resolve_fields
from cvforge.contexts.templating.policies import PolicyRegistry, TemplatePolicy
from cvforge.contexts.templating.registries import FragmentRegistry
from cvforge.contexts.templating.resume_data_structure import ResumeData, TemplateRecord
from cvforge.contexts.templating.styles import content_density_class, extract_styles
from cvforge.contexts.templating.tokens import (
    TokenContext,
    analyze_token_context,
    extract_template_tokens,
    unresolved_tokens,
)

__all__ = [
    "REMOVE",
    "FragmentRegistry",
    "FragmentRenderError",
    "InvalidResumeDataError",
    "PolicyRegistry",
    "ResumeData",
    "TemplateCompositionError",
    "TemplatePolicy",
    "TemplateRecord",
    "TokenContext",
    "ValueTable",
    "analyze_token_context",
    "compose_html",
    "compose_template",
    "content_density_class",
    "extract_styles",
    "extract_template_tokens",
    "resolve_fields",
    "unresolved_tokens",
]

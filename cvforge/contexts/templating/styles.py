"""
Template Style Extraction

Pulls the inline <style> block out of a template and appends defensive CSS so
variable-length user content is never clipped by fixed heights or hidden
overflow. A pure function of the template, so results are cached per template.
"""

import re
from functools import lru_cache
from typing import Any

from cvforge.contexts.templating.html_patterns import MarkupPatterns
from cvforge.contexts.templating.resume_data_structure import ResumeData

STYLE_BLOCK = re.compile(MarkupPatterns.STYLE_BLOCK, re.IGNORECASE | re.DOTALL)

DEFENSIVE_CSS = """
/* cvforge: keep variable-length content visible */
.resume-content,
.resume-content * {
  overflow: visible !important;
  max-height: none !important;
}

.resume-section, .sidebar, .main-content, .section, .container, .page {
  height: auto !important;
  min-height: min-content !important;
  max-height: none !important;
}

.work-experience-item, .education-item {
  page-break-inside: avoid;
  break-inside: avoid;
}

.content-dense {
  font-size: 92% !important;
  line-height: 1.3 !important;
}

.content-very-dense {
  font-size: 84% !important;
  line-height: 1.2 !important;
}

@media print {
  * {
    overflow: visible !important;
  }
}
"""

# Weighted character counts at which shells scale fonts down
DENSE_THRESHOLD = 2200
VERY_DENSE_THRESHOLD = 3500
ENTRY_WEIGHT = 150


@lru_cache(maxsize=128)
def extract_styles(template_html: str) -> str:
    """
    Extract the template's inline CSS and append the defensive overrides.

    Args:
        template_html: Raw template HTML

    Returns:
        Contents of the first <style> block (empty if none) followed by DEFENSIVE_CSS

    Example:
        >>> extract_styles("<style>h1 { color: red; }</style><h1>x</h1>").startswith("h1")
        True
    """
    match = STYLE_BLOCK.search(template_html or "")
    template_css = match.group(1).strip() if match else ""
    return f"{template_css}\n{DEFENSIVE_CSS}"


def content_density_class(resume_data: Any) -> str:
    """
    Classify how much user content a resume carries.

    Every work/education entry counts ENTRY_WEIGHT characters on top of its text.

    Returns:
        "", "content-dense" or "content-very-dense"
    """
    data = ResumeData.coerce(resume_data)

    weight = len(data.summary_text)
    for entry in data.work_experience:
        weight += ENTRY_WEIGHT + len(entry.responsibilities)
    for entry in data.education:
        weight += ENTRY_WEIGHT + len(entry.description)
        weight += sum(len(a.title) + len(a.description) for a in entry.achievements)
    weight += sum(len(skill.name) for skill in data.skills)

    if weight >= VERY_DENSE_THRESHOLD:
        return "content-very-dense"
    if weight >= DENSE_THRESHOLD:
        return "content-dense"
    return ""

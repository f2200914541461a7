"""
HTML Pattern Constants

Centralized placeholder syntaxes, section header spellings and class-name
vocabularies used by field resolution and composition.
Organized into frozen dataclasses by category for immutability and clear grouping.
"""

import re
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class RemovalPatterns:
    """
    Removal marker for absent optional fields.

    Substituted for any placeholder whose value is REMOVE, then used by the
    removal sweep to locate and delete the enclosing markup.
    """
    MARKER: str = "##REMOVE_THIS##"


class TokenRegex:
    """
    Placeholder token syntaxes found in templates.

    - Handlebars: {{ key }}
    - Bracket: [[FIELD:key]]
    - Brace: {field:key}
    - Template literal: ${key}
    """
    HANDLEBARS = re.compile(r"\{\{\s*([^}{#/]+?)\s*\}\}")
    BRACKET = re.compile(r"\[\[FIELD:([^\]]+)\]\]")
    BRACE = re.compile(r"\{field:([^}]+)\}")
    TEMPLATE_LITERAL = re.compile(r"\$\{([^}]+)\}")

    # All four syntaxes in one pass; exactly one key group matches
    ANY = re.compile(
        r"\{\{\s*(?P<handlebars>[^}{#/]+?)\s*\}\}"
        r"|\[\[FIELD:(?P<bracket>[^\]]+)\]\]"
        r"|\{field:(?P<brace>[^}]+)\}"
        r"|\$\{(?P<literal>[^}]+)\}"
    )

    # Repeating-block hints used by token context analysis
    EACH_BLOCK = re.compile(r"\{\{#each\s+([^\s}]+)")


@dataclass(frozen=True)
class MarkupPatterns:
    """
    Tag-level patterns for the parts of composition that stay textual.
    """
    STYLE_BLOCK: str = r"<style[^>]*>(.*?)</style>"
    TWO_CAPITALIZED_WORDS: str = r"^[A-Z][a-z]+\s+[A-Z][a-z]+$"
    JAVASCRIPT_URL: str = r"^\s*javascript:"
    SAFE_PHOTO_URL: str = r"^(https?:|data:image/|//|/|\./|\.\./|[\w\-./]+$)"


@dataclass(frozen=True)
class RegionMarkers:
    """
    HTML comment markers wrapped around regenerated repeating groups.

    Format: <!-- cvforge:work-experience:start render=<id> entries=<n> -->
            ... rendered entries ...
            <!-- cvforge:work-experience:end render=<id> -->
    """
    PREFIX: str = "cvforge"
    START: str = "cvforge:{group}:start render={render_id} entries={count}"
    END: str = "cvforge:{group}:end render={render_id}"
    DETECT: str = r"^\s*cvforge:(?P<group>[\w-]+):(?P<edge>start|end)\b"


@dataclass(frozen=True)
class SectionHeaders:
    """
    Known section header spellings.

    Header matching is case-insensitive and whitespace-normalized.
    """
    WORK_EXPERIENCE: Tuple[str, ...] = (
        "WORK EXPERIENCE",
        "EXPERIENCE",
        "PROFESSIONAL EXPERIENCE",
        "WORK HISTORY",
        "EMPLOYMENT HISTORY",
    )
    EDUCATION: Tuple[str, ...] = (
        "EDUCATION",
        "EDUCATION HISTORY",
        "ACADEMIC BACKGROUND",
    )
    SKILLS: Tuple[str, ...] = (
        "SKILLS",
        "KEY SKILLS",
        "CORE SKILLS",
        "TECHNICAL SKILLS",
    )
    SUMMARY: Tuple[str, ...] = (
        "About Me",
        "Profile",
        "Professional Summary",
        "Summary",
    )
    # Header literals resolved to themselves by the field resolver
    IDENTITY_LITERALS: Tuple[str, ...] = (
        "ABOUT ME",
        "WORK EXPERIENCE",
        "EDUCATION",
        "SKILLS",
        "CONTACT",
        "PROFILE",
        "LANGUAGES",
        "REFERENCES",
    )


@dataclass(frozen=True)
class StructuralTags:
    """Tag groups used when scanning for section boundaries."""
    HEADINGS: Tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6")
    HEADER_CONTAINERS: Tuple[str, ...] = ("h1", "h2", "h3", "h4", "h5", "h6", "title", "header")
    COMMON_REMOVABLE: Tuple[str, ...] = ("li", "div", "p", "span")
    PROTECTED: Tuple[str, ...] = ("[document]", "html", "head", "body")
    ACTIVE_CONTENT: Tuple[str, ...] = ("script",)
    URL_ATTRIBUTES: Tuple[str, ...] = ("href", "src", "action", "formaction", "xlink:href")


@dataclass(frozen=True)
class ClassVocabulary:
    """
    Class names and data attributes that identify template structure.

    Tuples hold exact class tokens; *_FRAGMENT values match as substrings.
    """
    SECTION_TITLES: Tuple[str, ...] = ("section-title", "section-header", "section-heading")
    OPTIONAL_FRAGMENT: str = "optional"
    NAME_CONTAINERS: Tuple[str, ...] = (
        "name",
        "full-name",
        "fullname",
        "candidate-name",
        "resume-name",
        "person-name",
    )
    WORK_CONTAINERS: Tuple[str, ...] = ("work-experience", "experience-section", "experience")
    EDUCATION_CONTAINERS: Tuple[str, ...] = ("education", "education-section")
    SKILLS_LIST: Tuple[str, ...] = ("skills-list", "skill-list")
    SKILLS_TEXT: Tuple[str, ...] = ("skills-text", "skill-text")
    SKILLS_CONTAINER: Tuple[str, ...] = ("skills-container", "skills")
    PHOTO_IMAGE_FRAGMENTS: Tuple[str, ...] = ("profile", "avatar", "photo")
    PHOTO_CONTAINERS: Tuple[str, ...] = ("avatar", "avatar-container", "photo-container")
    DATA_FIELD: str = "data-field"
    DATA_SECTION: str = "data-section"


@dataclass(frozen=True)
class NameTokens:
    """
    Combined full-name literals used by hand-authored templates in headers.
    """
    HEADER_TOKENS: Tuple[str, ...] = ("Your Name", "Name Tab")

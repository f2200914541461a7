"""
Template Compositor

Turns (template HTML, resume data) into final sanitized HTML. The template is
parsed once with BeautifulSoup and every pass works on that tree:

    1.  pre-clean sample work experience in fingerprinted templates
    2.  placeholder and sample-literal substitution
    3.  optional-field removal sweep
    4.  header full-name tokens
    5.  name-shaped sample text in name containers
    6.  summary paragraph rewrite
    7.  work experience regeneration
    8.  education regeneration
    9.  skills regeneration
    10. profile photo substitution
    11. class-based fallback for fingerprinted templates
    then active content (scripts, on* handlers, javascript: URLs) is stripped.

Composition never raises for malformed markup or missing data; a pass that
cannot find its section is logged and skipped. Only a template that is not a
string at all raises TemplateCompositionError.

Example:
    >>> compose_html("<h1>{{fullName}}</h1>", {"firstName": "Ada", "surname": "Lovelace"})
    '<h1>Ada Lovelace</h1>'
"""

import re
import time
import uuid
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from bs4 import BeautifulSoup, Tag

from cvforge.contexts.templating.exceptions import TemplateCompositionError
from cvforge.contexts.templating.field_resolver import resolve_fields
from cvforge.contexts.templating.html_patterns import (
    ClassVocabulary,
    MarkupPatterns,
    StructuralTags,
)
from cvforge.contexts.templating.logger import (
    _log_debug,
    _log_info,
    log_composition_result,
    log_composition_start,
    log_pass_skipped,
)
from cvforge.contexts.templating.policies import (
    PolicyRegistry,
    TemplatePolicy,
    default_policy_registry,
)
from cvforge.contexts.templating.registries import FragmentRegistry, default_fragment_registry
from cvforge.contexts.templating.removal import sweep_removal_markers
from cvforge.contexts.templating.resume_data_structure import ResumeData, TemplateRecord
from cvforge.contexts.templating.sections import (
    regenerate_education,
    regenerate_skills,
    regenerate_work_experience,
    strip_sample_experience,
)
from cvforge.contexts.templating.substitution import (
    replace_header_name_tokens,
    replace_name_shaped_text,
    rewrite_summary_sections,
    substitute_placeholders,
)
from cvforge.contexts.templating.tokens import unresolved_tokens

SAFE_PHOTO_URL = re.compile(MarkupPatterns.SAFE_PHOTO_URL, re.IGNORECASE)
JAVASCRIPT_URL = re.compile(MarkupPatterns.JAVASCRIPT_URL, re.IGNORECASE)

SAMPLE_EXPERIENCE_FINGERPRINT = "sample_experience_cleanup"
CONTACT_TEMPLATE_FINGERPRINT = "professional_contact_about"

# Class substrings -> resolver, applied to text-only elements
CLASS_FALLBACKS: Tuple[Tuple[Tuple[str, ...], Callable[[ResumeData], str]], ...] = (
    (("job-title", "profession"), lambda d: d.profession),
    (("email",), lambda d: d.email),
    (("phone",), lambda d: d.phone),
    (("location", "address"), lambda d: d.location),
)


def new_render_id() -> str:
    """Unique id for one composition call (millisecond timestamp + random suffix)."""
    return f"{int(time.time() * 1000):x}-{uuid.uuid4().hex[:8]}"


# ============================================================================
# Pass 10: photo
# ============================================================================


def is_safe_photo_url(url: str) -> bool:
    if not url or not url.strip():
        return False
    url = url.strip()
    return bool(SAFE_PHOTO_URL.match(url)) and not JAVASCRIPT_URL.match(url)


def substitute_photo(soup: BeautifulSoup, photo_url: str) -> int:
    """
    Point profile/avatar images at the resolved photo.

    Images whose class mentions profile, avatar or photo get a new src.
    Avatar/photo containers without such an image get one. Nothing changes
    when the photo is absent or its URL is not an accepted scheme.

    Returns:
        Number of elements changed
    """
    if not is_safe_photo_url(photo_url):
        if photo_url:
            log_pass_skipped("photo substitution", f"unsupported photo URL {photo_url[:30]!r}")
        return 0

    photo_url = photo_url.strip()
    changed = 0
    for img in soup.find_all("img"):
        classes = " ".join(img.get("class") or []).lower()
        if any(fragment in classes for fragment in ClassVocabulary.PHOTO_IMAGE_FRAGMENTS):
            img["src"] = photo_url
            changed += 1

    containers = set(ClassVocabulary.PHOTO_CONTAINERS)
    for container in soup.find_all(True):
        if container.name == "img" or not set(container.get("class") or []) & containers:
            continue
        existing = container.find("img")
        if existing is not None:
            if existing.get("src") != photo_url:
                existing["src"] = photo_url
                changed += 1
            continue
        img = soup.new_tag("img", src=photo_url, alt="Profile photo")
        img["class"] = ["profile-photo"]
        container.clear()
        container.append(img)
        changed += 1
    return changed


# ============================================================================
# Pass 11: class-based fallback
# ============================================================================


def _fallback_resolver(tag: Tag) -> Optional[Callable[[ResumeData], str]]:
    """Resolver for a text-only element: every <h1> or name class gets the full name."""
    classes = tag.get("class") or []
    if tag.name == "h1" or set(classes) & set(ClassVocabulary.NAME_CONTAINERS):
        return lambda d: d.full_name
    joined = " ".join(classes).lower()
    for fragments, resolve in CLASS_FALLBACKS:
        if any(fragment in joined for fragment in fragments):
            return resolve
    return None


def apply_class_fallbacks(soup: BeautifulSoup, resume_data: ResumeData) -> int:
    """
    Fill text-only elements by tag and class name.

    Every <h1> and name-classed element gets the full name. Classes containing
    job-title, profession, email, phone, location or address get the matching
    field (contact-email counts as email). Empty resolved values leave the
    element as authored.

    Returns:
        Number of elements filled
    """
    filled = 0
    for tag in soup.find_all(True):
        if tag.find(True) is not None:
            continue
        resolve = _fallback_resolver(tag)
        if resolve is None:
            continue
        value = resolve(resume_data)
        if value and tag.get_text() != value:
            tag.string = value
            filled += 1
    return filled


# ============================================================================
# Active content
# ============================================================================


def strip_active_content(soup: BeautifulSoup) -> int:
    """
    Remove <script> elements, on* event handlers and javascript: URLs.

    Returns:
        Number of elements and attributes removed
    """
    removed = 0
    for script in soup.find_all(StructuralTags.ACTIVE_CONTENT):
        script.decompose()
        removed += 1

    for tag in soup.find_all(True):
        for name in list(tag.attrs):
            lowered = name.lower()
            if lowered.startswith("on"):
                del tag[name]
                removed += 1
            elif lowered in StructuralTags.URL_ATTRIBUTES and JAVASCRIPT_URL.match(str(tag[name])):
                del tag[name]
                removed += 1

    if removed:
        _log_info(f"Stripped {removed} active content node(s)/attribute(s)")
    return removed


# ============================================================================
# Orchestration
# ============================================================================


def _fingerprint_matches(policies: PolicyRegistry, name: str, html: str) -> bool:
    if name not in policies.fingerprint_names():
        return False
    return policies.matches_fingerprint(name, html)


def compose_html(
    template_html: str,
    resume_data: Any,
    template_id: Optional[int] = None,
    policy: Optional[TemplatePolicy] = None,
    fragments: Optional[FragmentRegistry] = None,
    policies: Optional[PolicyRegistry] = None,
) -> str:
    """
    Compose a template with resume data.

    Identical inputs always produce identical output, apart from the render id
    recorded in region marker comments.

    Args:
        template_html: Raw template HTML
        resume_data: ResumeData or camelCase mapping (never mutated)
        template_id: Template identifier, used to look up its policy
        policy: Explicit policy, overriding the template_id lookup
        fragments: Fragment registry (defaults to the packaged fragments)
        policies: Policy registry (defaults to TEMPLATE_POLICIES_PATH)

    Returns:
        Composed HTML

    Raises:
        TemplateCompositionError: If template_html is None or not a string
        InvalidResumeDataError: If resume_data is neither ResumeData nor a mapping
    """
    if not isinstance(template_html, str):
        raise TemplateCompositionError(
            f"Template content must be a string, got {type(template_html).__name__}",
            template_id=template_id,
            html_snippet=None if template_html is None else repr(template_html),
        )
    if not template_html:
        return ""

    started = time.perf_counter()
    render_id = new_render_id()
    data = ResumeData.coerce(resume_data)
    policies = policies or default_policy_registry()
    fragments = fragments or default_fragment_registry()
    if policy is None:
        policy = policies.get_policy(template_id)

    log_composition_start(template_id, len(template_html), render_id)
    table = resolve_fields(data)
    soup = BeautifulSoup(template_html, "html.parser")

    if _fingerprint_matches(policies, SAMPLE_EXPERIENCE_FINGERPRINT, template_html):
        removed = strip_sample_experience(soup)
        _log_debug(f"Pre-cleaned {removed} sample work experience node(s)")

    substitute_placeholders(soup, table)
    sweep_removal_markers(soup)
    replace_header_name_tokens(soup, data.full_name)
    replace_name_shaped_text(soup, data.full_name)
    rewrite_summary_sections(soup, data.summary_text)

    regenerate_work_experience(
        soup,
        data.work_experience,
        fragments,
        render_id,
        dedupe=policy.dedupe_work_experience,
    )
    regenerate_education(soup, data.education, fragments, render_id)
    regenerate_skills(soup, data.skills, fragments)

    substitute_photo(soup, data.photo)

    if _fingerprint_matches(policies, CONTACT_TEMPLATE_FINGERPRINT, template_html):
        apply_class_fallbacks(soup, data)

    if policy.strip_active_content:
        strip_active_content(soup)

    html = str(soup)
    log_composition_result(template_id, render_id, time.perf_counter() - started, unresolved_tokens(html))
    return html


def compose_template(
    record: Union[TemplateRecord, Mapping[str, Any]],
    resume_data: Any,
    **kwargs: Any,
) -> str:
    """
    Compose a stored template record with the policy for its id.

    Args:
        record: TemplateRecord or its persisted camelCase mapping
        resume_data: ResumeData or camelCase mapping
        **kwargs: Passed through to compose_html (fragments, policies)

    Returns:
        Composed HTML
    """
    if not isinstance(record, TemplateRecord):
        record = TemplateRecord.from_dict(record)
    return compose_html(record.html_content, resume_data, template_id=record.id, **kwargs)

"""
Repeating-Group Regeneration

Locates the work experience, education and skills sections of a parsed
template and replaces their authored content with one rendered block per
resume entry.

Section location, in order:
1. Regions wrapped in cvforge region markers (left by an earlier composition or
   baked into a persisted template) are excised first.
2. Header-boundary scan: find the section header, then take every following
   sibling up to the next header of the same or higher rank, or the next
   header of any rank that carries a known section title.
3. Looser fallback: when the header has nothing after it (it is wrapped in its
   own container), climb to the first ancestor with following siblings and
   take those up to the next <h1>/<h2> or section title.
4. Container fallback: an element with data-section="<group>" or a known
   section class.

Regenerated content is wrapped in start/end marker comments carrying the
per-call render id and entry count, so composing an already composed document
replaces the group instead of appending to it.
"""

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Comment, Tag
from bs4.element import NavigableString, PageElement, PreformattedString

from cvforge.contexts.templating.html_patterns import (
    ClassVocabulary,
    RegionMarkers,
    SectionHeaders,
    StructuralTags,
)
from cvforge.contexts.templating.logger import _log_debug, _log_info, log_pass_skipped
from cvforge.contexts.templating.registries import FragmentRegistry
from cvforge.contexts.templating.resume_data_structure import (
    EducationEntry,
    SkillEntry,
    WorkExperienceEntry,
)
from cvforge.utils.text_processing import collapse_whitespace, split_lines

WORK_EXPERIENCE = "work-experience"
EDUCATION = "education"
SKILLS = "skills"

MARKER_PATTERN = re.compile(RegionMarkers.DETECT)
LOOSE_BOUNDARY_RANK = 2
KNOWN_SECTION_TITLES = frozenset(
    title.lower()
    for title in SectionHeaders.WORK_EXPERIENCE
    + SectionHeaders.EDUCATION
    + SectionHeaders.SKILLS
    + SectionHeaders.SUMMARY
    + SectionHeaders.IDENTITY_LITERALS
)


# ============================================================================
# Region markers
# ============================================================================


def _marker_edge(node: PageElement, group: str) -> Optional[str]:
    """Return "start"/"end" when node is a region marker comment for group."""
    if not isinstance(node, Comment):
        return None
    match = MARKER_PATTERN.match(str(node))
    if match is None or match.group("group") != group:
        return None
    return match.group("edge")


def excise_marked_regions(soup: BeautifulSoup, group: str) -> int:
    """
    Remove every marker-wrapped region for a group, markers included.

    An unterminated start marker is dropped on its own. Stray end markers are
    dropped too.

    Returns:
        Number of regions excised
    """
    excised = 0
    starts = soup.find_all(string=lambda text: _marker_edge(text, group) == "start")
    for start in starts:
        if start.parent is None:
            continue
        doomed = [start]
        for sibling in start.next_siblings:
            doomed.append(sibling)
            if _marker_edge(sibling, group) == "end":
                break
        else:
            doomed = [start]
        for node in doomed:
            node.extract()
        excised += 1

    for end in soup.find_all(string=lambda text: _marker_edge(text, group) == "end"):
        end.extract()

    if excised:
        _log_info(f"Excised {excised} previously composed {group} region(s)")
    return excised


# ============================================================================
# Section location
# ============================================================================


def _is_heading(tag: Tag) -> bool:
    if tag.name in StructuralTags.HEADINGS:
        return True
    return bool(set(tag.get("class") or []) & set(ClassVocabulary.SECTION_TITLES))


def _rank(tag: Tag) -> int:
    if tag.name in StructuralTags.HEADINGS:
        return int(tag.name[1])
    return LOOSE_BOUNDARY_RANK


def _is_known_section_heading(tag: Tag) -> bool:
    return collapse_whitespace(tag.get_text()).lower() in KNOWN_SECTION_TITLES


def _is_boundary(node: PageElement, rank: int) -> bool:
    """
    True when node is, or contains, a heading that ends the current section.

    That is a heading of the same or higher rank, or a heading of any rank
    titled with a known section name.
    """
    if not isinstance(node, Tag):
        return False
    return any(
        _is_heading(tag) and (_rank(tag) <= rank or _is_known_section_heading(tag))
        for tag in [node] + node.find_all(True)
    )


def _has_following_content(node: PageElement) -> bool:
    for sibling in node.next_siblings:
        if isinstance(sibling, Tag):
            return True
        if not isinstance(sibling, PreformattedString) and str(sibling).strip():
            return True
    return False


def _collect_until_boundary(anchor: PageElement, rank: int) -> List[PageElement]:
    region = []
    for sibling in anchor.next_siblings:
        if _is_boundary(sibling, rank):
            break
        region.append(sibling)
    return region


def find_section_header(soup: BeautifulSoup, spellings: Sequence[str]) -> Optional[Tag]:
    """
    Find the first heading (h1-h6 or section-title element) whose text is one of spellings.

    Matching is case-insensitive and whitespace-normalized.
    """
    wanted = {spelling.lower() for spelling in spellings}
    for tag in soup.find_all(True):
        if _is_heading(tag) and collapse_whitespace(tag.get_text()).lower() in wanted:
            return tag
    return None


def locate_header_region(header: Tag) -> Tuple[PageElement, List[PageElement]]:
    """
    Locate the content region belonging to a section header.

    Returns:
        (anchor, region) where new content goes right after anchor and region
        holds the authored nodes to replace
    """
    if _has_following_content(header):
        return header, _collect_until_boundary(header, _rank(header))

    ancestor = header.parent
    while ancestor is not None and ancestor.name not in StructuralTags.PROTECTED:
        if _has_following_content(ancestor):
            _log_debug(f"Using loose boundary after <{ancestor.name}> wrapping '{header.get_text(strip=True)}'")
            return ancestor, _collect_until_boundary(ancestor, LOOSE_BOUNDARY_RANK)
        ancestor = ancestor.parent

    _log_debug(f"No content follows '{header.get_text(strip=True)}'; inserting directly after it")
    return header, []


def find_section_container(soup: BeautifulSoup, group: str, classes: Sequence[str]) -> Optional[Tag]:
    """Find an element marked data-section="<group>", else one carrying a known section class."""
    container = soup.find(attrs={ClassVocabulary.DATA_SECTION: group})
    if container is not None:
        return container
    wanted = set(classes)
    for tag in soup.find_all(True):
        if tag.name not in StructuralTags.PROTECTED and set(tag.get("class") or []) & wanted:
            return tag
    return None


def locate_container_region(container: Tag) -> Tuple[Optional[PageElement], List[PageElement]]:
    """
    Region of a section container: every child except leading headings.

    Returns:
        (anchor, region) where anchor is the last heading child, or None to
        insert at the start of the container
    """
    anchor = None
    region = []
    for child in container.children:
        if isinstance(child, Tag) and _is_heading(child) and not region:
            anchor = child
            continue
        if anchor is None and not isinstance(child, Tag) and not str(child).strip():
            continue
        region.append(child)
    return anchor, region


# ============================================================================
# Fragment insertion
# ============================================================================


def _parse_fragment(fragment_html: str) -> List[PageElement]:
    fragment = BeautifulSoup(fragment_html, "html.parser")
    return [node.extract() for node in list(fragment.contents)]


def _insert_nodes_after(anchor: PageElement, nodes: Iterable[PageElement]) -> PageElement:
    cursor = anchor
    for node in nodes:
        cursor.insert_after(node)
        cursor = node
    return cursor


def replace_region(
    container: Optional[Tag],
    anchor: Optional[PageElement],
    region: List[PageElement],
    fragment_html: str,
    group: str,
    render_id: str,
    count: int,
) -> None:
    """
    Replace region nodes with a rendered fragment wrapped in region markers.

    Args:
        container: Parent to insert into when anchor is None
        anchor: Node the new content follows; None inserts at container start
        region: Authored nodes to remove
        fragment_html: Rendered entries
        group: Repeating group name used in the markers
        render_id: Per-call render identifier
        count: Number of rendered entries
    """
    for node in region:
        node.extract()

    start = Comment(" " + RegionMarkers.START.format(group=group, render_id=render_id, count=count) + " ")
    end = Comment(" " + RegionMarkers.END.format(group=group, render_id=render_id) + " ")

    if anchor is None:
        container.insert(0, start)
    else:
        anchor.insert_after(start)
    last = _insert_nodes_after(start, [NavigableString("\n")] + _parse_fragment(fragment_html))
    last.insert_after(end)
    end.insert_after(NavigableString("\n"))


def _regenerate_group(
    soup: BeautifulSoup,
    group: str,
    headers: Sequence[str],
    container_classes: Sequence[str],
    fragment_html: str,
    render_id: str,
    count: int,
) -> bool:
    header = find_section_header(soup, headers)
    if header is not None:
        anchor, region = locate_header_region(header)
        replace_region(None, anchor, region, fragment_html, group, render_id, count)
        return True

    container = find_section_container(soup, group, container_classes)
    if container is not None:
        anchor, region = locate_container_region(container)
        replace_region(container, anchor, region, fragment_html, group, render_id, count)
        return True

    log_pass_skipped(f"{group} regeneration", "no section header or container found")
    return False


# ============================================================================
# Work experience
# ============================================================================


def select_work_entries(
    entries: Sequence[WorkExperienceEntry], dedupe: bool = True
) -> List[WorkExperienceEntry]:
    """
    Drop temporary entries and, unless disabled, duplicates.

    Duplicates share (job_title, employer, start_year, start_month); the first
    occurrence wins.
    """
    selected = [entry for entry in entries if not entry.is_temporary]
    if not dedupe:
        return selected

    seen = set()
    unique = []
    for entry in selected:
        if entry.dedup_key in seen:
            _log_debug(f"Dropping duplicate work entry {entry.job_title!r} at {entry.employer!r}")
            continue
        seen.add(entry.dedup_key)
        unique.append(entry)
    return unique


def render_work_experience(entries: Sequence[WorkExperienceEntry], registry: FragmentRegistry) -> str:
    views = [
        {
            "job_title": entry.job_title,
            "location_line": entry.location_line,
            "date_range": entry.date_range,
            "bullets": split_lines(entry.responsibilities),
        }
        for entry in entries
    ]
    return registry.render("work_experience", entries=views)


def strip_sample_experience(soup: BeautifulSoup) -> int:
    """
    Remove authored sample entries under the work experience header.

    Returns:
        Number of nodes removed
    """
    header = find_section_header(soup, SectionHeaders.WORK_EXPERIENCE)
    if header is None:
        return 0
    _, region = locate_header_region(header)
    for node in region:
        node.extract()
    return len(region)


def regenerate_work_experience(
    soup: BeautifulSoup,
    entries: Sequence[WorkExperienceEntry],
    registry: FragmentRegistry,
    render_id: str,
    dedupe: bool = True,
) -> int:
    """
    Replace the work experience section with rendered entries.

    Returns:
        Number of entries rendered (0 when the section was left as authored)
    """
    excise_marked_regions(soup, WORK_EXPERIENCE)

    selected = select_work_entries(entries, dedupe=dedupe)
    if not selected:
        log_pass_skipped("work-experience regeneration", "no entries to render")
        return 0

    fragment = render_work_experience(selected, registry)
    if not _regenerate_group(
        soup,
        WORK_EXPERIENCE,
        SectionHeaders.WORK_EXPERIENCE,
        ClassVocabulary.WORK_CONTAINERS,
        fragment,
        render_id,
        len(selected),
    ):
        return 0
    return len(selected)


# ============================================================================
# Education
# ============================================================================


def regenerate_education(
    soup: BeautifulSoup,
    entries: Sequence[EducationEntry],
    registry: FragmentRegistry,
    render_id: str,
) -> int:
    """
    Replace the education section with rendered entries. No de-duplication.

    Returns:
        Number of entries rendered
    """
    excise_marked_regions(soup, EDUCATION)

    if not entries:
        log_pass_skipped("education regeneration", "no entries to render")
        return 0

    fragment = registry.render("education", entries=list(entries))
    if not _regenerate_group(
        soup,
        EDUCATION,
        SectionHeaders.EDUCATION,
        ClassVocabulary.EDUCATION_CONTAINERS,
        fragment,
        render_id,
        len(entries),
    ):
        return 0
    return len(entries)


# ============================================================================
# Skills
# ============================================================================


def _first_with_class(soup: BeautifulSoup, classes: Sequence[str], names=True) -> Optional[Tag]:
    wanted = set(classes)
    for tag in soup.find_all(names):
        if set(tag.get("class") or []) & wanted:
            return tag
    return None


def _replace_children(tag: Tag, nodes: Iterable[PageElement]) -> None:
    tag.clear()
    for node in nodes:
        tag.append(node)


def regenerate_skills(
    soup: BeautifulSoup,
    skills: Sequence[SkillEntry],
    registry: FragmentRegistry,
) -> Optional[str]:
    """
    Render skills into the first matching container shape.

    Tried in order:
    - list: <ul>/<ol> classed skills-list, or the first list inside a skills container
    - text: element classed skills-text, filled with comma-joined names
    - div: skills container, filled with one tag per skill

    Returns:
        Name of the shape used, or None when nothing matched
    """
    if not skills:
        log_pass_skipped("skills regeneration", "no skills to render")
        return None

    skill_list = _first_with_class(soup, ClassVocabulary.SKILLS_LIST, ["ul", "ol"])
    container = _first_with_class(soup, ClassVocabulary.SKILLS_CONTAINER)
    if skill_list is None and container is not None:
        skill_list = container.find(["ul", "ol"])
    if skill_list is not None:
        _replace_children(skill_list, _parse_fragment(registry.render("skills_list", skills=list(skills))))
        return "list"

    skills_text = _first_with_class(soup, ClassVocabulary.SKILLS_TEXT)
    if skills_text is not None:
        _replace_children(skills_text, [", ".join(skill.name for skill in skills)])
        return "text"

    if container is not None:
        anchor, region = locate_container_region(container)
        for node in region:
            node.extract()
        nodes = [NavigableString("\n")] + _parse_fragment(registry.render("skills_tags", skills=list(skills)))
        if anchor is None:
            for node in reversed(nodes):
                container.insert(0, node)
        else:
            _insert_nodes_after(anchor, nodes)
        return "div"

    log_pass_skipped("skills regeneration", "no skills list, text or container found")
    return None

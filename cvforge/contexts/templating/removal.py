"""
Optional-Field Removal Sweep

Deletes the markup that referenced an absent optional field. Substitution puts
the removal marker wherever such a field was referenced; the sweep then works
outward from each marker on the parsed tree:

(a) optional-info containers (class contains "optional") holding a marker
(b) the innermost element holding a marker in its own text or attributes
(c) one level up: a parent left with no content, or only a short label
    ("Website:", or an inline "LinkedIn" with no data left beside it)
(d) common tags (li, div, p, span) still holding a marker anywhere inside
(e) bare marker text and marker-valued attributes on protected elements

Every sub-pass is idempotent, and so is the full sweep: a second run finds no
markers and changes nothing.
"""

import re
from typing import Iterable, List, Set, Union

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString, PreformattedString

from cvforge.contexts.templating.html_patterns import (
    ClassVocabulary,
    RemovalPatterns,
    StructuralTags,
)
from cvforge.contexts.templating.logger import _log_debug

MARKER = RemovalPatterns.MARKER

# Parents never dropped by the one-level-up pass
STRUCTURAL_PARENTS = StructuralTags.PROTECTED + ("title", "table", "tbody", "thead", "tr", "td", "th")
DANGLING_LABEL_MAX = 40
LABEL_TAGS = ("span", "strong", "b", "em", "i", "label", "small")
# Digits, e-mail, paths and domains mark text as data rather than a label
DATA_BEARING = re.compile(r"[\d@/]|\.\w")


def _attr_text(value) -> str:
    return " ".join(value) if isinstance(value, list) else str(value)


def _own_attrs_hold_marker(tag: Tag) -> bool:
    return any(MARKER in _attr_text(value) for value in tag.attrs.values())


def _own_text_holds_marker(tag: Tag) -> bool:
    return any(
        isinstance(child, NavigableString)
        and not isinstance(child, PreformattedString)
        and MARKER in child
        for child in tag.contents
    )


def _subtree_holds_marker(tag: Tag) -> bool:
    if MARKER in tag.get_text():
        return True
    return _own_attrs_hold_marker(tag) or any(
        _own_attrs_hold_marker(descendant) for descendant in tag.find_all(True)
    )


def _is_protected(tag: Tag) -> bool:
    return tag.name in StructuralTags.PROTECTED or tag.name == "title"


def _is_optional_container(tag: Tag) -> bool:
    return any(ClassVocabulary.OPTIONAL_FRAGMENT in cls for cls in tag.get("class") or [])


def _text_items(tag: Tag) -> List[Union[Tag, NavigableString]]:
    items = []
    for child in tag.contents:
        if isinstance(child, Tag):
            if child.get_text().strip():
                items.append(child)
        elif not isinstance(child, PreformattedString) and child.strip():
            items.append(child)
    return items


def _is_left_empty(tag: Tag) -> bool:
    """
    True when only whitespace or a short label remains.

    A label is either text ending in a colon ("Website:"), or a single bare
    text run or inline element ("LinkedIn") short enough and free of data.
    """
    text = tag.get_text().strip()
    if not text:
        return True
    if len(text) > DANGLING_LABEL_MAX:
        return False
    if text.endswith(":"):
        return True
    items = _text_items(tag)
    if len(items) != 1:
        return False
    if isinstance(items[0], Tag) and items[0].name not in LABEL_TAGS:
        return False
    return not DATA_BEARING.search(text)


def _remove_all(tags: Iterable[Tag]) -> int:
    removed = 0
    for tag in tags:
        if tag.decomposed:
            continue
        tag.decompose()
        removed += 1
    return removed


def remove_optional_containers(soup: BeautifulSoup) -> int:
    """(a) Remove optional-info wrappers whose content references a removed field."""
    containers = [
        tag
        for tag in soup.find_all(True)
        if not _is_protected(tag) and _is_optional_container(tag) and _subtree_holds_marker(tag)
    ]
    return _remove_all(containers)


def remove_marked_elements(soup: BeautifulSoup) -> List[Tag]:
    """
    (b) Remove every element whose own text or attributes hold the marker.

    Returns:
        Parents of the removed elements, for the one-level-up pass
    """
    targets = [
        tag
        for tag in soup.find_all(True)
        if not _is_protected(tag) and (_own_text_holds_marker(tag) or _own_attrs_hold_marker(tag))
    ]
    parents: List[Tag] = []
    for tag in targets:
        if tag.decomposed:
            continue
        parent = tag.parent
        tag.decompose()
        if parent is not None:
            parents.append(parent)
    return parents


def remove_emptied_parents(parents: List[Tag]) -> int:
    """(c) Remove parents that the previous pass left without content."""
    seen: Set[int] = set()
    candidates = []
    for parent in parents:
        if id(parent) in seen or parent.decomposed or parent.name in STRUCTURAL_PARENTS:
            continue
        seen.add(id(parent))
        if _is_left_empty(parent):
            candidates.append(parent)
    return _remove_all(candidates)


def remove_common_tags(soup: BeautifulSoup) -> int:
    """(d) Remove the innermost li/div/p/span still holding a marker anywhere inside."""
    holders = [
        tag
        for tag in soup.find_all(StructuralTags.COMMON_REMOVABLE)
        if _subtree_holds_marker(tag)
    ]
    innermost = [
        tag
        for tag in holders
        if not any(
            _subtree_holds_marker(inner) for inner in tag.find_all(StructuralTags.COMMON_REMOVABLE)
        )
    ]
    return _remove_all(innermost)


def strip_bare_markers(soup: BeautifulSoup) -> int:
    """(e) Strip leftover marker text and drop attributes still holding the marker."""
    stripped = 0
    for string in list(soup.find_all(string=lambda text: MARKER in text)):
        if isinstance(string, PreformattedString):
            continue
        string.replace_with(str(string).replace(MARKER, ""))
        stripped += 1
    for tag in soup.find_all(True):
        for name in [name for name, value in tag.attrs.items() if MARKER in _attr_text(value)]:
            del tag[name]
            stripped += 1
    return stripped


def sweep_removal_markers(soup: BeautifulSoup) -> int:
    """
    Run the full removal sweep in order.

    Args:
        soup: Parsed template, modified in place

    Returns:
        Number of elements, strings and attributes removed
    """
    removed = remove_optional_containers(soup)
    parents = remove_marked_elements(soup)
    removed += len(parents)
    removed += remove_emptied_parents(parents)
    removed += remove_common_tags(soup)
    removed += strip_bare_markers(soup)
    if removed:
        _log_debug(f"Removal sweep dropped {removed} node(s) for absent optional fields")
    return removed

"""
Placeholder Substitution Passes

Text-level passes over the parsed template tree:

- substitute_placeholders: every token syntax ({{key}}, [[FIELD:key]],
  {field:key}, ${key}), data-field markers and sample literals (pass 2)
- replace_header_name_tokens: combined full-name literals in headers (pass 4)
- replace_name_shaped_text: "Firstname Lastname"-shaped sample names inside
  name-bearing containers (pass 5)
- rewrite_summary_sections: paragraph after a summary header (pass 6)

Values are written into the tree as text, so the serializer escapes them;
user input can never become live markup.
"""

import re
from typing import Optional

from bs4 import BeautifulSoup, Tag
from bs4.element import NavigableString, PreformattedString

from cvforge.contexts.templating.field_resolver import REMOVE, ValueTable
from cvforge.contexts.templating.html_patterns import (
    ClassVocabulary,
    MarkupPatterns,
    NameTokens,
    SectionHeaders,
    StructuralTags,
    TokenRegex,
)
from cvforge.contexts.templating.logger import _log_debug
from cvforge.utils.text_processing import collapse_whitespace

# Raw-text elements whose content is never substituted
SKIP_PARENTS = ("script", "style", "textarea")

TWO_CAPITALIZED_WORDS = re.compile(MarkupPatterns.TWO_CAPITALIZED_WORDS)


def build_substitution_pattern(table: ValueTable) -> "re.Pattern":
    """
    Compile one pattern matching every token syntax and every sample literal.

    Literals resolving to themselves (section headers) are left out since
    replacing them is a no-op. Longer literals come first so overlapping
    samples match whole.
    """
    literals = [re.escape(literal) for literal, value in table.literals if literal != value]
    if not literals:
        return TokenRegex.ANY
    return re.compile(TokenRegex.ANY.pattern + r"|(?P<sample>" + "|".join(literals) + ")")


def substitute_text(text: str, table: ValueTable, pattern: "re.Pattern") -> str:
    """
    Substitute tokens and sample literals in one string, in a single scan.

    Unknown tokens are left in place. Removed optional fields become the
    removal marker.
    """

    def replace(match: "re.Match") -> str:
        sample = match.groupdict().get("sample")
        if sample is not None:
            return table.literal_map[sample]
        key = next(
            group
            for group in (
                match.group("handlebars"),
                match.group("bracket"),
                match.group("brace"),
                match.group("literal"),
            )
            if group is not None
        )
        value = table.lookup(key)
        if value is None:
            return match.group(0)
        if value is REMOVE:
            return value.marker
        return value

    return pattern.sub(replace, text)


def _apply_data_fields(soup: BeautifulSoup, table: ValueTable) -> int:
    """Fill elements carrying data-field="key" with the resolved value."""
    count = 0
    for tag in soup.find_all(attrs={ClassVocabulary.DATA_FIELD: True}):
        value = table.lookup(tag[ClassVocabulary.DATA_FIELD])
        if value is None:
            continue
        text = value.marker if value is REMOVE else value
        if tag.name == "img":
            if text:
                tag["src"] = text
        else:
            tag.clear()
            tag.append(text)
        count += 1
    return count


def substitute_placeholders(soup: BeautifulSoup, table: ValueTable) -> int:
    """
    Replace placeholders across text nodes, attribute values and data-field markers.

    Args:
        soup: Parsed template, modified in place
        table: Value table for this call

    Returns:
        Number of text nodes and attributes changed
    """
    pattern = build_substitution_pattern(table)
    changed = _apply_data_fields(soup, table)

    for string in list(soup.find_all(string=True)):
        if isinstance(string, PreformattedString):
            continue
        if string.parent is not None and string.parent.name in SKIP_PARENTS:
            continue
        new_text = substitute_text(str(string), table, pattern)
        if new_text != string:
            string.replace_with(NavigableString(new_text))
            changed += 1

    for tag in soup.find_all(True):
        for name, value in list(tag.attrs.items()):
            if isinstance(value, list):
                new_value = [substitute_text(item, table, pattern) for item in value]
            else:
                new_value = substitute_text(value, table, pattern)
            if new_value != value:
                tag[name] = new_value
                changed += 1

    _log_debug(f"Placeholder substitution changed {changed} node(s)")
    return changed


def _replace_in_strings(root: Tag, old: str, new: str) -> int:
    count = 0
    for string in list(root.find_all(string=lambda text: old in text)):
        if isinstance(string, PreformattedString):
            continue
        string.replace_with(str(string).replace(old, new))
        count += 1
    return count


def replace_header_name_tokens(soup: BeautifulSoup, full_name: str) -> int:
    """
    Replace combined full-name literals ("Your Name", "Name Tab").

    Header-like containers are handled first, then a catch-all replaces any
    remaining occurrence. ALL-CAPS spellings resolve to the upper-cased name.

    Returns:
        Number of strings changed (0 when no name is known)
    """
    if not full_name:
        return 0

    replacements = []
    for token in NameTokens.HEADER_TOKENS:
        replacements.append((token, full_name))
        replacements.append((token.upper(), full_name.upper()))

    count = 0
    for header in soup.find_all(StructuralTags.HEADER_CONTAINERS):
        if header.decomposed:
            continue
        for old, new in replacements:
            count += _replace_in_strings(header, old, new)

    for old, new in replacements:
        count += _replace_in_strings(soup, old, new)
    return count


def _name_containers(soup: BeautifulSoup):
    containers = [
        tag
        for tag in soup.find_all(True)
        if set(tag.get("class") or []) & set(ClassVocabulary.NAME_CONTAINERS)
    ]
    first_h1 = soup.find("h1")
    if first_h1 is not None and first_h1 not in containers:
        containers.append(first_h1)
    return containers


def replace_name_shaped_text(soup: BeautifulSoup, full_name: str) -> int:
    """
    Replace "Capitalized Capitalized" sample names with the resolved full name.

    Only strings inside name-bearing containers (name classes and the first
    <h1>) are considered, and known section headers are never touched.

    Returns:
        Number of strings changed
    """
    if not full_name:
        return 0

    headers = {
        header.lower()
        for header in SectionHeaders.IDENTITY_LITERALS
        + SectionHeaders.SUMMARY
        + SectionHeaders.WORK_EXPERIENCE
        + SectionHeaders.EDUCATION
        + SectionHeaders.SKILLS
    }
    count = 0
    for container in _name_containers(soup):
        for string in list(container.find_all(string=True)):
            if isinstance(string, PreformattedString):
                continue
            text = string.strip()
            if text == full_name or text.lower() in headers:
                continue
            if TWO_CAPITALIZED_WORDS.match(text):
                string.replace_with(str(string).replace(text, full_name))
                count += 1
    return count


def _next_element_sibling(tag: Tag) -> Optional[Tag]:
    """Next sibling element, provided only whitespace or comments sit in between."""
    for sibling in tag.next_siblings:
        if isinstance(sibling, Tag):
            return sibling
        if isinstance(sibling, PreformattedString):
            continue
        if str(sibling).strip():
            return None
    return None


def rewrite_summary_sections(soup: BeautifulSoup, summary: str) -> int:
    """
    Replace the paragraph after a summary header with the resolved summary.

    Recognized headers: "About Me", "Profile", "Professional Summary",
    "Summary" (case-insensitive). Header and <p> wrapper are preserved.

    Returns:
        Number of paragraphs rewritten (0 when summary is empty)
    """
    if not summary:
        return 0

    spellings = {header.lower() for header in SectionHeaders.SUMMARY}
    count = 0
    for heading in soup.find_all(StructuralTags.HEADINGS):
        if collapse_whitespace(heading.get_text()).lower() not in spellings:
            continue
        paragraph = _next_element_sibling(heading)
        if paragraph is None or paragraph.name != "p":
            continue
        paragraph.clear()
        paragraph.append(summary)
        count += 1
    return count

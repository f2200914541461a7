"""
Text processing utilities for placeholder keys and display.
"""

import re
from typing import Iterable, List

_KEY_SEPARATORS = re.compile(r"[\s_.\-]+")
_WHITESPACE = re.compile(r"\s+")


def normalize_key(key: str) -> str:
    """
    Normalize a placeholder key for spelling-insensitive lookup.

    Lowercases and drops separator characters so that every spelling of the
    same key collapses to one form.

    Example:
        >>> normalize_key("first_name")
        'firstname'
        >>> normalize_key("First-Name")
        'firstname'
        >>> normalize_key("professional summary")
        'professionalsummary'
    """
    return _KEY_SEPARATORS.sub("", key.strip()).lower()


def last_key_segment(key: str) -> str:
    """
    Return the last dotted segment of a key.

    Example:
        >>> last_key_segment("personalInfo.name")
        'name'
        >>> last_key_segment("email")
        'email'
    """
    return key.strip().rsplit(".", 1)[-1]


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and strip the ends."""
    return _WHITESPACE.sub(" ", text).strip()


def join_non_empty(parts: Iterable[str], separator: str = ", ") -> str:
    """
    Join the non-empty, stripped parts with a separator.

    Example:
        >>> join_non_empty(["Paris", "", " France "])
        'Paris, France'
    """
    return separator.join(part.strip() for part in parts if part and part.strip())


def split_lines(text: str) -> List[str]:
    """
    Split multi-line text into stripped, non-empty lines with bullet glyphs removed.

    Example:
        >>> split_lines("- Led team\\n\\n• Shipped product")
        ['Led team', 'Shipped product']
    """
    lines = []
    for line in text.splitlines():
        line = line.strip().lstrip("-*•").strip()
        if line:
            lines.append(line)
    return lines


def truncate_display(text: str, max_len: int) -> str:
    """
    Truncate text for display with ellipsis if needed.

    Example:
        >>> truncate_display("short", 10)
        'short'
        >>> truncate_display("this is a very long string", 10)
        'this is...'
    """
    return text if len(text) <= max_len else text[: max_len - 3] + "..."

"""Unit tests for key normalization and text helpers."""

import pytest

from cvforge.utils.text_processing import (
    collapse_whitespace,
    join_non_empty,
    last_key_segment,
    normalize_key,
    split_lines,
    truncate_display,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "key",
    ["firstName", "first_name", "first-name", "FIRST_NAME", "First Name", "first.name"],
)
def test_normalize_key_collapses_spellings(key):
    assert normalize_key(key) == "firstname"


@pytest.mark.unit
def test_last_key_segment():
    assert last_key_segment("personalInfo.name") == "name"
    assert last_key_segment(" email ") == "email"


@pytest.mark.unit
def test_collapse_whitespace():
    assert collapse_whitespace("  WORK \n\t EXPERIENCE ") == "WORK EXPERIENCE"


@pytest.mark.unit
def test_join_non_empty_skips_blank_parts():
    assert join_non_empty(["London", "", "  ", " UK "]) == "London, UK"
    assert join_non_empty(["Jan", "2020"], separator=" ") == "Jan 2020"
    assert join_non_empty([]) == ""


@pytest.mark.unit
def test_split_lines_strips_bullets_and_blank_lines():
    text = "- Led the team\n\n• Shipped the product\n* Wrote docs\nPlain line"

    assert split_lines(text) == ["Led the team", "Shipped the product", "Wrote docs", "Plain line"]


@pytest.mark.unit
def test_truncate_display():
    assert truncate_display("short", 10) == "short"
    assert truncate_display("this is a very long string", 10) == "this is..."

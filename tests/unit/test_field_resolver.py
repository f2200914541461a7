"""Unit tests for the field resolver value table."""

import pytest

from cvforge.contexts.templating.field_resolver import (
    DEFAULT_SUMMARY_PLACEHOLDER,
    REMOVE,
    resolve_fields,
    spellings,
)
from cvforge.contexts.templating.html_patterns import RemovalPatterns

ADA = {
    "firstName": "Ada",
    "surname": "Lovelace",
    "profession": "Mathematician",
    "email": "ada@example.com",
    "city": "London",
    "country": "UK",
    "skills": ["Maths", "Poetry"],
}


@pytest.mark.unit
def test_spellings_of_camel_case_key():
    plain, upper = spellings("firstName")

    assert plain == ["firstName", "first_name", "first-name", "firstname", "FirstName"]
    assert upper == ["FIRST_NAME", "FIRSTNAME"]


@pytest.mark.unit
def test_name_fields_and_upper_variants():
    table = resolve_fields(ADA)

    assert table["fullName"] == "Ada Lovelace"
    assert table["full_name"] == "Ada Lovelace"
    assert table["FULL_NAME"] == "ADA LOVELACE"
    assert table["name"] == "Ada Lovelace"
    assert table["PROFESSION"] == "MATHEMATICIAN"
    assert table["jobTitle"] == "Mathematician"


@pytest.mark.unit
def test_lookup_normalizes_spelling_and_dotted_keys():
    table = resolve_fields(ADA)

    assert table.lookup("personalInfo.email") == "ada@example.com"
    assert table.lookup("Full-Name") == "Ada Lovelace"
    assert table.lookup("FULL-NAME") == "ADA LOVELACE"
    assert table.lookup(" first name ") == "Ada"
    assert table.lookup("address") == "London, UK"
    assert table.lookup("skills") == "Maths, Poetry"
    assert table.lookup("favouriteColour") is None


@pytest.mark.unit
def test_missing_fields_resolve_to_empty_string():
    table = resolve_fields({})

    assert table["email"] == ""
    assert table["fullName"] == ""
    assert table.lookup("phone") == ""


@pytest.mark.unit
def test_summary_fallback_chain():
    short_only = resolve_fields({"summary": "Builds things."})
    both = resolve_fields({"summary": "Builds things.", "professionalSummary": "Designs engines."})
    neither = resolve_fields({})

    assert short_only["professionalSummary"] == "Builds things."
    assert short_only["summary"] == "Builds things."
    assert short_only["aboutMe"] == "Builds things."
    assert both["summary"] == "Designs engines."
    assert neither["professionalSummary"] == DEFAULT_SUMMARY_PLACEHOLDER


@pytest.mark.unit
def test_absent_optional_fields_resolve_to_remove():
    table = resolve_fields(ADA)

    assert table["website"] is REMOVE
    assert table.lookup("linkedIn") is REMOVE
    assert table.lookup("drivingLicense") is REMOVE
    assert REMOVE.marker == RemovalPatterns.MARKER
    assert "website" in table.removed_keys()


@pytest.mark.unit
def test_visible_optional_fields_resolve_to_value():
    table = resolve_fields(
        dict(
            ADA,
            additionalFields={
                "linkedin": {"value": "linkedin.com/in/ada", "visible": True},
                "website": {"value": "ada.dev", "visible": False},
            },
        )
    )

    assert table["linkedin"] == "linkedin.com/in/ada"
    assert table["website"] is REMOVE


@pytest.mark.unit
def test_user_defined_additional_fields():
    table = resolve_fields(
        dict(
            ADA,
            additionalFields={
                "github": {"value": "github.com/ada", "visible": True},
                "mastodon": {"value": "", "visible": True},
            },
        )
    )

    assert table.lookup("github") == "github.com/ada"
    assert table.lookup("mastodon") is REMOVE


@pytest.mark.unit
def test_sample_literals_only_when_value_present():
    table = resolve_fields(ADA)
    anonymous = resolve_fields({"profession": "Mathematician"})

    assert table.literal_map["SAHIB KHAN"] == "ADA LOVELACE"
    assert table.literal_map["Stephen John"] == "Ada Lovelace"
    assert table.literal_map["Graphic Designer"] == "Mathematician"
    assert "SAHIB KHAN" not in anonymous.literal_map
    assert "📞 telephone" not in table.literal_map


@pytest.mark.unit
def test_section_headers_resolve_to_themselves():
    table = resolve_fields(ADA)

    assert table["WORK EXPERIENCE"] == "WORK EXPERIENCE"
    assert table["ABOUT ME"] == "ABOUT ME"


@pytest.mark.unit
def test_literals_are_ordered_longest_first():
    table = resolve_fields(ADA)
    lengths = [len(literal) for literal, _ in table.literals]

    assert lengths == sorted(lengths, reverse=True)


@pytest.mark.unit
def test_resolver_does_not_mutate_input():
    data = dict(ADA)
    resolve_fields(data)

    assert data == ADA

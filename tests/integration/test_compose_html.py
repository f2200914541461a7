"""
Integration tests for end-to-end template composition.

Composes the fixture templates with the fixture resume and checks:
- Determinism (output identical across calls, region markers aside)
- Optional-field removal and presence
- Work experience de-duplication and the per-template carve-out
- Re-composition of composed output without duplicated sections
- Name, summary and photo substitution
- HTML escaping of user text
- Pre-cleaning and class fallbacks for known sample templates
"""

import os
import re
from pathlib import Path

import pytest
from bs4 import BeautifulSoup
from dotenv import load_dotenv
from omegaconf import OmegaConf

from cvforge.contexts.templating import (
    TemplateCompositionError,
    compose_html,
    compose_template,
    extract_styles,
)
from cvforge.contexts.templating.html_patterns import RemovalPatterns

load_dotenv()
FIXTURES_PATH = Path(os.getenv("FIXTURES_PATH", Path(__file__).parent.parent / "fixtures"))
TEMPLATES_PATH = FIXTURES_PATH / "templates"

REGION_MARKER = re.compile(r"<!-- cvforge:[^>]*-->")


def strip_markers(html: str) -> str:
    """Drop region marker comments (they carry a per-call render id)."""
    return REGION_MARKER.sub("", html)


def load_template(name: str) -> str:
    return (TEMPLATES_PATH / name).read_text(encoding="utf-8")


def load_resume() -> dict:
    return OmegaConf.to_container(OmegaConf.load(FIXTURES_PATH / "resume.yaml"), resolve=True)


def count_work_entries(html: str) -> int:
    return len(BeautifulSoup(html, "html.parser").select(".work-experience-item"))


def duplicate_entry_resume() -> dict:
    resume = load_resume()
    first = {
        "id": "10",
        "jobTitle": "Engineer",
        "employer": "Acme",
        "startMonth": "Feb",
        "startYear": "2020",
        "responsibilities": "First version of the entry",
    }
    resume["workExperience"] = [first, dict(first, id="11", responsibilities="Second version of the entry")]
    return resume


@pytest.mark.integration
def test_composition_is_deterministic():
    """Same template and data compose to the same document."""
    template = load_template("modern.html")
    resume = load_resume()

    first = compose_html(template, resume)
    second = compose_html(template, resume)

    assert strip_markers(first) == strip_markers(second)


@pytest.mark.integration
def test_absent_optional_field_is_removed_entirely():
    """Empty website removes its markup and leaves no removal marker behind."""
    html = compose_html(load_template("modern.html"), load_resume())

    assert "{{website}}" not in html
    assert "Website:" not in html
    assert RemovalPatterns.MARKER not in html


@pytest.mark.integration
def test_absent_optional_field_label_without_colon_is_removed():
    template = (
        '<ul class="contact"><li><span class="label">Website</span> <span>{{website}}</span></li>'
        "<li>{{email}}</li></ul>"
    )

    html = compose_html(template, load_resume())

    assert html == '<ul class="contact"><li>ada@example.com</li></ul>'


@pytest.mark.integration
def test_present_optional_field_is_rendered():
    """Visible LinkedIn value replaces its token."""
    html = compose_html(load_template("modern.html"), load_resume())

    assert "linkedin.com/in/ada" in html
    assert "{{linkedin}}" not in html


@pytest.mark.integration
def test_duplicate_work_entries_render_once():
    """Entries sharing (jobTitle, employer, startYear, startMonth) collapse to the first."""
    html = compose_html(load_template("modern.html"), duplicate_entry_resume())

    assert count_work_entries(html) == 1
    assert "First version of the entry" in html
    assert "Second version of the entry" not in html


@pytest.mark.integration
def test_template_16_keeps_duplicate_work_entries():
    """Template 16 is configured to render every entry as supplied."""
    html = compose_html(load_template("modern.html"), duplicate_entry_resume(), template_id=16)

    assert count_work_entries(html) == 2


@pytest.mark.integration
def test_temporary_work_entries_are_filtered():
    html = compose_html(load_template("modern.html"), load_resume())

    assert count_work_entries(html) == 2
    assert "Unsaved entry" not in html


@pytest.mark.integration
def test_recomposition_does_not_duplicate_sections():
    """Composing composed output keeps the same number of repeated entries."""
    template = load_template("modern.html")
    resume = load_resume()

    once = compose_html(template, resume)
    twice = compose_html(once, resume)

    soup_once = BeautifulSoup(once, "html.parser")
    soup_twice = BeautifulSoup(twice, "html.parser")
    assert count_work_entries(twice) == count_work_entries(once) == 2
    assert len(soup_twice.select(".education-item")) == len(soup_once.select(".education-item")) == 1
    assert len(soup_twice.select(".skill-item")) == len(soup_once.select(".skill-item")) == 2


@pytest.mark.integration
def test_baked_in_region_is_replaced_not_appended():
    """A template persisted with a previous composition's region loses the stale entries."""
    template = load_template("modern.html").replace(
        "<h2>EDUCATION</h2>",
        "<!-- cvforge:work-experience:start render=old entries=1 -->"
        '<div class="work-experience-item">Stale entry</div>'
        "<!-- cvforge:work-experience:end render=old -->\n"
        "  <h2>EDUCATION</h2>",
    )

    html = compose_html(template, load_resume())

    assert "Stale entry" not in html
    assert count_work_entries(html) == 2


@pytest.mark.integration
def test_full_name_and_upper_case_variants():
    template = "<h1>{{fullName}}</h1><p>{{FULL_NAME}}</p>"

    html = compose_html(template, {"firstName": "Ada", "surname": "Lovelace"})

    assert "<h1>Ada Lovelace</h1>" in html
    assert "<p>ADA LOVELACE</p>" in html


@pytest.mark.integration
def test_summary_falls_back_to_short_summary():
    template = "<p>{{professionalSummary}}</p><p>{{summary}}</p>"

    html = compose_html(template, {"summary": "Builds things."})

    assert html == "<p>Builds things.</p><p>Builds things.</p>"


@pytest.mark.integration
def test_summary_section_paragraph_is_rewritten():
    html = compose_html(load_template("modern.html"), load_resume())

    soup = BeautifulSoup(html, "html.parser")
    header = soup.find("h2", string="Professional Summary")

    assert "passion for sample text" not in html
    assert header.find_next_sibling().name == "p"
    assert header.find_next_sibling().get_text() == "Builds things."


@pytest.mark.integration
def test_lower_rank_education_header_survives_work_regeneration():
    template = (
        '<h2>WORK EXPERIENCE</h2><div class="job">Sample job</div>'
        "<h3>EDUCATION</h3><div>Sample Uni</div>"
    )

    html = compose_html(template, load_resume())
    soup = BeautifulSoup(html, "html.parser")

    assert "<h3>EDUCATION</h3>" in html
    assert "Sample job" not in html
    assert "Sample Uni" not in html
    assert soup.select_one(".education-degree").get_text() == "Private tutoring in Mathematics"
    assert count_work_entries(html) == 2


@pytest.mark.integration
def test_work_experience_user_text_is_escaped():
    resume = load_resume()
    resume["workExperience"][0]["jobTitle"] = "<script>alert(1)</script>"

    html = compose_html(load_template("modern.html"), resume)

    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "<script>" not in html


@pytest.mark.integration
def test_regenerated_sections_replace_sample_content():
    html = compose_html(load_template("modern.html"), load_resume())
    soup = BeautifulSoup(html, "html.parser")

    assert "Sample Position" not in html
    assert "Sample University" not in html
    assert "Sample skill" not in html
    assert soup.select_one(".work-experience-dates").get_text() == "Jan 1842 - Dec 1843"
    assert "Mar 1843 - Present" in html
    assert soup.select_one(".education-degree").get_text() == "Private tutoring in Mathematics"
    assert [li.get_text(" ", strip=True) for li in soup.select(".skill-item")] == [
        "Mathematics",
        "Poetical science (Advanced)",
    ]


@pytest.mark.integration
def test_profile_photo_is_substituted():
    html = compose_html(load_template("modern.html"), load_resume())
    soup = BeautifulSoup(html, "html.parser")

    assert soup.select_one("img.profile-photo")["src"] == "https://example.com/ada.png"


@pytest.mark.integration
def test_absent_photo_leaves_image_untouched():
    resume = load_resume()
    resume["photo"] = ""

    html = compose_html(load_template("modern.html"), resume)

    assert 'src="images/placeholder.png"' in html


@pytest.mark.integration
def test_sample_template_is_precleaned_and_filled():
    """Known sample template: stale entries go, sample literals resolve."""
    html = compose_html(load_template("sample_khan.html"), load_resume())

    assert "SAHIB KHAN" not in html
    assert "ADA LOVELACE" in html
    assert "MATHEMATICIAN" in html
    assert "📞 +44 20 7946 0000" in html
    assert "Senior Designer" not in html
    assert "Junior Designer" not in html
    assert "Bachelor of Design" not in html
    assert count_work_entries(html) == 2
    assert "Builds things." in html


@pytest.mark.integration
def test_professional_contact_template_class_fallbacks():
    html = compose_html(load_template("professional_contact.html"), load_resume())
    soup = BeautifulSoup(html, "html.parser")

    assert soup.select_one(".name").get_text() == "Ada Lovelace"
    assert soup.select_one(".job-title").get_text() == "Mathematician"
    assert soup.select_one(".email").get_text() == "ada@example.com"
    assert soup.select_one(".phone").get_text() == "+44 20 7946 0000"
    assert soup.select_one(".address").get_text() == "London, United Kingdom"


@pytest.mark.integration
def test_professional_contact_template_fills_upper_case_h1_and_contact_classes():
    template = (
        "<h1>OLIVIA WILSON</h1><p>Professional</p>"
        "<h2>CONTACT</h2><div class=\"contact-email\">hello@x.com</div>"
        "<h2>ABOUT ME</h2><p>Sample introduction.</p>"
    )

    html = compose_html(template, load_resume())
    soup = BeautifulSoup(html, "html.parser")

    assert "OLIVIA WILSON" not in html
    assert "hello@x.com" not in html
    assert soup.h1.get_text() == "Ada Lovelace"
    assert soup.select_one(".contact-email").get_text() == "ada@example.com"


@pytest.mark.integration
def test_compose_template_record_uses_record_policy():
    record = {"id": 16, "name": "Modern", "htmlContent": load_template("modern.html")}

    html = compose_template(record, duplicate_entry_resume())

    assert count_work_entries(html) == 2


@pytest.mark.integration
def test_missing_template_raises():
    with pytest.raises(TemplateCompositionError):
        compose_html(None, load_resume())


@pytest.mark.integration
def test_empty_template_composes_to_empty_string():
    assert compose_html("", load_resume()) == ""


@pytest.mark.integration
def test_extract_styles_is_stable_and_defensive():
    template = load_template("modern.html")

    first = extract_styles(template)
    second = extract_styles(template)

    assert first == second
    assert "letter-spacing: 2px" in first
    assert "overflow: visible !important" in first
    assert "overflow: visible !important" in extract_styles("<p>No styles</p>")

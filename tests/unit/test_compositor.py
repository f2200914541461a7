"""Unit tests for compositor passes that live outside the section and text modules."""

import pytest
from bs4 import BeautifulSoup

from cvforge.contexts.templating.compositor import (
    apply_class_fallbacks,
    compose_html,
    is_safe_photo_url,
    new_render_id,
    strip_active_content,
    substitute_photo,
)
from cvforge.contexts.templating.exceptions import (
    InvalidResumeDataError,
    TemplateCompositionError,
)
from cvforge.contexts.templating.policies import TemplatePolicy
from cvforge.contexts.templating.resume_data_structure import ResumeData


@pytest.mark.unit
@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://example.com/a.png", True),
        ("//cdn.example.com/a.png", True),
        ("/uploads/a.png", True),
        ("uploads/a.png", True),
        ("data:image/png;base64,AAAA", True),
        ("javascript:alert(1)", False),
        ("data:text/html,<script>", False),
        ("", False),
    ],
)
def test_is_safe_photo_url(url, expected):
    assert is_safe_photo_url(url) is expected


@pytest.mark.unit
def test_substitute_photo_images_and_containers():
    soup = BeautifulSoup(
        '<img class="avatar-img" src="a.png"/><img class="logo" src="logo.png"/>'
        '<div class="photo-container"><span>Photo</span></div>',
        "html.parser",
    )

    changed = substitute_photo(soup, "https://example.com/ada.png")

    assert changed == 2
    assert soup.select_one(".avatar-img")["src"] == "https://example.com/ada.png"
    assert soup.select_one(".logo")["src"] == "logo.png"
    assert soup.select_one(".photo-container img")["src"] == "https://example.com/ada.png"
    assert soup.find("span") is None


@pytest.mark.unit
def test_absent_or_unsafe_photo_leaves_markup():
    html = '<img class="profile-photo" src="a.png"/>'
    soup = BeautifulSoup(html, "html.parser")

    assert substitute_photo(soup, "") == 0
    assert substitute_photo(soup, "javascript:alert(1)") == 0
    assert str(soup) == html


@pytest.mark.unit
def test_class_fallbacks_fill_text_only_elements():
    soup = BeautifulSoup(
        '<h1 class="name">Olivia Wilson</h1><p class="email">hello@site.com</p>'
        '<div class="phone"><span>+1</span></div><p class="location">Any City</p>',
        "html.parser",
    )
    data = ResumeData(first_name="Ada", surname="Lovelace", email="ada@example.com", phone="0123")

    apply_class_fallbacks(soup, data)

    assert soup.select_one(".name").get_text() == "Ada Lovelace"
    assert soup.select_one(".email").get_text() == "ada@example.com"
    assert soup.select_one(".phone").get_text() == "+1"
    assert soup.select_one(".location").get_text() == "Any City"


@pytest.mark.unit
def test_class_fallbacks_fill_bare_h1_and_class_substrings():
    soup = BeautifulSoup(
        '<h1>OLIVIA WILSON</h1><div class="contact-email">hello@x.com</div>'
        '<span class="contact-phone-number">+1 555</span><p class="home-address">Any City</p>',
        "html.parser",
    )
    data = ResumeData(
        first_name="Ada",
        surname="Lovelace",
        email="ada@example.com",
        phone="0123",
        city="London",
    )

    assert apply_class_fallbacks(soup, data) == 4
    assert soup.h1.get_text() == "Ada Lovelace"
    assert soup.select_one(".contact-email").get_text() == "ada@example.com"
    assert soup.select_one(".contact-phone-number").get_text() == "0123"
    assert soup.select_one(".home-address").get_text() == "London"


@pytest.mark.unit
def test_strip_active_content():
    soup = BeautifulSoup(
        '<div onclick="steal()"><script>alert(1)</script>'
        '<a href="javascript:alert(1)">x</a><a href="https://ok.example">y</a></div>',
        "html.parser",
    )

    assert strip_active_content(soup) == 3
    assert str(soup) == '<div><a>x</a><a href="https://ok.example">y</a></div>'


@pytest.mark.unit
def test_active_content_kept_when_policy_disables_stripping():
    html = "<p>Hi</p><script>track()</script>"

    assert compose_html(html, {}) == "<p>Hi</p>"
    assert compose_html(html, {}, policy=TemplatePolicy(strip_active_content=False)) == html


@pytest.mark.unit
def test_render_ids_are_unique():
    assert new_render_id() != new_render_id()


@pytest.mark.unit
@pytest.mark.parametrize("template", [None, 42, b"<p></p>"])
def test_non_string_template_raises(template):
    with pytest.raises(TemplateCompositionError):
        compose_html(template, {})


@pytest.mark.unit
def test_invalid_resume_data_raises():
    with pytest.raises(InvalidResumeDataError):
        compose_html("<p>{{fullName}}</p>", "Ada Lovelace")


@pytest.mark.unit
def test_resume_data_is_not_mutated():
    data = {"firstName": "Ada", "workExperience": [{"jobTitle": "Analyst", "id": "1"}]}
    snapshot = {"firstName": "Ada", "workExperience": [{"jobTitle": "Analyst", "id": "1"}]}

    compose_html("<h2>WORK EXPERIENCE</h2><p>old</p>", data)

    assert data == snapshot

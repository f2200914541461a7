"""Unit tests for per-template policies and fingerprints."""

import pytest

from cvforge.contexts.templating.policies import PolicyRegistry, TemplatePolicy


@pytest.mark.unit
def test_default_policy():
    registry = PolicyRegistry()

    policy = registry.get_policy(None)

    assert policy == TemplatePolicy(dedupe_work_experience=True, strip_active_content=True)
    assert registry.get_policy(3) == policy


@pytest.mark.unit
def test_template_16_keeps_duplicate_work_entries():
    policy = PolicyRegistry().get_policy(16)

    assert policy.dedupe_work_experience is False
    assert policy.strip_active_content is True


@pytest.mark.unit
def test_policies_are_cached():
    registry = PolicyRegistry()

    assert registry.get_policy(16) is registry.get_policy(16)


@pytest.mark.unit
def test_fingerprints():
    registry = PolicyRegistry()

    assert registry.matches_fingerprint("sample_experience_cleanup", "<h1>SAHIB KHAN</h1><h2>WORK EXPERIENCE</h2>")
    assert not registry.matches_fingerprint("sample_experience_cleanup", "<h1>SAHIB KHAN</h1>")
    assert "professional_contact_about" in registry.fingerprint_names()

    with pytest.raises(KeyError):
        registry.matches_fingerprint("unknown", "<p></p>")


@pytest.mark.unit
def test_custom_config_file(tmp_path):
    config = tmp_path / "policies.yaml"
    config.write_text(
        "defaults:\n"
        "  dedupe_work_experience: true\n"
        "templates:\n"
        "  \"7\":\n"
        "    strip_active_content: false\n"
    )

    registry = PolicyRegistry(config)

    assert registry.get_policy(7).strip_active_content is False
    assert registry.get_policy(7).dedupe_work_experience is True
    assert registry.fingerprint_names() == []


@pytest.mark.unit
def test_unknown_policy_key_raises(tmp_path):
    config = tmp_path / "policies.yaml"
    config.write_text("defaults:\n  dedupe_everything: true\n")

    with pytest.raises(ValueError, match="dedupe_everything"):
        PolicyRegistry(config).get_policy(None)

"""
Template Policy Resolution

Per-template composition overrides, kept declarative instead of scattered
template-id conditionals. Policies and template fingerprints live in
template_policies.yaml:

    defaults:
      dedupe_work_experience: true
    templates:
      "16":
        dedupe_work_experience: false

Examples:
    >>> registry = PolicyRegistry()
    >>> registry.get_policy(16).dedupe_work_experience
    False
    >>> registry.get_policy(None).dedupe_work_experience
    True
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

load_dotenv()
TEMPLATE_POLICIES_PATH = Path(
    os.getenv(
        "TEMPLATE_POLICIES_PATH",
        str(Path(__file__).parent / "config" / "template_policies.yaml"),
    )
)


@dataclass(frozen=True)
class TemplatePolicy:
    """
    Composition switches for one template.

    Attributes:
        dedupe_work_experience: Drop work entries sharing
            (job_title, employer, start_year, start_month)
        strip_active_content: Remove scripts, on* handlers and javascript: URLs
    """

    dedupe_work_experience: bool = True
    strip_active_content: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TemplatePolicy":
        """
        Build a policy from a config mapping.

        Raises:
            ValueError: If the mapping holds unknown policy keys
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(
                f"Unknown policy keys: {sorted(unknown)}. Valid keys: {sorted(known)}"
            )
        return cls(**{key: bool(value) for key, value in data.items()})


class PolicyRegistry:
    """
    Registry for per-template policies and known-template fingerprints.

    The config is loaded once and only read afterwards.
    """

    def __init__(self, config_path: Path = None):
        """
        Initialize the policy registry.

        Args:
            config_path: Path to template_policies.yaml. Defaults to
                         TEMPLATE_POLICIES_PATH from environment
        """
        if config_path is None:
            config_path = TEMPLATE_POLICIES_PATH

        self.config_path = Path(config_path)
        config = OmegaConf.to_container(OmegaConf.load(self.config_path), resolve=True)

        self._defaults: Dict[str, Any] = dict(config.get("defaults") or {})
        self._templates: Dict[str, Dict[str, Any]] = {
            str(template_id): dict(overrides or {})
            for template_id, overrides in (config.get("templates") or {}).items()
        }
        self._fingerprints: Dict[str, List[List[str]]] = {
            name: [list(group) for group in groups or []]
            for name, groups in (config.get("fingerprints") or {}).items()
        }
        self._cache: Dict[str, TemplatePolicy] = {}

    def get_policy(self, template_id: Optional[int]) -> TemplatePolicy:
        """
        Get the effective policy for a template (defaults merged with overrides).

        Args:
            template_id: Template identifier, or None for anonymous templates

        Returns:
            TemplatePolicy
        """
        key = "" if template_id is None else str(template_id)
        if key in self._cache:
            return self._cache[key]

        merged = {**self._defaults, **self._templates.get(key, {})}
        policy = TemplatePolicy.from_dict(merged)
        self._cache[key] = policy
        return policy

    def matches_fingerprint(self, name: str, html: str) -> bool:
        """
        Check whether raw template HTML matches a named fingerprint.

        A fingerprint matches when every string in any one of its groups occurs
        in the HTML.

        Raises:
            KeyError: If no fingerprint with this name is configured
        """
        if name not in self._fingerprints:
            raise KeyError(
                f"Fingerprint '{name}' not found. Available: {sorted(self._fingerprints)}"
            )
        return any(
            all(needle in html for needle in group) for group in self._fingerprints[name]
        )

    def fingerprint_names(self) -> List[str]:
        return sorted(self._fingerprints)


_default_registry: Optional[PolicyRegistry] = None


def default_policy_registry() -> PolicyRegistry:
    """Shared registry for the configured policy file."""
    global _default_registry
    if _default_registry is None:
        _default_registry = PolicyRegistry()
    return _default_registry

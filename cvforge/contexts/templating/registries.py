"""
Templating Registries

Loads and caches the Jinja2 fragment templates that render repeating groups
(work experience, education, skills) before they are spliced into a template.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
)

from cvforge.contexts.templating.exceptions import FragmentRenderError

load_dotenv()
FRAGMENTS_PATH = Path(
    os.getenv("FRAGMENT_TEMPLATES_PATH", str(Path(__file__).parent / "fragments"))
)


class FragmentRegistry:
    """
    Registry for loading and caching Jinja2 fragment templates.

    Fragments are stored as {fragments_path}/{name}.html.jinja. Autoescaping is
    always on, so user text can never become live markup.

    The cache is keyed by fragment name only; rendered output is never cached.
    """

    def __init__(self, fragments_path: Optional[Path] = None):
        """
        Initialize the fragment registry.

        Args:
            fragments_path: Directory holding fragment templates. Defaults to
                            FRAGMENT_TEMPLATES_PATH from environment
        """
        if fragments_path is None:
            fragments_path = FRAGMENTS_PATH

        self.fragments_path = Path(fragments_path)
        self._cache: Dict[str, Template] = {}

        self.env = Environment(
            loader=FileSystemLoader(str(self.fragments_path)),
            # Catches silent failures
            undefined=StrictUndefined,
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def get_template(self, name: str) -> Template:
        """
        Get a fragment template by name, loading and caching it if necessary.

        Args:
            name: Fragment name (e.g., 'work_experience')

        Returns:
            Jinja2 Template object

        Raises:
            TemplateNotFound: If fragment file doesn't exist
        """
        if name in self._cache:
            return self._cache[name]

        template_path = f"{name}.html.jinja"

        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"Fragment template '{name}' not found at {self.fragments_path / template_path}"
            ) from e

        self._cache[name] = template
        return template

    def render(self, name: str, **context: Any) -> str:
        """
        Render a fragment with the given context.

        Raises:
            FragmentRenderError: If the fragment fails to render
        """
        template = self.get_template(name)
        try:
            return template.render(**context)
        except TemplateError as e:
            raise FragmentRenderError(
                "Failed to render fragment", fragment_name=name, original_error=e
            ) from e

    def get_template_path(self, name: str) -> Path:
        return self.fragments_path / f"{name}.html.jinja"

    def clear_cache(self):
        """Clear the template cache."""
        self._cache.clear()

    def is_cached(self, name: str) -> bool:
        return name in self._cache


_default_registry: Optional[FragmentRegistry] = None


def default_fragment_registry() -> FragmentRegistry:
    """Shared registry for the packaged fragments (templates are read-only once loaded)."""
    global _default_registry
    if _default_registry is None:
        _default_registry = FragmentRegistry()
    return _default_registry

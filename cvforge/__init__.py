"""
CVForge - resume template composition engine

Turns free-form, third-party-authored HTML resume templates plus structured
resume data into sanitized, populated HTML for live preview and print.

Architecture:
- Templating Context: field resolution, placeholder substitution, optional-field
  removal, repeating-group regeneration, style extraction
"""

__version__ = "0.1.0"

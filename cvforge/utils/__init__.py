"""
Shared utilities for CVForge.

Generic helpers that are not specific to any context:
- logger: loguru setup with provenance tracking
- text_processing: key normalization and display helpers
"""

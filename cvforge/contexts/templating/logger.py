"""
Templating context logger.

Provides logging interface for templating context with automatic [template] prefix.
All templating modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from cvforge.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[template]"


def setup_templating_logger(
    log_dir: Path,
    phase: str = "compose",
    template_file: Optional[Path] = None,
    resume_file: Optional[Path] = None,
) -> Path:
    """
    Setup logger for templating context.

    The provenance block records the phase and the template and resume files
    the session composes.

    Args:
        log_dir: Directory for this templating session
        phase: Phase name for provenance ("compose" or "tokens")
        template_file: Template being composed
        resume_file: Resume data file

    Returns:
        Path to log file
    """
    inputs = {"Phase": phase}
    if template_file is not None:
        inputs["Template"] = template_file
    if resume_file is not None:
        inputs["Resume"] = resume_file
    return _setup_logger(context_name="template", log_dir=log_dir, extra_provenance=inputs)


# Wrapper functions with automatic [template] prefix


def _log_info(message: str) -> None:
    """Log info message with [template] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [template] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [template] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [template] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [template] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level composition logging helpers


def log_composition_start(template_id, template_length: int, render_id: str) -> None:
    """Log start of a composition call."""
    label = f"template {template_id}" if template_id is not None else "anonymous template"
    _log_debug(f"Composing {label} ({template_length} chars, render {render_id})")


def log_pass_skipped(pass_name: str, reason: str) -> None:
    """Log a structural pass that could not be applied to this template."""
    _log_debug(f"Skipped {pass_name}: {reason}")


def log_composition_result(
    template_id,
    render_id: str,
    elapsed_time: float,
    unresolved: list,
) -> None:
    """
    Log composition result.

    Args:
        template_id: Template identifier or None
        render_id: Per-call render identifier used in region markers
        elapsed_time: Time taken in seconds
        unresolved: Placeholder tokens still present in the output
    """
    label = f"template {template_id}" if template_id is not None else "anonymous template"
    if unresolved:
        _log_warning(f"{label}: {len(unresolved)} unresolved token(s): {', '.join(unresolved)}")
    _log_debug(f"{label}: composed render {render_id} in {elapsed_time * 1000:.1f}ms")

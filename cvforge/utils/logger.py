"""
Session logging for cvforge scripts.

A session writes everything to {log_dir}/{context}.log and echoes INFO and up
to the console. The log opens with a provenance block recording what produced
it, so a composed preview can be traced back to the exact run and inputs.

Library code never calls setup_logger(); only scripts do. Without it, loguru's
default stderr sink is used.
"""

import sys
from pathlib import Path
from typing import Mapping, Optional, TextIO

import bs4
from dotenv import load_dotenv
from loguru import logger

import cvforge

load_dotenv()

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"
RULE = "=" * 80


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Mapping[str, object]] = None,
    console_level: str = "INFO",
    console: Optional[TextIO] = None,
) -> Path:
    """
    Start a logging session for one script run.

    Args:
        context_name: Context identifier, also the log file stem (e.g., "template")
        log_dir: Directory for this session, created if missing
        extra_provenance: Run inputs recorded in the provenance block
        console_level: Minimum level echoed to the console
        console: Console stream (defaults to stdout)

    Returns:
        Path to log file

    Example:
        log_file = setup_logger(
            "template",
            Path("outs/logs/compose_20261017_123456"),
            extra_provenance={"Template": "modern.html"},
        )
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    logger.level("WARNING", color="<white>")
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(console or sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(extra_provenance)
    return log_file


def provenance(extra: Optional[Mapping[str, object]] = None) -> dict:
    """Provenance fields for the current process: entry point, versions, inputs."""
    fields = {
        "Command": " ".join(sys.argv),
        "Working directory": Path.cwd(),
        "cvforge": cvforge.__version__,
        "beautifulsoup4": bs4.__version__,
        "Python": sys.version.split()[0],
    }
    fields.update(extra or {})
    return fields


def log_provenance(extra: Optional[Mapping[str, object]] = None) -> None:
    """Write the provenance block to the current sinks."""
    logger.info(RULE)
    for key, value in provenance(extra).items():
        logger.info(f"{key}: {value}")
    logger.info(RULE)

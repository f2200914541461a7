#!/usr/bin/env python3
"""
Resume Composition CLI

Composes a template HTML file with a resume data file (YAML or JSON, camelCase
keys as the resume editor stores them) and writes a standalone preview document
with the template's extracted styles inlined.

Usage:
    python compose_resume.py template.html resume.yaml
    python compose_resume.py template.html resume.json preview.html --template-id 16
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from markupsafe import escape
from omegaconf import OmegaConf
from typing_extensions import Annotated

from cvforge.contexts.templating import (
    TemplateCompositionError,
    compose_html,
    content_density_class,
    extract_styles,
    unresolved_tokens,
)
from cvforge.contexts.templating.logger import setup_templating_logger

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

PREVIEW_DOCUMENT = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
{styles}
</style>
</head>
<body>
<div class="resume-content {density}">
{content}
</div>
</body>
</html>
"""

app = typer.Typer(
    help="Compose a resume template with resume data into a preview document",
    add_completion=False,
)


def load_resume_data(path: Path) -> dict:
    """
    Load resume data from a JSON or YAML file.

    Args:
        path: .json, .yaml or .yml file

    Returns:
        Resume data as a plain dict
    """
    if path.suffix.lower() == ".json":
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    return OmegaConf.to_container(OmegaConf.load(path), resolve=True)


@app.command()
def main(
    template_file: Annotated[
        Path,
        typer.Argument(
            help="Template HTML file",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        )
    ],
    resume_file: Annotated[
        Path,
        typer.Argument(
            help="Resume data file (.yaml, .yml or .json)",
            exists=True,
            dir_okay=False,
            resolve_path=True,
        )
    ],
    output_file: Annotated[
        Optional[Path],
        typer.Argument(
            help="Output HTML file (defaults to <template>.preview.html)",
            dir_okay=False,
            resolve_path=True,
        )
    ] = None,
    template_id: Annotated[
        Optional[int],
        typer.Option(
            "--template-id",
            "-t",
            help="Template id used to look up per-template policy",
        )
    ] = None,
):
    """
    Compose a template with resume data.

    Examples:

        # Preview next to the template
        python compose_resume.py modern.html resume.yaml

        # Compose with the policy of a stored template
        python compose_resume.py modern.html resume.json out.html --template-id 16
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_dir = LOGS_PATH / f"compose_{timestamp}"
    log_file = setup_templating_logger(
        log_dir, phase="compose", template_file=template_file, resume_file=resume_file
    )

    if output_file is None:
        output_file = template_file.with_suffix(".preview.html")

    template_html = template_file.read_text(encoding="utf-8")
    resume_data = load_resume_data(resume_file)

    try:
        content = compose_html(template_html, resume_data, template_id=template_id)
    except TemplateCompositionError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    document = PREVIEW_DOCUMENT.format(
        title=escape(f"Resume Preview - {template_file.stem}"),
        styles=extract_styles(template_html),
        density=content_density_class(resume_data),
        content=content,
    )
    output_file.write_text(document, encoding="utf-8")

    typer.secho(f"✓ Composed {template_file.name} -> {output_file}", fg=typer.colors.GREEN)

    leftover = unresolved_tokens(content)
    if leftover:
        typer.secho(
            f"  {len(leftover)} unresolved token(s): {', '.join(leftover)}",
            fg=typer.colors.YELLOW,
        )
    typer.echo(f"  Log: {log_file}")


if __name__ == "__main__":
    app()

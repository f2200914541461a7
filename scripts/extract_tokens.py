#!/usr/bin/env python3
"""
Template Token Listing CLI

Lists the placeholder tokens a template uses ({{key}}, [[FIELD:key]],
{field:key}, ${key}), optionally with the surrounding markup and the repeating
block each token sits in.

Usage:
    python extract_tokens.py template.html
    python extract_tokens.py template.html --context
"""

from pathlib import Path

import typer
from typing_extensions import Annotated

from cvforge.contexts.templating import analyze_token_context, extract_template_tokens
from cvforge.contexts.templating.field_resolver import resolve_fields
from cvforge.contexts.templating.tokens import token_key
from cvforge.utils.text_processing import collapse_whitespace, truncate_display

app = typer.Typer(
    help="List placeholder tokens used by a resume template",
    add_completion=False,
)


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
    context: Annotated[
        bool,
        typer.Option(
            "--context",
            "-c",
            help="Show surrounding markup and repeating block for each token",
        )
    ] = False,
):
    """
    List placeholder tokens in a template.

    Tokens whose key is not recognized are flagged; composition leaves them in place.
    """
    html = template_file.read_text(encoding="utf-8")
    tokens = extract_template_tokens(html)

    if not tokens:
        typer.secho(f"No placeholder tokens found in {template_file.name}", fg=typer.colors.YELLOW)
        raise typer.Exit()

    known = resolve_fields({})
    typer.echo(f"{len(tokens)} token(s) in {template_file.name}:\n")

    for token in tokens:
        key = token_key(token)
        recognized = key is not None and known.lookup(key) is not None
        color = typer.colors.GREEN if recognized else typer.colors.RED
        typer.secho(f"  {token}" + ("" if recognized else "  (unknown key)"), fg=color)

        if context:
            info = analyze_token_context(token, html)
            if info.is_in_repeated_block:
                section = f" '{info.section}'" if info.section else ""
                typer.echo(f"      repeated block{section}")
            typer.echo(f"      {truncate_display(collapse_whitespace(info.context), 120)}")


if __name__ == "__main__":
    app()

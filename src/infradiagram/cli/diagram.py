"""Diagram export CLI command."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from infradiagram.cli.main import Context, pass_context

console = Console()


@click.command()
@click.argument("document", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file (defaults to <document>.md)",
)
@click.option(
    "--stdout",
    is_flag=True,
    help="Print to stdout instead of file",
)
@pass_context
def diagram(ctx: Context, document: Path, output: Path | None, stdout: bool) -> None:
    """
    Export a diagram document as Mermaid.

    Examples:

        # Write network.md next to the document
        infradiagram diagram network.yml

        # Print to stdout
        infradiagram diagram network.yml --stdout
    """
    from infradiagram.generators.mermaid import generate_mermaid

    loaded = ctx.load_document(document)
    content = generate_mermaid(loaded)

    if stdout:
        click.echo(content)
        return

    output_file = output or document.with_suffix(".md")
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(content)
    console.print(f"[green]Generated:[/green] {output_file}")

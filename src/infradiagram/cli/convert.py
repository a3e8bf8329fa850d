"""Terraform conversion CLI command."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from infradiagram.cli.main import Context, pass_context
from infradiagram.core.errors import DiagramError

console = Console()


@click.command()
@click.argument("resources", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    required=True,
    help="Output document (.yml/.yaml for YAML, otherwise JSON)",
)
@click.option("--name", "-n", help="Diagram name (defaults to '<resources> Diagram')")
@click.option(
    "--root-folder",
    help="Record this folder and the resources' source files as provenance",
)
@pass_context
def convert(
    ctx: Context,
    resources: Path,
    output: Path,
    name: str | None,
    root_folder: str | None,
) -> None:
    """
    Convert parsed Terraform resources into a diagram document.

    RESOURCES is a YAML or JSON list of resources as produced by the
    Terraform parser (id, type, name, attributes, dependencies).

    Examples:

        infradiagram convert resources.json -o network.yml

        infradiagram convert resources.json -o network.json --root-folder infra/
    """
    from infradiagram.converters.terraform import TerraformConverter, load_resources

    try:
        parsed = load_resources(resources)
        converter = TerraformConverter(parsed, ctx.config)
        document = converter.convert(name, source_path=resources, root_folder=root_folder)
    except (DiagramError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    document.save(output)
    console.print(
        f"[green]Converted:[/green] {len(document) - 1} components, "
        f"{len(document.relationships)} relationships -> {output}"
    )

"""Main CLI entry point for infradiagram."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from infradiagram import __version__
from infradiagram.core.config import DiagramConfig
from infradiagram.core.document import DiagramDocument
from infradiagram.core.errors import DiagramError

console = Console()

# Default config path (can be overridden)
DEFAULT_CONFIG = "infradiagram.yml"


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.verbose: bool = False
        self._config: DiagramConfig | None = None

    @property
    def config(self) -> DiagramConfig:
        """Lazy-load configuration, falling back to defaults."""
        if self._config is None:
            if self.config_path and self.config_path.exists():
                try:
                    self._config = DiagramConfig.load(self.config_path)
                except DiagramError as e:
                    raise click.ClickException(str(e)) from e
            else:
                self._config = DiagramConfig()
        return self._config

    def load_document(self, path: Path) -> DiagramDocument:
        """Load a diagram document, turning load errors into CLI errors."""
        try:
            return DiagramDocument.load(path, config=self.config)
        except (DiagramError, OSError) as e:
            raise click.ClickException(f"Cannot load {path}: {e}") from e


pass_context = click.make_pass_decorator(Context, ensure=True)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="infradiagram")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_CONFIG,
    help="Path to configuration YAML file",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@pass_context
def cli(ctx: Context, config: Path, verbose: bool) -> None:
    """
    Infradiagram - Infrastructure diagram documents.

    Build, inspect, validate and export diagrams of cloud
    components and their relationships.
    """
    ctx.config_path = config
    ctx.verbose = verbose
    setup_logging(verbose)


# Import and register subcommands
from infradiagram.cli.convert import convert
from infradiagram.cli.diagram import diagram
from infradiagram.cli.validate import validate

cli.add_command(convert)
cli.add_command(diagram)
cli.add_command(validate)


@cli.command()
@click.argument("document", type=click.Path(exists=True, path_type=Path))
@pass_context
def info(ctx: Context, document: Path) -> None:
    """Show component and relationship summary."""
    from rich.table import Table

    diagram = ctx.load_document(document)
    components = list(diagram.iter_components())

    console.print(f"\n[bold]{diagram.name}[/bold] [dim]({diagram.id})[/dim]\n")
    console.print(f"  Region: {diagram.region.attributes.get('regionName', '-')}")
    console.print(f"  Components: {len(components)}")
    console.print(f"  Relationships: {len(diagram.relationships)}")
    if diagram.source_files:
        console.print(f"  Source folder: {diagram.source_files.root_folder}")
        console.print(f"  Source files: {len(diagram.source_files.files)}")
    if diagram.skipped_nodes:
        console.print(f"  [yellow]Skipped nodes: {len(diagram.skipped_nodes)}[/yellow]")

    table = Table(title="Components by Type")
    table.add_column("Type", style="cyan")
    table.add_column("Count", justify="right")
    for type_tag, count in sorted(Counter(c.type for c in components).items()):
        table.add_row(type_tag, str(count))
    console.print(table)

    if diagram.relationships:
        table = Table(title="Relationships by Type")
        table.add_column("Type", style="cyan")
        table.add_column("Count", justify="right")
        for rel_type, count in sorted(Counter(r.type.value for r in diagram.relationships).items()):
            table.add_row(rel_type, str(count))
        console.print(table)


@cli.command()
@click.argument("document", type=click.Path(exists=True, path_type=Path))
@click.option("--ids", is_flag=True, help="Show component ids")
@pass_context
def tree(ctx: Context, document: Path, ids: bool) -> None:
    """Show the component containment tree."""
    from rich.tree import Tree

    from infradiagram.core.components import Component, Container

    diagram = ctx.load_document(document)

    def label(component: Component) -> str:
        text = f"[cyan]{component.name or '-'}[/cyan] [dim]{component.type}[/dim]"
        if ids:
            text += f" [dim]{component.id}[/dim]"
        return text

    def build(node: Tree, container: Container) -> None:
        for child in container.children:
            branch = node.add(label(child))
            if isinstance(child, Container):
                build(branch, child)

    root = Tree(label(diagram.region))
    build(root, diagram.region)
    console.print(root)


if __name__ == "__main__":
    cli()

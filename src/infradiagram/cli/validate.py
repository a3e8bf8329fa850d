"""Validation CLI command."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from infradiagram.cli.main import Context, pass_context

console = Console()


@click.command()
@click.argument("document", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on warnings",
)
@pass_context
def validate(ctx: Context, document: Path, strict: bool) -> None:
    """
    Validate a diagram document.

    Checks that every node type is registered, component ids are
    unique and every relationship endpoint exists.

    Examples:

        # Basic validation
        infradiagram validate diagram.yml

        # Treat skipped nodes and self-references as failures
        infradiagram validate --strict diagram.yml
    """
    errors: list[str] = []
    warnings: list[str] = []

    console.print("[bold]Loading document...[/bold]")
    try:
        diagram = ctx.load_document(document)
    except click.ClickException as e:
        console.print(f"  [red]✗[/red] {e.message}")
        raise SystemExit(1)
    console.print(f"  [green]✓[/green] Document loaded: {len(diagram)} components")

    for skipped in diagram.skipped_nodes:
        warnings.append(f"Skipped node: {skipped}")
        console.print(f"  [yellow]![/yellow] Skipped node: {skipped}")

    # Check for duplicate component IDs
    console.print("[bold]Checking component ids...[/bold]")
    seen_ids: set[str] = set()
    for component in diagram.iter_components():
        if component.id in seen_ids:
            errors.append(f"Duplicate component ID: {component.id}")
            console.print(f"  [red]✗[/red] Duplicate component ID: {component.id}")
        seen_ids.add(component.id)
    if not any(e.startswith("Duplicate component") for e in errors):
        console.print("  [green]✓[/green] All component ids unique")

    # Check relationship endpoints
    if diagram.relationships:
        console.print("[bold]Checking relationships...[/bold]")
        seen_rel_ids: set[str] = set()
        before = len(errors)
        for rel in diagram.relationships:
            if rel.id in seen_rel_ids:
                errors.append(f"Duplicate relationship ID: {rel.id}")
            seen_rel_ids.add(rel.id)
            for role, endpoint in (("source", rel.source_id), ("target", rel.target_id)):
                if endpoint not in seen_ids:
                    errors.append(f"Relationship '{rel.id}': {role} not found: {endpoint}")
                    console.print(f"  [red]✗[/red] Relationship '{rel.id}': {role} not found")
            if rel.source_id == rel.target_id:
                warnings.append(f"Relationship '{rel.id}' relates {rel.source_id} to itself")
                console.print(f"  [yellow]![/yellow] Relationship '{rel.id}' is a self-reference")
        if len(errors) == before:
            console.print("  [green]✓[/green] All relationship endpoints valid")

    # Summary
    console.print("\n[bold]Validation Summary[/bold]")
    console.print(f"  Errors: {len(errors)}")
    console.print(f"  Warnings: {len(warnings)}")

    if errors:
        console.print("\n[red bold]Validation failed[/red bold]")
        for err in errors:
            console.print(f"  [red]•[/red] {err}")
        raise SystemExit(1)

    if warnings and strict:
        console.print("\n[yellow bold]Validation failed (strict mode)[/yellow bold]")
        for warn in warnings:
            console.print(f"  [yellow]•[/yellow] {warn}")
        raise SystemExit(1)

    if warnings:
        console.print("\n[yellow]Warnings:[/yellow]")
        for warn in warnings:
            console.print(f"  [yellow]•[/yellow] {warn}")

    console.print("\n[green bold]Validation passed[/green bold]")

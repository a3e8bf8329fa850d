"""Mermaid diagram generation."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from infradiagram.core.components import Container
from infradiagram.core.schema import RelationshipType

if TYPE_CHECKING:
    from infradiagram.core.components import Component
    from infradiagram.core.document import DiagramDocument

ARROWS = {
    RelationshipType.DEPENDS_ON: "-.->",
    RelationshipType.CONNECTS_TO: "-->",
    RelationshipType.REFERENCES: "-->",
}


def node_id(component_id: str) -> str:
    """Mermaid-safe node id for a component id."""
    return "n_" + re.sub(r"[^A-Za-z0-9_]", "_", component_id)


def clean_label(text: str) -> str:
    # Quotes and brackets break Mermaid labels
    return re.sub(r"[\"\[\]{}()|]", "", text)


def node_label(component: Component) -> str:
    return clean_label(component.name or component.type)


def _render(component: Component, lines: list[str], depth: int) -> None:
    indent = "    " * depth
    if isinstance(component, Container):
        lines.append(f'{indent}subgraph {node_id(component.id)}["{node_label(component)}"]')
        for child in component.children:
            _render(child, lines, depth + 1)
        lines.append(f"{indent}end")
    else:
        lines.append(f'{indent}{node_id(component.id)}["{node_label(component)}"]')


def generate_mermaid(document: DiagramDocument) -> str:
    """
    Generate Mermaid flowchart diagram.

    Containers become nested subgraphs. Containment relationships are
    not drawn as arrows since the nesting already shows them.

    Returns Markdown with embedded Mermaid diagram.
    """
    lines = [f"# {document.name}", "", "```mermaid", "flowchart TB"]

    _render(document.region, lines, 1)

    lines.append("")
    lines.append("    %% Relationships")

    seen_edges: set[tuple[str, str, str]] = set()
    for relationship in document.relationships:
        if relationship.type == RelationshipType.CONTAINS:
            continue

        source = document.find_component_by_id(relationship.source_id)
        target = document.find_component_by_id(relationship.target_id)
        if source is None or target is None:
            continue

        # Skip if we've already drawn this edge
        edge_key = (source.id, target.id, relationship.type.value)
        if edge_key in seen_edges:
            continue
        seen_edges.add(edge_key)

        arrow = ARROWS[relationship.type]
        label = relationship.label or relationship.type.value
        lines.append(f"    {node_id(source.id)} {arrow}|{clean_label(label)}| {node_id(target.id)}")

    lines.append("```")
    lines.append("")
    lines.append("## Legend")
    lines.append("")
    lines.append("- `-.->` Dependency")
    lines.append("- `-->` Connection or reference")

    return "\n".join(lines)
"""
Infradiagram - Infrastructure diagram documents built from Terraform sources.

This package provides tools for:
- Modeling cloud components as a containment tree rooted at a region
- Relating components with typed relationships that never dangle
- Registering component kinds for polymorphic save/restore
- Converting parsed Terraform resources into diagrams
- Exporting diagrams as Mermaid flowcharts
"""

__version__ = "0.1.0"

from infradiagram.core.document import DiagramDocument
from infradiagram.core.registry import ComponentRegistry
from infradiagram.core.relationships import Relationship
from infradiagram.core.schema import RelationshipType

__all__ = [
    "__version__",
    "DiagramDocument",
    "ComponentRegistry",
    "Relationship",
    "RelationshipType",
]

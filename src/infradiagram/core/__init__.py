"""Core domain model for infrastructure diagrams."""

from infradiagram.core.components import Component, Container, Region
from infradiagram.core.config import DiagramConfig, ResourceMapping
from infradiagram.core.document import DiagramDocument, Placement, SourceFiles
from infradiagram.core.errors import (
    DiagramError,
    DocumentFormatError,
    DuplicateComponentError,
    EndpointNotFoundError,
    ParentNotFoundError,
    UnknownComponentTypeError,
)
from infradiagram.core.registry import ComponentKind, ComponentRegistry, default_registry
from infradiagram.core.relationships import Relationship
from infradiagram.core.schema import MissingParentPolicy, RelationshipType, UnknownTypePolicy

__all__ = [
    "Component",
    "Container",
    "Region",
    "DiagramConfig",
    "ResourceMapping",
    "DiagramDocument",
    "Placement",
    "SourceFiles",
    "DiagramError",
    "DocumentFormatError",
    "DuplicateComponentError",
    "EndpointNotFoundError",
    "ParentNotFoundError",
    "UnknownComponentTypeError",
    "ComponentKind",
    "ComponentRegistry",
    "default_registry",
    "Relationship",
    "MissingParentPolicy",
    "RelationshipType",
    "UnknownTypePolicy",
]

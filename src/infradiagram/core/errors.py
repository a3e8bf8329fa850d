"""Errors raised by the diagram document model."""

from __future__ import annotations


class DiagramError(Exception):
    """Base class for diagram document errors."""

    pass


class ParentNotFoundError(DiagramError):
    """Raised (or returned) when a requested parent container does not exist."""

    def __init__(self, parent_id: str, component_id: str) -> None:
        super().__init__(f"Parent container not found: {parent_id} (adding {component_id})")
        self.parent_id = parent_id
        self.component_id = component_id


class EndpointNotFoundError(DiagramError):
    """Raised when a relationship endpoint is not in the component tree."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Relationship endpoint(s) not found: {', '.join(missing)}")
        self.missing = missing


class UnknownComponentTypeError(DiagramError):
    """Raised when no factory is registered for a component type tag."""

    def __init__(self, type_tag: str | None, node_id: str | None = None) -> None:
        where = f" (node {node_id})" if node_id else ""
        super().__init__(f"Unknown component type: {type_tag!r}{where}")
        self.type_tag = type_tag
        self.node_id = node_id


class DuplicateComponentError(DiagramError):
    """Raised when a component id is already present in the tree."""

    def __init__(self, component_id: str) -> None:
        super().__init__(f"Component already in diagram: {component_id}")
        self.component_id = component_id


class DocumentFormatError(DiagramError):
    """Raised when a serialized document cannot be read."""

    pass

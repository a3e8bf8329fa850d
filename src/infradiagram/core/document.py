"""The diagram document: a region tree plus a relationship graph."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterator

import yaml
from pydantic import ValidationError

from infradiagram.core.components import REGION_TYPE, Component, Container
from infradiagram.core.config import DiagramConfig
from infradiagram.core.errors import (
    DiagramError,
    DocumentFormatError,
    DuplicateComponentError,
    EndpointNotFoundError,
    ParentNotFoundError,
)
from infradiagram.core.registry import ComponentRegistry, default_registry, new_id
from infradiagram.core.relationships import Relationship
from infradiagram.core.schema import DocumentSchema, MissingParentPolicy, RelationshipType

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yml", ".yaml"}


@dataclass
class SourceFiles:
    """Where the diagram's configuration sources came from."""

    root_folder: str
    files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"rootFolder": self.root_folder, "files": list(self.files)}


@dataclass
class Placement:
    """
    Result of adding a component.

    ``error`` holds the ParentNotFoundError when the requested parent did
    not exist and the component was placed under the region instead.
    """

    component_id: str
    parent_id: str
    requested_parent_id: str | None = None
    error: ParentNotFoundError | None = None

    @property
    def fell_back(self) -> bool:
        return self.error is not None


class DiagramDocument:
    """
    A diagram of infrastructure components.

    Owns one region (the root container) and a collection of
    relationships between component ids. All edits go through this
    class so that relationships never outlive their endpoints.

    Not thread-safe: callers must serialize access.
    """

    def __init__(
        self,
        name: str,
        region_name: str | None = None,
        *,
        registry: ComponentRegistry | None = None,
        config: DiagramConfig | None = None,
        id_factory: Callable[[], str] = new_id,
        id: str | None = None,
        region: Container | None = None,
    ) -> None:
        """
        Create a document.

        Args:
            name: Display name
            region_name: Cloud region for the default region (ignored if
                ``region`` is given)
            registry: Component registry; the process-wide one if omitted
            config: Editing policies; defaults if omitted
            id_factory: Generator for relationship and document ids
            id: Document id (generated if omitted)
            region: Existing root container to adopt
        """
        if registry is None:
            registry = default_registry()
        else:
            registry.initialize()
        self._registry = registry
        self.config = config or DiagramConfig()
        self._id_factory = id_factory
        self.id = id or id_factory()
        self.name = name
        if region is None:
            region = self._registry.create(
                REGION_TYPE,
                id=id_factory(),
                regionName=region_name or self.config.default_region,
            )
        if not isinstance(region, Container):
            raise DocumentFormatError(f"Region must be a container, got {region.type}")
        self.region: Container = region
        self.relationships: list[Relationship] = []
        self.terraform_source: str | None = None
        self.source_files: SourceFiles | None = None
        # Nodes dropped during load: unregistered types or malformed records
        self.skipped_nodes: list[DiagramError] = []

    @property
    def registry(self) -> ComponentRegistry:
        return self._registry

    # --- Components ---

    def create_component(self, type_tag: str, **attributes: Any) -> Component:
        """Build a component of a registered kind with a fresh id (not yet added)."""
        return self._registry.create(type_tag, id=self._id_factory(), **attributes)

    def add_component(self, component: Component, parent_id: str | None = None) -> Placement:
        """
        Add a component under a parent container (the region by default).

        The parent is found by pre-order depth-first search. If it does not
        exist, behaviour follows ``config.missing_parent``: either the
        component goes under the region and the returned Placement carries
        a ParentNotFoundError, or the error is raised and nothing changes.
        """
        self._check_not_present(component)

        if parent_id is None:
            self.region.add_child(component)
            logger.debug("Added %s to region", component.id)
            return Placement(component.id, self.region.id)

        parent = self.region.find_container(parent_id)
        if parent is not None:
            parent.add_child(component)
            logger.debug("Added %s to %s", component.id, parent.id)
            return Placement(component.id, parent.id, parent_id)

        error = ParentNotFoundError(parent_id, component.id)
        if self.config.missing_parent == MissingParentPolicy.FAIL:
            raise error
        logger.warning("%s; placing under region %s", error, self.region.id)
        self.region.add_child(component)
        return Placement(component.id, self.region.id, parent_id, error)

    def _check_not_present(self, component: Component) -> None:
        incoming = {component.id}
        if isinstance(component, Container):
            incoming.update(c.id for c in component.iter_descendants())
        for existing in self.iter_components():
            if existing.id in incoming:
                raise DuplicateComponentError(existing.id)

    def remove_component(self, component_id: str) -> Component | None:
        """
        Remove a component (and its subtree) from the tree.

        Relationships touching the component or any of its descendants
        are pruned. Removing the region or an unknown id does nothing.
        """
        if component_id == self.region.id:
            logger.debug("Refusing to remove region %s", component_id)
            return None

        removed = self.region.remove_descendant(component_id)
        gone = {component_id}
        if isinstance(removed, Container):
            gone.update(c.id for c in removed.iter_descendants())

        before = len(self.relationships)
        self.relationships = [
            r for r in self.relationships if r.source_id not in gone and r.target_id not in gone
        ]
        if removed is not None:
            logger.debug(
                "Removed %s (%d components, %d relationships)",
                component_id,
                len(gone),
                before - len(self.relationships),
            )
        return removed

    def find_component_by_id(self, component_id: str) -> Component | None:
        """Get a component by id; the region itself for the root id, else None if absent."""
        if self.region.id == component_id:
            return self.region
        for component in self.region.iter_descendants():
            if component.id == component_id:
                return component
        return None

    def parent_of(self, component_id: str) -> Container | None:
        """Get the container that directly holds a component."""
        return self.region.find_parent(component_id)

    def iter_components(self) -> Iterator[Component]:
        """Iterate the region and all descendants in pre-order."""
        yield self.region
        yield from self.region.iter_descendants()

    # --- Relationships ---

    def add_relationship(
        self,
        source_id: str,
        target_id: str,
        type: RelationshipType | str,
        label: str | None = None,
    ) -> Relationship:
        """
        Relate two components that are both in the tree.

        Raises EndpointNotFoundError (and stores nothing) if either id is
        not found.
        """
        missing = [
            endpoint
            for endpoint in (source_id, target_id)
            if self.find_component_by_id(endpoint) is None
        ]
        if missing:
            raise EndpointNotFoundError(missing)

        relationship = Relationship(self._id_factory(), source_id, target_id, type, label)
        self.relationships.append(relationship)
        return relationship

    def remove_relationship(self, relationship_id: str) -> bool:
        """Remove a relationship by id. Returns False if it was not present."""
        before = len(self.relationships)
        self.relationships = [r for r in self.relationships if r.id != relationship_id]
        return len(self.relationships) != before

    def get_relationship(self, relationship_id: str) -> Relationship | None:
        for relationship in self.relationships:
            if relationship.id == relationship_id:
                return relationship
        return None

    def relationships_for(self, component_id: str) -> list[Relationship]:
        """Get all relationships where a component is source or target."""
        return [r for r in self.relationships if r.involves(component_id)]

    # --- Provenance ---

    def set_source_files(self, root_folder: str, files: list[str]) -> None:
        """Record the source folder and files. Files are not checked."""
        self.source_files = SourceFiles(root_folder, list(files))

    # --- Serialization ---

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain nested record."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "region": self.region.to_dict(),
            "relationships": [r.to_dict() for r in self.relationships],
        }
        if self.terraform_source is not None:
            result["terraformSource"] = self.terraform_source
        if self.source_files is not None:
            result["sourceFiles"] = self.source_files.to_dict()
        return result

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        registry: ComponentRegistry | None = None,
        config: DiagramConfig | None = None,
    ) -> DiagramDocument:
        """
        Rebuild a document from its serialized record.

        Components are rebuilt through the registry with their attributes
        exactly as saved. Child nodes with an unregistered type or a
        malformed record are skipped or abort the load depending on
        ``config.unknown_types``; skipped nodes are listed in
        ``skipped_nodes``. Relationships are trusted as saved.
        """
        if not isinstance(data, dict):
            raise DocumentFormatError(f"Document must be a mapping, got {type(data).__name__}")
        try:
            schema = DocumentSchema.model_validate(data)
        except ValidationError as e:
            raise DocumentFormatError(f"Invalid document: {e}") from e

        if registry is None:
            registry = default_registry()
        else:
            registry.initialize()
        config = config or DiagramConfig()

        skipped: list[DiagramError] = []
        region = registry.reconstruct(schema.region, on_unknown=config.unknown_types, skipped=skipped)
        if not isinstance(region, Container):
            raise DocumentFormatError(f"Region must be a container, got {region.type}")

        document = cls(schema.name, registry=registry, config=config, id=schema.id, region=region)
        document.relationships = [
            Relationship(r.id, r.source_id, r.target_id, r.type, r.label) for r in schema.relationships
        ]
        document.terraform_source = schema.terraform_source
        if schema.source_files is not None:
            document.set_source_files(schema.source_files.root_folder, schema.source_files.files)
        document.skipped_nodes = skipped
        return document

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str, **kwargs: Any) -> DiagramDocument:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentFormatError(f"Invalid JSON: {e}") from e
        return cls.from_dict(data, **kwargs)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)

    @classmethod
    def from_yaml(cls, text: str, **kwargs: Any) -> DiagramDocument:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise DocumentFormatError(f"Invalid YAML: {e}") from e
        return cls.from_dict(data, **kwargs)

    def save(self, path: str | Path) -> None:
        """Write the document as YAML or JSON, chosen by file suffix."""
        path = Path(path)
        content = self.to_yaml() if path.suffix in YAML_SUFFIXES else self.to_json()
        path.write_text(content)

    @classmethod
    def load(cls, path: str | Path, **kwargs: Any) -> DiagramDocument:
        """Load a document from a YAML or JSON file."""
        path = Path(path)
        text = path.read_text()
        if path.suffix in YAML_SUFFIXES:
            return cls.from_yaml(text, **kwargs)
        return cls.from_json(text, **kwargs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DiagramDocument):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __len__(self) -> int:
        """Number of components, region included."""
        return sum(1 for _ in self.iter_components())

    def __contains__(self, component_id: str) -> bool:
        return self.find_component_by_id(component_id) is not None

    def __repr__(self) -> str:
        return f"DiagramDocument({self.name}, id={self.id[:8]}..., components={len(self)})"

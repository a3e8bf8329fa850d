"""Conversion of parsed Terraform resources into diagram documents."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from infradiagram.core.components import Container
from infradiagram.core.config import DiagramConfig, ResourceMapping
from infradiagram.core.document import DiagramDocument
from infradiagram.core.errors import DiagramError, DocumentFormatError
from infradiagram.core.registry import ComponentRegistry, default_registry
from infradiagram.core.schema import RelationshipType

logger = logging.getLogger(__name__)

# Containers are created first so that their contents can be placed inside them
CONTAINER_ORDER = ["aws_region", "aws_vpc", "aws_subnet", "aws_security_group"]

# Component attributes that point at an enclosing resource, most specific first
PARENT_REFERENCES = ["subnetId", "vpcId"]


class TerraformResource(BaseModel):
    """A resource block as produced by the Terraform parser."""

    model_config = ConfigDict(populate_by_name=True)

    id: str  # "<type>.<name>"
    type: str
    name: str
    attributes: dict[str, Any] = Field(default_factory=dict)
    dependencies: list[str] = Field(default_factory=list)
    source_file: str | None = Field(None, alias="sourceFile")


def load_resources(path: str | Path) -> list[TerraformResource]:
    """
    Load parsed resources from a YAML or JSON file.

    Accepts either a list of resources or a mapping with a
    ``resources`` key.
    """
    path = Path(path)
    with path.open() as f:
        data = yaml.safe_load(f)
    if isinstance(data, dict):
        data = data.get("resources", [])
    if not isinstance(data, list):
        raise DocumentFormatError(f"Expected a list of resources in {path}")
    try:
        return [TerraformResource.model_validate(r) for r in data]
    except ValidationError as e:
        raise DocumentFormatError(f"Invalid resource in {path}: {e}") from e


def lookup_path(data: dict[str, Any], dotted: str) -> Any:
    """Get a nested value by dotted path (e.g. ``tags.Name``)."""
    value: Any = data
    for part in dotted.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def reference_target(value: Any) -> str | None:
    """
    Get the resource id an attribute reference points at.

    ``"${aws_vpc.main.id}"`` and ``"aws_vpc.main.id"`` both give
    ``"aws_vpc.main"``.
    """
    if not isinstance(value, str):
        return None
    ref = value.strip()
    if ref.startswith("${") and ref.endswith("}"):
        ref = ref[2:-1].strip()
    parts = ref.split(".")
    if len(parts) < 2:
        return None
    return f"{parts[0]}.{parts[1]}"


def _creation_rank(resource: TerraformResource) -> int:
    if resource.type in CONTAINER_ORDER:
        return CONTAINER_ORDER.index(resource.type)
    return len(CONTAINER_ORDER)


class TerraformConverter:
    """
    Builds a diagram document from parsed Terraform resources.

    Each resource with a mapping becomes a component. Components are
    nested under the VPC or subnet they reference; dependencies between
    resources become relationships.
    """

    def __init__(
        self,
        resources: list[TerraformResource],
        config: DiagramConfig | None = None,
        registry: ComponentRegistry | None = None,
    ) -> None:
        self._resources = resources
        self._config = config or DiagramConfig()
        self._registry = registry or default_registry()
        # Terraform resource id -> component id
        self._component_ids: dict[str, str] = {}

    def convert(
        self,
        name: str | None = None,
        *,
        source_path: str | Path | None = None,
        root_folder: str | None = None,
    ) -> DiagramDocument:
        """
        Convert the resources into a new document.

        Args:
            name: Diagram name (derived from ``source_path`` if omitted)
            source_path: File the resources came from, used for the name
            root_folder: If given, recorded with the resources' source files
        """
        if name is None:
            name = f"{Path(source_path).stem} Diagram" if source_path else "Terraform Diagram"

        document = DiagramDocument(name, registry=self._registry, config=self._config)
        self._component_ids = {}

        converted = self._create_components(document)
        self._create_relationships(document, converted)

        document.terraform_source = json.dumps([r.id for r in converted])
        if root_folder is not None:
            files = sorted({r.source_file for r in converted if r.source_file})
            document.set_source_files(root_folder, files)

        logger.info(
            "Converted %d of %d resources (%d relationships)",
            len(converted),
            len(self._resources),
            len(document.relationships),
        )
        return document

    def _create_components(self, document: DiagramDocument) -> list[TerraformResource]:
        converted = []
        for resource in sorted(self._resources, key=_creation_rank):
            mapping = self._config.mapping_for(resource.type)
            if mapping is None:
                logger.debug("No mapping for %s", resource.type)
                continue
            if not mapping.accepts(resource.name):
                logger.debug("Resource %s excluded by pattern", resource.id)
                continue

            attributes = self.map_attributes(resource, mapping)
            try:
                component = document.create_component(mapping.component_type, **attributes)
            except DiagramError as e:
                logger.warning("Cannot create component for %s: %s", resource.id, e)
                continue

            parent_id = self._parent_for(document, component.type, attributes)
            document.add_component(component, parent_id)
            self._component_ids[resource.id] = component.id
            converted.append(resource)
        return converted

    @staticmethod
    def map_attributes(resource: TerraformResource, mapping: ResourceMapping) -> dict[str, Any]:
        """Translate Terraform attributes to component attributes."""
        attributes: dict[str, Any] = {}
        for terraform_path, component_attr in mapping.attribute_mapping.items():
            if component_attr in attributes:
                continue
            value = lookup_path(resource.attributes, terraform_path)
            if value is not None:
                attributes[component_attr] = value
        attributes.setdefault("name", resource.name)
        attributes["properties"] = {
            "terraformId": resource.id,
            "terraformType": resource.type,
            "sourceFile": resource.source_file,
        }
        return attributes

    def _parent_for(
        self, document: DiagramDocument, type_tag: str, attributes: dict[str, Any]
    ) -> str | None:
        """Find the referenced container that may hold this component type."""
        for key in PARENT_REFERENCES:
            target = reference_target(attributes.get(key))
            if target not in self._component_ids:
                continue
            parent = document.find_component_by_id(self._component_ids[target])
            if isinstance(parent, Container) and parent.can_contain(type_tag):
                return parent.id
            logger.debug("%s cannot be placed in %s", type_tag, target)
        return None

    def _create_relationships(
        self, document: DiagramDocument, converted: list[TerraformResource]
    ) -> None:
        for resource in converted:
            component_id = self._component_ids[resource.id]
            parent = document.parent_of(component_id)
            if parent is not None and parent.id != document.region.id:
                document.add_relationship(parent.id, component_id, RelationshipType.CONTAINS, "contains")

            for dependency in resource.dependencies:
                dependency_id = self._component_ids.get(dependency)
                if dependency_id is None:
                    logger.debug("Dependency %s of %s not in diagram", dependency, resource.id)
                    continue
                if parent is not None and dependency_id == parent.id:
                    continue
                document.add_relationship(
                    component_id, dependency_id, RelationshipType.DEPENDS_ON, "depends on"
                )


def convert_resources(
    resources: list[TerraformResource],
    config: DiagramConfig | None = None,
    **kwargs: Any,
) -> DiagramDocument:
    """Convert parsed resources into a diagram document."""
    return TerraformConverter(resources, config).convert(**kwargs)

"""Component type registry for polymorphic reconstruction."""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Any, Callable, Iterator

from pydantic import BaseModel, ValidationError

from infradiagram.core.components import REGION_TYPE, Component, Container, Region
from infradiagram.core.errors import DiagramError, DocumentFormatError, UnknownComponentTypeError
from infradiagram.core.schema import (
    ComponentAttributes,
    ComponentNodeSchema,
    EC2InstanceAttributes,
    RegionAttributes,
    SecurityGroupAttributes,
    SubnetAttributes,
    UnknownTypePolicy,
    VpcAttributes,
)

logger = logging.getLogger(__name__)

ComponentFactory = Callable[[dict[str, Any]], Component]


def new_id() -> str:
    """Generate a fresh component or relationship id."""
    return str(uuid.uuid4())


class ComponentKind:
    """
    Factory for one component type.

    Rebuilding a node keeps its attributes exactly as stored. The
    pydantic schema only supplies defaults and validation for new
    components (see ``attributes``). Children are attached by the
    registry, not by the kind.
    """

    def __init__(
        self,
        type_tag: str,
        schema: type[BaseModel] = ComponentAttributes,
        node_class: type[Component] = Component,
        allowed_child_types: list[str] | None = None,
    ) -> None:
        self.type_tag = type_tag
        self.schema = schema
        self.node_class = node_class
        self.allowed_child_types = allowed_child_types

    @property
    def is_container(self) -> bool:
        return issubclass(self.node_class, Container)

    def attributes(self, data: dict[str, Any]) -> dict[str, Any]:
        """Validate attributes for a new component and fill in defaults."""
        try:
            model = self.schema.model_validate(data)
        except ValidationError as e:
            raise DocumentFormatError(f"Invalid attributes for {self.type_tag}: {e}") from e
        return model.model_dump(by_alias=True)

    def __call__(self, node: dict[str, Any]) -> Component:
        attributes = copy.deepcopy(node.get("attributes") or {})
        if self.is_container:
            return self.node_class(
                node["id"], self.type_tag, attributes, allowed_child_types=self.allowed_child_types
            )
        return self.node_class(node["id"], self.type_tag, attributes)

    def __repr__(self) -> str:
        return f"ComponentKind({self.type_tag}, container={self.is_container})"


BUILTIN_KINDS = [
    ComponentKind(
        REGION_TYPE,
        RegionAttributes,
        Region,
        ["VpcComponent", "S3BucketComponent", "RDSInstanceComponent", "LambdaFunctionComponent"],
    ),
    ComponentKind(
        "VpcComponent",
        VpcAttributes,
        Container,
        ["SubnetComponent", "SecurityGroupComponent", "RouteTableComponent"],
    ),
    ComponentKind("SubnetComponent", SubnetAttributes, Container),
    ComponentKind(
        "SecurityGroupComponent",
        SecurityGroupAttributes,
        Container,
        ["EC2InstanceComponent", "RDSInstanceComponent", "LambdaFunctionComponent"],
    ),
    ComponentKind("EC2InstanceComponent", EC2InstanceAttributes, Component),
    ComponentKind("InternetGatewayComponent"),
    ComponentKind("RouteTableComponent"),
]


class ComponentRegistry:
    """
    Maps component type tags to reconstruction factories.

    This is the single extension point for new component kinds.
    Registering a tag that already exists replaces its factory (last
    write wins), so a kind can be reloaded without clearing the registry.
    """

    def __init__(self) -> None:
        self._factories: dict[str, ComponentFactory] = {}

    def register(self, type_tag: str, factory: ComponentFactory) -> None:
        """Associate a type tag with a factory, replacing any previous one."""
        if type_tag in self._factories:
            logger.debug("Replacing factory for component type %s", type_tag)
        self._factories[type_tag] = factory

    def register_kind(self, kind: ComponentKind) -> None:
        self.register(kind.type_tag, kind)

    def initialize(self) -> None:
        """Register the built-in kinds if nothing is registered yet."""
        if self._factories:
            return
        for kind in BUILTIN_KINDS:
            self.register_kind(kind)

    def get_factory(self, type_tag: str) -> ComponentFactory | None:
        return self._factories.get(type_tag)

    def list_registered_types(self) -> list[str]:
        """Get all registered type tags."""
        return list(self._factories)

    def create(self, type_tag: str, *, id: str | None = None, **attributes: Any) -> Component:
        """Build a new component of a registered kind, applying its attribute defaults."""
        factory = self._factories.get(type_tag)
        if factory is None:
            raise UnknownComponentTypeError(type_tag)
        if isinstance(factory, ComponentKind):
            attributes = factory.attributes(attributes)
        return factory({"id": id or new_id(), "type": type_tag, "attributes": attributes})

    def reconstruct(
        self,
        node: dict[str, Any],
        *,
        on_unknown: UnknownTypePolicy = UnknownTypePolicy.FAIL,
        skipped: list[DiagramError] | None = None,
    ) -> Component:
        """
        Rebuild a component (and, for containers, its subtree) from a record.

        Attributes are kept exactly as stored. The node itself must be
        well formed and have a registered type. Under the SKIP policy,
        descendants with unknown types or malformed records are left out
        and their errors are appended to ``skipped``; under FAIL the first
        one is raised.
        """
        if not isinstance(node, dict):
            raise DocumentFormatError(f"Component node must be a mapping, got {type(node).__name__}")
        try:
            schema = ComponentNodeSchema.model_validate(node)
        except ValidationError as e:
            raise DocumentFormatError(f"Invalid component node: {e}") from e

        factory = self._factories.get(schema.type)
        if factory is None:
            raise UnknownComponentTypeError(schema.type, schema.id)

        component = factory(schema.model_dump(exclude={"children"}))

        if isinstance(component, Container):
            for child_node in schema.children or []:
                try:
                    child = self.reconstruct(child_node, on_unknown=on_unknown, skipped=skipped)
                except (UnknownComponentTypeError, DocumentFormatError) as e:
                    if on_unknown != UnknownTypePolicy.SKIP:
                        raise
                    logger.warning("Skipping node: %s", e)
                    if skipped is not None:
                        skipped.append(e)
                    continue
                component.add_child(child)
        elif schema.children:
            logger.warning(
                "Ignoring %d children of non-container %s", len(schema.children), schema.id
            )

        return component

    def __len__(self) -> int:
        return len(self._factories)

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __contains__(self, type_tag: str) -> bool:
        return type_tag in self._factories


_default_registry = ComponentRegistry()


def default_registry() -> ComponentRegistry:
    """Get the process-wide registry, initializing it on first use."""
    _default_registry.initialize()
    return _default_registry

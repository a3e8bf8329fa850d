"""Component tree nodes: leaves, containers and the region root."""

from __future__ import annotations

import copy
from typing import Any, Iterable, Iterator

REGION_TYPE = "RegionComponent"


class Component:
    """
    A typed node in the diagram tree.

    The id and type tag are fixed at construction. Attributes are an
    open mapping holding the display name and kind-specific configuration.
    """

    is_container = False

    def __init__(self, id: str, type: str, attributes: dict[str, Any] | None = None) -> None:
        self._id = id
        self._type = type
        self.attributes: dict[str, Any] = dict(attributes or {})

    @property
    def id(self) -> str:
        """The component id (immutable)."""
        return self._id

    @property
    def type(self) -> str:
        """The component type tag (immutable)."""
        return self._type

    @property
    def name(self) -> str:
        name = self.attributes.get("name")
        return "" if name is None else str(name)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain record."""
        return {
            "id": self._id,
            "type": self._type,
            "attributes": copy.deepcopy(self.attributes),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Component):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.type}, id={self._id[:8]}..., name={self.name!r})"


class Container(Component):
    """A component that owns an ordered sequence of child components."""

    is_container = True

    def __init__(
        self,
        id: str,
        type: str,
        attributes: dict[str, Any] | None = None,
        children: list[Component] | None = None,
        allowed_child_types: Iterable[str] | None = None,
    ) -> None:
        super().__init__(id, type, attributes)
        self.children: list[Component] = list(children or [])
        # None means any type may be nested here
        self.allowed_child_types: frozenset[str] | None = (
            frozenset(allowed_child_types) if allowed_child_types is not None else None
        )

    def can_contain(self, type_tag: str) -> bool:
        """Check whether a component type may be nested in this container."""
        return self.allowed_child_types is None or type_tag in self.allowed_child_types

    def add_child(self, component: Component) -> None:
        """Append a child. Duplicate ids and child types are not checked here."""
        self.children.append(component)

    def add_child_if_allowed(self, component: Component) -> bool:
        """Append a child only if its type may be nested here."""
        if not self.can_contain(component.type):
            return False
        self.add_child(component)
        return True

    def remove_child(self, component_id: str) -> Component | None:
        """Remove the first direct child with this id."""
        for index, child in enumerate(self.children):
            if child.id == component_id:
                return self.children.pop(index)
        return None

    def get_child(self, component_id: str) -> Component | None:
        for child in self.children:
            if child.id == component_id:
                return child
        return None

    def iter_descendants(self) -> Iterator[Component]:
        """Yield every descendant in pre-order depth-first order."""
        stack: list[Component] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, Container):
                stack.extend(reversed(node.children))

    def iter_containers(self) -> Iterator[Container]:
        """Yield this container and every descendant container, pre-order."""
        yield self
        for node in self.iter_descendants():
            if isinstance(node, Container):
                yield node

    def find_container(self, container_id: str) -> Container | None:
        """Pre-order search for a container by id; first match wins."""
        for container in self.iter_containers():
            if container.id == container_id:
                return container
        return None

    def find_parent(self, component_id: str) -> Container | None:
        """Return the container holding a direct child with this id."""
        for container in self.iter_containers():
            if container.get_child(component_id) is not None:
                return container
        return None

    def remove_descendant(self, component_id: str) -> Component | None:
        """
        Remove a component from whichever container holds it.

        Only the first direct-child match is removed; the search stops
        as soon as it succeeds.
        """
        for container in self.iter_containers():
            removed = container.remove_child(component_id)
            if removed is not None:
                return removed
        return None

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["children"] = [child.to_dict() for child in self.children]
        return result


class Region(Container):
    """The root container of a diagram document."""

    @property
    def region_name(self) -> str:
        return self.attributes.get("regionName", "")

    @property
    def availability_zones(self) -> list[str]:
        return list(self.attributes.get("availabilityZones") or [])

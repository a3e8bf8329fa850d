"""Relationships between diagram components."""

from __future__ import annotations

from typing import Any

from infradiagram.core.schema import RelationshipSchema, RelationshipType


class Relationship:
    """
    A directed, typed edge between two component ids.

    Endpoints are plain id strings, not references to component objects;
    the document prunes relationships when an endpoint is removed.
    """

    def __init__(
        self,
        id: str,
        source_id: str,
        target_id: str,
        type: RelationshipType | str = RelationshipType.CONNECTS_TO,
        label: str | None = None,
    ) -> None:
        self.id = id
        self.source_id = source_id
        self.target_id = target_id
        self.type = RelationshipType(type)
        self.label = label

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Relationship:
        """Create a relationship from its serialized record."""
        schema = RelationshipSchema.model_validate(data)
        return cls(schema.id, schema.source_id, schema.target_id, schema.type, schema.label)

    def involves(self, component_id: str) -> bool:
        """Check if a component is the source or target."""
        return component_id in (self.source_id, self.target_id)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "type": self.type.value,
        }
        if self.label is not None:
            result["label"] = self.label
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Relationship):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"Relationship({self.id}, {self.source_id} -{self.type.value}-> {self.target_id})"

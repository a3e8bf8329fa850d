"""Pydantic schemas for component attributes and serialized documents."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RelationshipType(str, Enum):
    """Types of relationships between components."""

    CONTAINS = "contains"
    CONNECTS_TO = "connects_to"
    DEPENDS_ON = "depends_on"
    REFERENCES = "references"


class MissingParentPolicy(str, Enum):
    """What add_component does when the requested parent does not exist."""

    FALLBACK_TO_ROOT = "fallback_to_root"
    FAIL = "fail"


class UnknownTypePolicy(str, Enum):
    """What loading does with a node whose type tag is not registered."""

    SKIP = "skip"
    FAIL = "fail"


# --- Component attribute schemas ---


class ComponentAttributes(BaseModel):
    """
    Attributes shared by every component kind.

    Attributes are an open mapping: keys that a kind does not declare
    are kept as-is so that they survive a save/load cycle.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)


class RegionAttributes(ComponentAttributes):
    name: str = "Region"
    region_name: str = Field("us-east-1", alias="regionName")
    availability_zones: list[str] | None = Field(None, alias="availabilityZones")

    def model_post_init(self, __context: Any) -> None:
        if self.availability_zones is None:
            self.availability_zones = [f"{self.region_name}{zone}" for zone in "abc"]


class VpcAttributes(ComponentAttributes):
    cidr_block: str = Field("10.0.0.0/16", alias="cidrBlock")


class SubnetAttributes(ComponentAttributes):
    cidr_block: str = Field("10.0.1.0/24", alias="cidrBlock")
    availability_zone: str = Field("us-east-1a", alias="availabilityZone")
    is_public: bool = Field(False, alias="isPublic")


class SecurityGroupAttributes(ComponentAttributes):
    description: str | None = None


class EC2InstanceAttributes(ComponentAttributes):
    instance_type: str = Field("t2.micro", alias="instanceType")
    ami: str = "ami-12345"


# --- Document schemas ---


class ComponentNodeSchema(BaseModel):
    """A serialized component node. Unknown keys are ignored."""

    id: str
    type: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    children: list[Any] | None = None

    @field_validator("attributes", mode="before")
    @classmethod
    def normalize_attributes(cls, v: Any) -> dict[str, Any]:
        """Treat a null attribute block as empty."""
        return v or {}


class RelationshipSchema(BaseModel):
    """A serialized relationship record."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)

    id: str
    source_id: str = Field(alias="sourceId")
    target_id: str = Field(alias="targetId")
    type: RelationshipType = RelationshipType.CONNECTS_TO
    label: str | None = None


class SourceFilesSchema(BaseModel):
    """Provenance of the configuration files a diagram was built from."""

    model_config = ConfigDict(populate_by_name=True)

    root_folder: str = Field("", alias="rootFolder")
    files: list[str] = Field(default_factory=list)


class DocumentSchema(BaseModel):
    """Schema for a complete serialized diagram document."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = "Untitled Diagram"
    region: dict[str, Any]
    relationships: list[RelationshipSchema] = Field(default_factory=list)
    terraform_source: str | None = Field(None, alias="terraformSource")
    source_files: SourceFilesSchema | None = Field(None, alias="sourceFiles")

    @field_validator("relationships", mode="before")
    @classmethod
    def normalize_relationships(cls, v: Any) -> list[Any]:
        return v or []

"""Configuration for diagram documents and Terraform resource mapping."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from infradiagram.core.errors import DocumentFormatError
from infradiagram.core.schema import MissingParentPolicy, UnknownTypePolicy


class ResourceMapping(BaseModel):
    """Maps a Terraform resource type to a diagram component type."""

    model_config = ConfigDict(populate_by_name=True)

    terraform_type: str = Field(alias="terraformType")
    component_type: str = Field(alias="componentType")
    # Terraform attribute path -> component attribute, e.g. "tags.Name" -> "name"
    attribute_mapping: dict[str, str] = Field(default_factory=dict, alias="attributeMapping")
    include_pattern: str | None = Field(None, alias="includePattern")
    exclude_pattern: str | None = Field(None, alias="excludePattern")

    @field_validator("include_pattern", "exclude_pattern")
    @classmethod
    def validate_pattern(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Invalid pattern {v!r}: {e}") from e
        return v

    def accepts(self, resource_name: str) -> bool:
        """Check a resource name against the include/exclude patterns."""
        if self.include_pattern and not re.search(self.include_pattern, resource_name):
            return False
        if self.exclude_pattern and re.search(self.exclude_pattern, resource_name):
            return False
        return True


def _mapping(terraform_type: str, component_type: str, **attrs: str) -> ResourceMapping:
    attribute_mapping = {"tags.Name": "name", "name": "name"}
    attribute_mapping.update(attrs)
    return ResourceMapping(
        terraform_type=terraform_type,
        component_type=component_type,
        attribute_mapping=attribute_mapping,
    )


def default_resource_mappings() -> list[ResourceMapping]:
    """Mappings for the common AWS resources."""
    return [
        _mapping("aws_vpc", "VpcComponent", cidr_block="cidrBlock"),
        _mapping(
            "aws_subnet",
            "SubnetComponent",
            cidr_block="cidrBlock",
            availability_zone="availabilityZone",
            map_public_ip_on_launch="isPublic",
            vpc_id="vpcId",
        ),
        _mapping(
            "aws_instance",
            "EC2InstanceComponent",
            instance_type="instanceType",
            ami="ami",
            subnet_id="subnetId",
        ),
        _mapping("aws_security_group", "SecurityGroupComponent", description="description", vpc_id="vpcId"),
        _mapping("aws_internet_gateway", "InternetGatewayComponent", vpc_id="vpcId"),
        _mapping("aws_route_table", "RouteTableComponent", vpc_id="vpcId"),
    ]


class DiagramConfig(BaseModel):
    """
    Settings that control document editing, loading and conversion.

    Loaded from a YAML (or JSON) file; every field has a default so an
    empty file is a valid configuration.
    """

    model_config = ConfigDict(populate_by_name=True)

    default_region: str = "us-east-1"
    missing_parent: MissingParentPolicy = MissingParentPolicy.FALLBACK_TO_ROOT
    unknown_types: UnknownTypePolicy = UnknownTypePolicy.SKIP
    resource_mappings: list[ResourceMapping] = Field(
        default_factory=default_resource_mappings, alias="resourceMappings"
    )

    @classmethod
    def load(cls, path: str | Path) -> DiagramConfig:
        """Load configuration from a YAML or JSON file."""
        path = Path(path)
        with path.open() as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DiagramConfig:
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise DocumentFormatError(f"Invalid diagram configuration: {e}") from e

    def mapping_for(self, terraform_type: str) -> ResourceMapping | None:
        """Get the mapping for a Terraform resource type."""
        for mapping in self.resource_mappings:
            if mapping.terraform_type == terraform_type:
                return mapping
        return None

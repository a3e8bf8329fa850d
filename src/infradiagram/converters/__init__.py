"""Converters from configuration sources to diagram documents."""

from infradiagram.converters.terraform import (
    TerraformConverter,
    TerraformResource,
    convert_resources,
    load_resources,
)

__all__ = [
    "TerraformConverter",
    "TerraformResource",
    "convert_resources",
    "load_resources",
]
